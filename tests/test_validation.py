"""Tests for tool input validation and the enrichment cross-field rules."""

import pytest

from core.errors import ValidationError
from core.validation import (
    IDENTIFIER_RULE,
    WEBHOOK_RULE,
    EnrichPersonInput,
    check_enrichment_rules,
    is_well_formed_url,
    validate_enrich_input,
    validate_search_and_enrich_input,
    validate_search_input,
)


# ---------------------------------------------------------------------------
# search_people
# ---------------------------------------------------------------------------
class TestSearchInput:
    def test_defaults(self) -> None:
        query = validate_search_input({"person_titles": ["CEO"]})
        assert query.page == 1
        assert query.per_page == 25
        assert query.person_locations is None
        assert query.q_keywords is None

    def test_empty_titles_rejected(self) -> None:
        with pytest.raises(ValidationError, match="person_titles"):
            validate_search_input({"person_titles": []})

    def test_missing_titles_rejected(self) -> None:
        with pytest.raises(ValidationError, match="person_titles"):
            validate_search_input({})

    def test_none_input_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_search_input(None)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"person_titles": ["CEO"] * 51},
            {"person_locations": ["Paris"] * 51},
            {"q_keywords": "x" * 501},
            {"page": 0},
            {"page": 101},
            {"per_page": 0},
            {"per_page": 101},
        ],
    )
    def test_bounds(self, overrides: dict) -> None:
        raw = {"person_titles": ["CEO"], **overrides}
        with pytest.raises(ValidationError):
            validate_search_input(raw)

    def test_upper_bounds_accepted(self) -> None:
        query = validate_search_input({
            "person_titles": ["CEO"] * 50,
            "person_locations": ["Paris"] * 50,
            "q_keywords": "x" * 500,
            "page": 100,
            "per_page": 100,
        })
        assert query.page == 100
        assert query.per_page == 100

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError, match="bogus"):
            validate_search_input({"person_titles": ["CEO"], "bogus": 1})

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(ValidationError, match="expected an object"):
            validate_search_input(["CEO"])  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# enrich_person
# ---------------------------------------------------------------------------
class TestEnrichInput:
    def test_empty_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_enrich_input({})
        assert exc_info.value.violations == [IDENTIFIER_RULE]

    def test_email_accepted(self) -> None:
        query = validate_enrich_input({"email": "a@b.com"})
        assert query.email == "a@b.com"
        assert query.reveal_personal_emails is False
        assert query.reveal_phone_number is False
        assert query.is_async is False

    def test_malformed_email_rejected(self) -> None:
        with pytest.raises(ValidationError, match="email"):
            validate_enrich_input({"email": "not-an-email"})

    def test_linkedin_url_kept_verbatim(self) -> None:
        query = validate_enrich_input({"linkedin_url": "https://linkedin.com/in/ada"})
        assert query.linkedin_url == "https://linkedin.com/in/ada"

    def test_malformed_linkedin_url_rejected(self) -> None:
        with pytest.raises(ValidationError, match="linkedin_url"):
            validate_enrich_input({"linkedin_url": "linkedin ada"})

    def test_malformed_webhook_rejected(self) -> None:
        with pytest.raises(ValidationError, match="webhook_url"):
            validate_enrich_input({"email": "a@b.com", "webhook_url": "not a url"})

    def test_first_last_needs_company(self) -> None:
        with pytest.raises(ValidationError):
            validate_enrich_input({"first_name": "Ada", "last_name": "Lovelace"})

    def test_first_last_with_domain(self) -> None:
        query = validate_enrich_input(
            {"first_name": "Ada", "last_name": "Lovelace", "domain": "engines.io"}
        )
        assert query.domain == "engines.io"

    def test_first_name_alone_with_company_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_enrich_input({"first_name": "Ada", "organization_name": "Engines"})

    def test_full_name_with_organization(self) -> None:
        query = validate_enrich_input({"name": "Ada Lovelace", "organization_name": "Engines"})
        assert query.name == "Ada Lovelace"

    def test_length_bounds(self) -> None:
        with pytest.raises(ValidationError, match="first_name"):
            validate_enrich_input({
                "first_name": "A" * 101,
                "last_name": "Lovelace",
                "domain": "engines.io",
            })
        with pytest.raises(ValidationError, match="organization_name"):
            validate_enrich_input({"name": "Ada", "organization_name": "O" * 201})

    def test_waterfall_without_webhook_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_enrich_input({"email": "a@b.com", "run_waterfall_email": True})
        assert exc_info.value.violations == [WEBHOOK_RULE]

    def test_waterfall_with_server_default_accepted(self) -> None:
        query = validate_enrich_input(
            {"email": "a@b.com", "run_waterfall_email": True},
            default_webhook_url="https://hooks.acme.io/apollo",
        )
        assert query.is_async is True
        assert query.webhook_url is None

    def test_waterfall_with_explicit_webhook_accepted(self) -> None:
        query = validate_enrich_input({
            "email": "a@b.com",
            "run_waterfall_phone": True,
            "webhook_url": "https://hooks.acme.io/apollo",
        })
        assert query.is_async is True

    def test_waterfall_false_needs_no_webhook(self) -> None:
        query = validate_enrich_input({"email": "a@b.com", "run_waterfall_email": False})
        assert query.is_async is False


class TestCheckEnrichmentRules:
    def test_reports_every_violation(self) -> None:
        query = EnrichPersonInput(run_waterfall_email=True)
        assert check_enrichment_rules(query) == [IDENTIFIER_RULE, WEBHOOK_RULE]

    def test_valid_query_has_no_violations(self) -> None:
        query = EnrichPersonInput(email="a@b.com")
        assert check_enrichment_rules(query) == []

    def test_server_default_satisfies_webhook_rule(self) -> None:
        query = EnrichPersonInput(linkedin_url="https://linkedin.com/in/ada", run_waterfall_phone=True)
        assert check_enrichment_rules(query, "https://hooks.acme.io/apollo") == []

    def test_empty_strings_are_not_identifiers(self) -> None:
        query = EnrichPersonInput(name="", organization_name="Engines")
        assert check_enrichment_rules(query) == [IDENTIFIER_RULE]


# ---------------------------------------------------------------------------
# search_and_enrich
# ---------------------------------------------------------------------------
class TestSearchAndEnrichInput:
    def test_search_fields_and_flags(self) -> None:
        query = validate_search_and_enrich_input(
            {"person_titles": ["CTO"], "per_page": 5, "reveal_phone_number": True}
        )
        assert query.per_page == 5
        assert query.reveal_phone_number is True
        assert query.search_arguments() == {
            "person_titles": ["CTO"],
            "person_locations": None,
            "q_keywords": None,
            "page": 1,
            "per_page": 5,
        }

    def test_waterfall_needs_webhook(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_search_and_enrich_input({"person_titles": ["CTO"], "run_waterfall_email": True})
        assert exc_info.value.violations == [WEBHOOK_RULE]

    def test_waterfall_with_default(self) -> None:
        query = validate_search_and_enrich_input(
            {"person_titles": ["CTO"], "run_waterfall_email": True},
            default_webhook_url="https://hooks.acme.io/apollo",
        )
        assert query.is_async is True

    def test_search_bounds_still_apply(self) -> None:
        with pytest.raises(ValidationError):
            validate_search_and_enrich_input({"person_titles": []})


@pytest.mark.parametrize(
    "value,expected",
    [
        ("https://www.linkedin.com/in/ada", True),
        ("http://linkedin.com/in/ada", True),
        ("linkedin.com/in/ada", False),
        ("", False),
        (None, False),
    ],
)
def test_is_well_formed_url(value: object, expected: bool) -> None:
    assert is_well_formed_url(value) is expected
