"""Tests for mapping Apollo person shapes onto CanonicalPerson."""

import dataclasses

import pytest

from core.models import PersonCompany, PersonLocation, PersonSocial
from core.normalize import (
    collect_phone_numbers,
    normalize_enriched_person,
    normalize_search_person,
)
from tests.conftest import search_person


def _enriched_person(**overrides: object) -> dict:
    person = search_person(
        email="ada@engines.io",
        personal_emails=["ada@home.net"],
        sanitized_phone=None,
        phone_numbers=None,
    )
    person.update(overrides)
    return person


class TestNormalizeSearchPerson:
    def test_maps_identity_and_company(self) -> None:
        person = normalize_search_person(search_person())
        assert person.apollo_id == "p1"
        assert person.name == "Ada Lovelace"
        assert person.title == "CEO"
        assert person.email_status == "verified"
        assert person.location == PersonLocation(city="London", state=None, country="United Kingdom")
        assert person.company == PersonCompany(
            id="o1",
            name="Analytical Engines",
            domain="engines.io",
            website="https://engines.io",
            linkedin_url=None,
            industry="computing",
            employee_count=12,
        )
        assert person.social == PersonSocial(github_url="https://github.com/ada")

    def test_contact_fields_always_empty(self) -> None:
        # Even if upstream sent contact data, search results never carry it.
        raw = search_person(
            email="leak@engines.io",
            personal_emails=["leak@home.net"],
            sanitized_phone="+1-555",
            phone_numbers=[{"sanitized_number": "+1-555"}],
        )
        person = normalize_search_person(raw)
        assert person.email is None
        assert person.personal_emails == ()
        assert person.phone_numbers == ()

    def test_missing_organization_yields_empty_company(self) -> None:
        raw = search_person(organization=None, organization_id=None)
        person = normalize_search_person(raw)
        assert person.company == PersonCompany()

    def test_sparse_person(self) -> None:
        person = normalize_search_person({"id": "p9"})
        assert person.apollo_id == "p9"
        assert person.name is None
        assert person.location == PersonLocation()
        assert person.company == PersonCompany()
        assert person.social == PersonSocial()

    def test_frozen(self) -> None:
        person = normalize_search_person(search_person())
        with pytest.raises(dataclasses.FrozenInstanceError):
            person.email = "x@y.com"  # type: ignore[misc]


class TestNormalizeEnrichedPerson:
    def test_contact_fields(self) -> None:
        person = normalize_enriched_person(_enriched_person())
        assert person.email == "ada@engines.io"
        assert person.personal_emails == ("ada@home.net",)
        assert person.phone_numbers == ()

    def test_null_personal_emails(self) -> None:
        person = normalize_enriched_person(_enriched_person(personal_emails=None))
        assert person.personal_emails == ()

    def test_sanitized_phone_comes_first(self) -> None:
        raw = _enriched_person(
            sanitized_phone="+1-555",
            phone_numbers=[{"sanitized_number": "+1-555"}, {"sanitized_number": "+1-999"}],
        )
        assert normalize_enriched_person(raw).phone_numbers == ("+1-555", "+1-999")

    def test_empty_organization_fields_become_none(self) -> None:
        raw = _enriched_person(organization={"name": "", "estimated_num_employees": 0})
        company = normalize_enriched_person(raw).company
        assert company.name is None
        assert company.employee_count is None
        assert company.id == "o1"


class TestCollectPhoneNumbers:
    def test_duplicates_dropped_in_first_seen_order(self) -> None:
        raw = {
            "phone_numbers": [
                {"sanitized_number": "A"},
                {"sanitized_number": "B"},
                {"sanitized_number": "A"},
                {"sanitized_number": "C"},
            ]
        }
        assert collect_phone_numbers(raw) == ["A", "B", "C"]

    def test_entries_without_sanitized_number_skipped(self) -> None:
        raw = {"phone_numbers": [{"raw_number": "555"}, {"sanitized_number": None}, {"sanitized_number": "B"}]}
        assert collect_phone_numbers(raw) == ["B"]

    def test_nothing(self) -> None:
        assert collect_phone_numbers({}) == []

    def test_malformed_entries_skipped(self) -> None:
        raw = {"phone_numbers": ["+1-555", None, 7, {"sanitized_number": "B"}]}
        assert collect_phone_numbers(raw) == ["B"]

    def test_phone_numbers_not_a_list(self) -> None:
        assert collect_phone_numbers({"sanitized_phone": "A", "phone_numbers": "+1-555"}) == ["A"]


class TestMalformedEnrichment:
    def test_wrong_nested_types_do_not_raise(self) -> None:
        person = normalize_enriched_person({
            "id": "e2",
            "organization": "Analytical Engines",
            "personal_emails": ["ada@home.net", None, {"email": "x"}],
            "phone_numbers": ["+1-555"],
        })
        assert person.apollo_id == "e2"
        assert person.company.name is None
        assert person.personal_emails == ("ada@home.net",)
        assert person.phone_numbers == ()

    def test_contact_fields_are_immutable(self) -> None:
        person = normalize_enriched_person(_enriched_person())
        assert isinstance(person.personal_emails, tuple)
        assert isinstance(person.phone_numbers, tuple)
