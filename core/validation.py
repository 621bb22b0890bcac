# =============================================================================
# core/validation.py  —  Schema Validator for tool input
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Turns raw tool arguments (whatever the agent sent) into validated,
#   defaulted input models, or raises ValidationError explaining exactly
#   what is wrong.  No partial acceptance: either every field is good, or
#   the call is rejected.
#
# TWO PASSES:
#   1. Field bounds, enforced by pydantic models (lengths, ranges, email
#      and URL well-formedness, defaults like page=1 / per_page=25).
#   2. Cross-field rules for enrichment, expressed as a plain function that
#      RETURNS a list of violated rules instead of raising on the first one.
#      That way an agent that forgot both an identifier and a webhook hears
#      about both in one round-trip.
#
# PURITY:
#   Nothing here touches the network or the environment.  The server's
#   default webhook URL is passed in as an argument.
# =============================================================================

from typing import Annotated, Any, Mapping, Optional

import pydantic
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, HttpUrl, TypeAdapter

from core.errors import ValidationError

_HTTP_URL = TypeAdapter(HttpUrl)

IDENTIFIER_RULE = (
    "At least one identifier required: email, linkedin_url, "
    "or (name + company/domain)"
)
WEBHOOK_RULE = (
    "webhook_url is required when run_waterfall_email or "
    "run_waterfall_phone is enabled"
)


def _well_formed_url(value: str) -> str:
    # Validate with HttpUrl but keep the caller's exact string; HttpUrl
    # would otherwise normalize it (e.g. add a trailing slash).
    try:
        _HTTP_URL.validate_python(value)
    except pydantic.ValidationError:
        raise ValueError("must be a valid http(s) URL") from None
    return value


Url = Annotated[str, AfterValidator(_well_formed_url)]


def is_well_formed_url(value: Any) -> bool:
    """True if value would pass the Url field check."""
    if not isinstance(value, str):
        return False
    try:
        _well_formed_url(value)
    except ValueError:
        return False
    return True


# -----------------------------------------------------------------------------
# Input models
# -----------------------------------------------------------------------------
class SearchPeopleInput(BaseModel):
    """Arguments of the search_people tool."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    person_titles: list[str] = Field(min_length=1, max_length=50)
    person_locations: Optional[list[str]] = Field(default=None, max_length=50)
    q_keywords: Optional[str] = Field(default=None, max_length=500)
    page: int = Field(default=1, ge=1, le=100)
    per_page: int = Field(default=25, ge=1, le=100)


class EnrichmentFlags(BaseModel):
    """Reveal and waterfall switches shared by enrich_person and search_and_enrich."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    reveal_personal_emails: bool = False
    reveal_phone_number: bool = False
    run_waterfall_email: Optional[bool] = None
    run_waterfall_phone: Optional[bool] = None
    webhook_url: Optional[Url] = None

    @property
    def is_async(self) -> bool:
        """Waterfall enrichment answers later, via webhook."""
        return bool(self.run_waterfall_email or self.run_waterfall_phone)

    def flags(self) -> dict[str, Any]:
        return {
            "reveal_personal_emails": self.reveal_personal_emails,
            "reveal_phone_number": self.reveal_phone_number,
            "run_waterfall_email": self.run_waterfall_email,
            "run_waterfall_phone": self.run_waterfall_phone,
            "webhook_url": self.webhook_url,
        }


class EnrichPersonInput(EnrichmentFlags):
    """Arguments of the enrich_person tool."""

    email: Optional[EmailStr] = None
    linkedin_url: Optional[Url] = None
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    name: Optional[str] = Field(default=None, max_length=200)
    organization_name: Optional[str] = Field(default=None, max_length=200)
    domain: Optional[str] = Field(default=None, max_length=200)


class SearchAndEnrichInput(SearchPeopleInput, EnrichmentFlags):
    """Arguments of the search_and_enrich tool: search fields + enrichment flags."""

    def search_arguments(self) -> dict[str, Any]:
        return self.model_dump(include=set(SearchPeopleInput.model_fields))


# -----------------------------------------------------------------------------
# Cross-field rules
# -----------------------------------------------------------------------------
def has_identifier(query: EnrichPersonInput) -> bool:
    """True when Apollo has enough to match a person."""
    company = query.organization_name or query.domain
    return bool(
        query.email
        or query.linkedin_url
        or (query.first_name and query.last_name and company)
        or (query.name and company)
    )


def _webhook_resolvable(flags: EnrichmentFlags, default_webhook_url: Optional[str]) -> bool:
    if not flags.is_async:
        return True
    return bool(flags.webhook_url or default_webhook_url)


def check_enrichment_rules(
    query: EnrichPersonInput,
    default_webhook_url: Optional[str] = None,
) -> list[str]:
    """Return every cross-field rule the query violates (empty list = valid)."""
    violations = []
    if not has_identifier(query):
        violations.append(IDENTIFIER_RULE)
    if not _webhook_resolvable(query, default_webhook_url):
        violations.append(WEBHOOK_RULE)
    return violations


# -----------------------------------------------------------------------------
# Entry points used by the executors
# -----------------------------------------------------------------------------
def _describe(exc: pydantic.ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


def _parse(model: type[BaseModel], raw: Optional[Mapping[str, Any]]):
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValidationError([f"expected an object of arguments, got {type(raw).__name__}"])
    try:
        return model.model_validate(dict(raw))
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc)) from None


def validate_search_input(raw: Optional[Mapping[str, Any]]) -> SearchPeopleInput:
    """Validate and default search_people arguments."""
    return _parse(SearchPeopleInput, raw)


def validate_enrich_input(
    raw: Optional[Mapping[str, Any]],
    default_webhook_url: Optional[str] = None,
) -> EnrichPersonInput:
    """Validate enrich_person arguments: field bounds, then cross-field rules."""
    query = _parse(EnrichPersonInput, raw)
    violations = check_enrichment_rules(query, default_webhook_url)
    if violations:
        raise ValidationError(violations)
    return query


def validate_search_and_enrich_input(
    raw: Optional[Mapping[str, Any]],
    default_webhook_url: Optional[str] = None,
) -> SearchAndEnrichInput:
    """Validate search_and_enrich arguments.

    The identifier rule is checked per person later on; only the webhook
    rule can be checked before the search runs.
    """
    query = _parse(SearchAndEnrichInput, raw)
    if not _webhook_resolvable(query, default_webhook_url):
        raise ValidationError([WEBHOOK_RULE])
    return query
