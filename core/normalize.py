# =============================================================================
# core/normalize.py  —  Apollo person → CanonicalPerson
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Apollo's People Search and People Enrichment endpoints return two
#   different person shapes.  This module maps each of them onto ONE
#   CanonicalPerson, so the agent never has to care where a record came from.
#
# WHY TWO FUNCTIONS AND NOT A CLASS HIERARCHY?
#   The shapes differ in a handful of fields (search has no contact data,
#   enrichment has emails and phones).  Two explicit pure functions that
#   share helpers for the common parts are easier to read and test than a
#   base class with per-endpoint subclasses.
#
# CONTACT DATA GUARANTEE:
#   Search results NEVER carry email or phone data, even if Apollo ever
#   started sending some.  The tool description tells the agent this, so the
#   output has to back it up.
#
# MALFORMED RESPONSES:
#   Nested entries of the wrong type (a phone entry that is a bare string,
#   an organization that is not an object) are skipped, not raised on.
# =============================================================================

from typing import Any, Mapping, Optional

from core.models import CanonicalPerson, PersonCompany, PersonLocation, PersonSocial


def _location(person: Mapping[str, Any]) -> PersonLocation:
    return PersonLocation(
        city=person.get("city"),
        state=person.get("state"),
        country=person.get("country"),
    )


def _company(person: Mapping[str, Any]) -> PersonCompany:
    # A missing or malformed organization still produces a PersonCompany,
    # just all None.
    org = person.get("organization")
    if not isinstance(org, Mapping):
        org = {}
    return PersonCompany(
        id=person.get("organization_id"),
        name=org.get("name") or None,
        domain=org.get("primary_domain") or None,
        website=org.get("website_url") or None,
        linkedin_url=org.get("linkedin_url") or None,
        industry=org.get("industry") or None,
        employee_count=org.get("estimated_num_employees") or None,
    )


def _social(person: Mapping[str, Any]) -> PersonSocial:
    return PersonSocial(
        twitter_url=person.get("twitter_url"),
        github_url=person.get("github_url"),
        facebook_url=person.get("facebook_url"),
    )


def _identity(person: Mapping[str, Any]) -> dict[str, Optional[str]]:
    return {
        "apollo_id": person.get("id"),
        "name": person.get("name"),
        "first_name": person.get("first_name"),
        "last_name": person.get("last_name"),
        "title": person.get("title"),
        "headline": person.get("headline"),
        "linkedin_url": person.get("linkedin_url"),
        "email_status": person.get("email_status"),
    }


def _strings(values: Any) -> tuple[str, ...]:
    if not isinstance(values, list):
        return ()
    return tuple(v for v in values if isinstance(v, str) and v)


def collect_phone_numbers(person: Mapping[str, Any]) -> list[str]:
    """Sanitized phone first, then each listed number not seen yet.

    Deduplication is by sanitized value; first appearance wins the slot.
    """
    numbers: list[str] = []
    sanitized = person.get("sanitized_phone")
    if sanitized:
        numbers.append(sanitized)
    phones = person.get("phone_numbers")
    for phone in phones if isinstance(phones, list) else ():
        if not isinstance(phone, Mapping):
            continue
        value = phone.get("sanitized_number")
        if value and isinstance(value, str) and value not in numbers:
            numbers.append(value)
    return numbers


def normalize_search_person(person: Mapping[str, Any]) -> CanonicalPerson:
    """Map a People Search result.  Contact fields are always empty."""
    return CanonicalPerson(
        **_identity(person),
        email=None,
        personal_emails=(),
        phone_numbers=(),
        location=_location(person),
        company=_company(person),
        social=_social(person),
    )


def normalize_enriched_person(person: Mapping[str, Any]) -> CanonicalPerson:
    """Map a People Enrichment (people/match) result, contact data included."""
    return CanonicalPerson(
        **_identity(person),
        email=person.get("email"),
        personal_emails=_strings(person.get("personal_emails")),
        phone_numbers=tuple(collect_phone_numbers(person)),
        location=_location(person),
        company=_company(person),
        social=_social(person),
    )
