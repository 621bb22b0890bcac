# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of every piece of information that flows
# between the Apollo API and the MCP tools.  They carry no behavior; they're
# structured bags of data that the tool layer turns into JSON with asdict().
#
# TWO FAMILIES OF MODELS:
#   1. Canonical models (CanonicalPerson and its sub-records).  These are what
#      the agent sees.  Search results and enrichment results BOTH end up as a
#      CanonicalPerson, so the agent only has to learn one person shape.
#   2. Envelope models (SearchPage, EnrichmentResponse, EnrichmentOutcome,
#      SearchAndEnrichOutcome).  These wrap canonical records with the
#      metadata each tool returns (pagination, async job ids, summaries).
#
# LIFETIME:
#   Every model here is built fresh for a single request/response cycle and
#   never mutated afterwards.  Nothing is persisted.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Optional


# -----------------------------------------------------------------------------
# CanonicalPerson sub-records
# -----------------------------------------------------------------------------
# The sub-records are ALWAYS present on a CanonicalPerson, even when Apollo
# returned nothing for them.  Missing data shows up as None fields, never as
# a missing key, so the agent can rely on person["company"]["name"] existing.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PersonLocation:
    """Where the person is based."""

    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class PersonCompany:
    """The person's current organization, projected from Apollo's nested org."""

    id: Optional[str] = None
    name: Optional[str] = None
    domain: Optional[str] = None
    website: Optional[str] = None
    linkedin_url: Optional[str] = None
    industry: Optional[str] = None
    employee_count: Optional[int] = None


@dataclass(frozen=True)
class PersonSocial:
    """Social profile links other than LinkedIn."""

    twitter_url: Optional[str] = None
    github_url: Optional[str] = None
    facebook_url: Optional[str] = None


# -----------------------------------------------------------------------------
# CanonicalPerson: the one person shape every tool returns
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class CanonicalPerson:
    """A person record independent of which Apollo endpoint produced it.

    Contact fields (email, personal_emails, phone_numbers) are only ever
    populated from enrichment.  A person that came from search always has
    email=None and empty contact lists.
    """

    apollo_id: Optional[str]
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    title: Optional[str] = None
    headline: Optional[str] = None
    linkedin_url: Optional[str] = None
    email: Optional[str] = None
    email_status: Optional[str] = None
    personal_emails: tuple[str, ...] = ()
    phone_numbers: tuple[str, ...] = ()   # deduplicated, first-seen order
    location: PersonLocation = field(default_factory=PersonLocation)
    company: PersonCompany = field(default_factory=PersonCompany)
    social: PersonSocial = field(default_factory=PersonSocial)


# -----------------------------------------------------------------------------
# PaginationInfo: echoed (or defaulted) from the search endpoint
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PaginationInfo:
    """Search pagination block."""

    page: int
    per_page: int
    total_entries: int = 0
    total_pages: int = 0


# -----------------------------------------------------------------------------
# Client-level results (raw people, not yet normalized)
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class SearchPage:
    """What ApolloClient.search_people hands back to the executors."""

    people: list[dict[str, Any]]
    pagination: PaginationInfo


@dataclass(frozen=True)
class EnrichmentResponse:
    """What ApolloClient.enrich_person hands back to the executors."""

    person: Optional[dict[str, Any]]
    status: str = "unknown"
    enrichment_request_id: Optional[str] = None   # only for waterfall (async) calls
    enrichment_status: Optional[str] = None
    credits_used: Optional[int] = None


# -----------------------------------------------------------------------------
# Tool-level results
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class SearchPeopleResult:
    """Output of the search_people tool."""

    people: list[CanonicalPerson] = field(default_factory=list)
    pagination: Optional[PaginationInfo] = None


@dataclass(frozen=True)
class EnrichmentOutcome:
    """Output of the enrich_person tool, and one entry of search_and_enrich.

    webhook_url is only set for async (waterfall) enrichment.  A synchronous
    call never echoes a callback URL, even if the caller passed one.
    """

    person: Optional[CanonicalPerson]
    status: str
    is_async: bool = False
    enrichment_request_id: Optional[str] = None
    enrichment_status: Optional[str] = None
    webhook_url: Optional[str] = None


@dataclass(frozen=True)
class SearchSummary:
    """The search half of a search_and_enrich run."""

    total_found: int
    page: int
    per_page: int


@dataclass(frozen=True)
class EnrichmentSummary:
    """Counts over a batch of EnrichmentOutcomes.

    attempted == successful + failed + async_pending always holds.
    """

    attempted: int = 0
    successful: int = 0
    failed: int = 0
    async_pending: int = 0


@dataclass(frozen=True)
class SearchAndEnrichOutcome:
    """Output of the search_and_enrich tool."""

    search_results: SearchSummary
    enriched_people: list[EnrichmentOutcome] = field(default_factory=list)
    enrichment_summary: EnrichmentSummary = field(default_factory=EnrichmentSummary)


# -----------------------------------------------------------------------------
# WebhookPayload: what Apollo POSTs back when a waterfall job finishes
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class WebhookPayload:
    """A completed async enrichment, correlated by enrichment_request_id."""

    enrichment_request_id: str
    person: Optional[CanonicalPerson]
    status: str = "unknown"
    credits_used: Optional[int] = None
    timestamp: Optional[str] = None
