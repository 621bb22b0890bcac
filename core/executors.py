# =============================================================================
# core/executors.py  —  Tool Executors
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   One function per tool.  Each runs the same pipeline:
#
#       raw arguments → validate → ApolloClient → normalize → result model
#
#   The MCP layer (tools/mcp_server.py) is just a wrapper around these.
#   Keeping the pipeline here means it can be tested with a stub HTTP
#   transport and no MCP server at all.
#
# THE SERVER DEFAULT WEBHOOK:
#   Waterfall enrichment needs a callback URL.  If the agent doesn't give
#   one, the server's configured default is used.  That default is passed
#   in as a parameter (never read from a global), so every executor is a
#   plain function of its arguments.
#
# SEARCH + ENRICH:
#   The composite tool enriches every person on one search page.  Calls run
#   concurrently, capped by a semaphore so one page of 100 people doesn't
#   open 100 connections to Apollo at once.  asyncio.gather keeps results
#   in search order no matter which call finishes first.  One person's
#   failure becomes a "failed" outcome; it never sinks the whole batch.
# =============================================================================

import asyncio
import logging
from typing import Any, Mapping, Optional

from core.apollo_client import ApolloClient
from core.errors import ApolloToolError
from core.models import (
    CanonicalPerson,
    EnrichmentOutcome,
    EnrichmentSummary,
    SearchAndEnrichOutcome,
    SearchPeopleResult,
    SearchSummary,
)
from core.normalize import normalize_enriched_person, normalize_search_person
from core.validation import (
    is_well_formed_url,
    validate_enrich_input,
    validate_search_and_enrich_input,
    validate_search_input,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 5
NO_IDENTIFIER_STATUS = "failed: no usable identifier"


# =============================================================================
# search_people
# =============================================================================
async def execute_search_people(
    client: ApolloClient,
    raw: Optional[Mapping[str, Any]],
) -> SearchPeopleResult:
    """Validate, search, and normalize one page of people."""
    query = validate_search_input(raw)
    page = await client.search_people(query)
    return SearchPeopleResult(
        people=[normalize_search_person(person) for person in page.people],
        pagination=page.pagination,
    )


# =============================================================================
# enrich_person
# =============================================================================
async def execute_enrich_person(
    client: ApolloClient,
    raw: Optional[Mapping[str, Any]],
    default_webhook_url: Optional[str] = None,
) -> EnrichmentOutcome:
    """Validate and enrich one person.

    The effective webhook is the caller's, else (async only) the server
    default.  It is echoed back only for async calls.
    """
    query = validate_enrich_input(raw, default_webhook_url)
    is_async = query.is_async
    webhook_url = query.webhook_url or (default_webhook_url if is_async else None)

    response = await client.enrich_person(query.model_copy(update={"webhook_url": webhook_url}))
    person = normalize_enriched_person(response.person) if response.person else None

    return EnrichmentOutcome(
        person=person,
        status=response.status,
        is_async=is_async,
        enrichment_request_id=response.enrichment_request_id,
        enrichment_status=response.enrichment_status,
        webhook_url=webhook_url if is_async else None,
    )


# =============================================================================
# search_and_enrich
# =============================================================================
def derive_enrichment_arguments(person: CanonicalPerson) -> dict[str, Any]:
    """Best-effort enrich_person identifiers from a search result.

    Search results never carry an email, so matching leans on the name plus
    the current company's name and domain.  A linkedin_url that is not a
    well-formed URL is left out so it cannot sink the name match.
    """
    arguments: dict[str, Any] = {}
    if is_well_formed_url(person.linkedin_url):
        arguments["linkedin_url"] = person.linkedin_url
    if person.first_name and person.last_name:
        arguments["first_name"] = person.first_name
        arguments["last_name"] = person.last_name
    if person.name:
        arguments["name"] = person.name
    if person.company.name:
        arguments["organization_name"] = person.company.name
    if person.company.domain:
        arguments["domain"] = person.company.domain
    return arguments


def _has_usable_identifier(arguments: Mapping[str, Any]) -> bool:
    company = arguments.get("organization_name") or arguments.get("domain")
    return bool(
        arguments.get("linkedin_url")
        or (arguments.get("first_name") and arguments.get("last_name") and company)
        or (arguments.get("name") and company)
    )


def summarize(outcomes: list[EnrichmentOutcome]) -> EnrichmentSummary:
    """Bucket outcomes: every outcome lands in exactly one count."""
    async_pending = sum(1 for o in outcomes if o.is_async)
    successful = sum(1 for o in outcomes if not o.is_async and o.person is not None)
    failed = sum(1 for o in outcomes if not o.is_async and o.person is None)
    return EnrichmentSummary(
        attempted=len(outcomes),
        successful=successful,
        failed=failed,
        async_pending=async_pending,
    )


async def execute_search_and_enrich(
    client: ApolloClient,
    raw: Optional[Mapping[str, Any]],
    default_webhook_url: Optional[str] = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> SearchAndEnrichOutcome:
    """Search one page, then enrich each person found."""
    query = validate_search_and_enrich_input(raw, default_webhook_url)
    search = await execute_search_people(client, query.search_arguments())

    flags = {k: v for k, v in query.flags().items() if v is not None}
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def enrich_one(person: CanonicalPerson) -> EnrichmentOutcome:
        arguments = derive_enrichment_arguments(person)
        if not _has_usable_identifier(arguments):
            logger.info("Skipping enrichment for %s: no usable identifier", person.apollo_id)
            return EnrichmentOutcome(person=None, status=NO_IDENTIFIER_STATUS)
        async with semaphore:
            try:
                return await execute_enrich_person(
                    client, {**arguments, **flags}, default_webhook_url
                )
            except ApolloToolError as exc:
                logger.warning("Enrichment failed for %s: %s", person.apollo_id, exc)
                return EnrichmentOutcome(person=None, status=f"failed: {exc}")

    outcomes = list(await asyncio.gather(*(enrich_one(p) for p in search.people)))

    return SearchAndEnrichOutcome(
        search_results=SearchSummary(
            total_found=search.pagination.total_entries,
            page=search.pagination.page,
            per_page=search.pagination.per_page,
        ),
        enriched_people=outcomes,
        enrichment_summary=summarize(outcomes),
    )
