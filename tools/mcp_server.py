# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Defines the MCP tools an agent can call to find people and their contact
#   details in Apollo.io.  Each tool is a thin wrapper around an executor in
#   core/executors.py. It handles argument collection, error-to-dict
#   conversion, and JSON-friendly output.
#
# THE TOOLS:
#   - search_people      Find people by title/location/keywords (no contacts)
#   - enrich_person      Get email/phone for ONE known person
#   - search_and_enrich  Search a page, then enrich everyone on it
#   - get_enrichment_result  Read back a waterfall result delivered by webhook
#
# ERRORS:
#   Tools never raise for expected failures.  Bad input and Apollo failures
#   come back as {"error": ..., "error_type": ...} so the agent can read the
#   message and adjust its next call.  Arguments outside the bounds in the
#   published input schema are rejected by FastMCP before a tool runs.
#
# WEBHOOK ROUTE:
#   When served over HTTP, POST /webhooks/apollo receives waterfall
#   enrichment callbacks and matches them to jobs started by enrich_person.
#
# RUNNING THIS SERVER:
#   python main.py   (stdio by default; MCP_TRANSPORT=http for HTTP)
# =============================================================================

import json
import logging
import sys
from dataclasses import asdict
from typing import Annotated, Any, Optional

from fastmcp import FastMCP
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse

from core.apollo_client import ApolloClient
from core.errors import ProviderError, ValidationError
from core.executors import (
    DEFAULT_MAX_CONCURRENCY,
    execute_enrich_person,
    execute_search_and_enrich,
    execute_search_people,
)
from core.models import EnrichmentOutcome
from core.webhooks import EnrichmentInbox, parse_webhook_payload

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because the stdio transport uses STDOUT for MCP JSON
# messages.  Anything printed to stdout would corrupt the protocol stream.
#
# ANSI colours make tool traffic easy to scan in a terminal:
#   CYAN = incoming call, GREEN = response, YELLOW = progress.
# =============================================================================
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON in GREEN, then return it."""
    logging.info(f"{_GREEN}  ← {tool_name} response: {json.dumps(result, separators=(',', ':'))}{_RESET}")
    return result


# =============================================================================
# Serialization helpers
# =============================================================================
# Optional outcome keys are dropped when empty, so a synchronous enrichment
# never shows a webhook_url and a search result never shows async job ids.
_OPTIONAL_OUTCOME_KEYS = ("enrichment_request_id", "enrichment_status", "webhook_url")


# Bounds published in each tool's input schema.  core/validation.py
# enforces the same limits for callers that bypass MCP.
Titles = Annotated[list[str], Field(min_length=1, max_length=50)]
Locations = Annotated[list[str], Field(max_length=50)]
Keywords = Annotated[str, Field(max_length=500)]
PageNumber = Annotated[int, Field(ge=1, le=100)]
PageSize = Annotated[int, Field(ge=1, le=100)]
PersonName = Annotated[str, Field(max_length=100)]
LongText = Annotated[str, Field(max_length=200)]


def _arguments(**params) -> dict[str, Any]:
    """Collect tool arguments, leaving out the ones the agent didn't send."""
    return {k: v for k, v in params.items() if v is not None}


def _outcome_dict(outcome: EnrichmentOutcome) -> dict:
    result = asdict(outcome)
    for key in _OPTIONAL_OUTCOME_KEYS:
        if result[key] is None:
            result.pop(key)
    return result


def _error_dict(exc: ValidationError | ProviderError) -> dict:
    if isinstance(exc, ValidationError):
        return {
            "error": str(exc),
            "error_type": "validation_error",
            "violations": exc.violations,
        }
    return {
        "error": str(exc),
        "error_type": "provider_error",
        "status_code": exc.status_code,
    }


def create_server(
    client: ApolloClient,
    *,
    default_webhook_url: Optional[str] = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    inbox: Optional[EnrichmentInbox] = None,
) -> FastMCP:
    """Build the FastMCP server and register every tool on it.

    Args:
        client: The configured ApolloClient shared by all tools.
        default_webhook_url: Callback used for waterfall enrichment when the
            agent doesn't supply one.
        max_concurrency: Cap on parallel enrich calls in search_and_enrich.
        inbox: Where async job ids are tracked for webhook correlation.
    """
    if inbox is None:
        inbox = EnrichmentInbox()

    # The name "apollo-contacts" becomes the server identity in MCP.
    mcp = FastMCP("apollo-contacts")

    def _track(outcome: EnrichmentOutcome) -> None:
        if outcome.is_async and outcome.enrichment_request_id:
            inbox.expect(outcome.enrichment_request_id, outcome.webhook_url)
            _log_status(f"Waiting on webhook for job {outcome.enrichment_request_id}")

    # =========================================================================
    # TOOL 1: search_people
    # =========================================================================
    @mcp.tool()
    async def search_people(
        person_titles: Titles,
        person_locations: Optional[Locations] = None,
        q_keywords: Optional[Keywords] = None,
        page: PageNumber = 1,
        per_page: PageSize = 25,
    ) -> dict:
        """Search for people in Apollo.io's database by job title, location, and keywords.

        IMPORTANT: This search endpoint does NOT return email addresses or phone
        numbers. To get contact information, use enrich_person or search_and_enrich.

        Args:
            person_titles: Job titles to search for (1-50, e.g. ["CEO", "CTO", "VP Sales"]).
            person_locations: Locations to filter by (up to 50, e.g. ["San Francisco", "United States"]).
            q_keywords: Keywords to search for in person profiles (max 500 characters).
            page: Page number for pagination (1-100, default: 1).
            per_page: Results per page (1-100, default: 25).

        Returns:
            A dict with:
              - people: Name, title, company info, LinkedIn URL, location and
                Apollo person ID for each match. email is always null and
                phone_numbers / personal_emails are always empty here.
              - pagination: page, per_page, total_entries, total_pages
        """
        _log_request("search_people", person_titles=person_titles,
                     person_locations=person_locations, q_keywords=q_keywords,
                     page=page, per_page=per_page)
        try:
            result = await execute_search_people(client, _arguments(
                person_titles=person_titles,
                person_locations=person_locations,
                q_keywords=q_keywords,
                page=page,
                per_page=per_page,
            ))
        except (ValidationError, ProviderError) as exc:
            _log_status(f"Failed: {exc}")
            return _log_response("search_people", _error_dict(exc))

        _log_status(f"Found {len(result.people)} of {result.pagination.total_entries} people")
        return _log_response("search_people", asdict(result))

    # =========================================================================
    # TOOL 2: enrich_person
    # =========================================================================
    @mcp.tool()
    async def enrich_person(
        email: Optional[str] = None,
        linkedin_url: Optional[str] = None,
        first_name: Optional[PersonName] = None,
        last_name: Optional[PersonName] = None,
        name: Optional[LongText] = None,
        organization_name: Optional[LongText] = None,
        domain: Optional[LongText] = None,
        reveal_personal_emails: bool = False,
        reveal_phone_number: bool = False,
        run_waterfall_email: Optional[bool] = None,
        run_waterfall_phone: Optional[bool] = None,
        webhook_url: Optional[str] = None,
    ) -> dict:
        """Enrich a person's profile with contact information from Apollo.io.

        Use this to get email addresses and phone numbers that are NOT returned
        by search.

        Identification (provide at least one):
          1. email - most reliable
          2. linkedin_url - very reliable
          3. first_name + last_name, or name, together with organization_name or domain

        Set reveal_personal_emails=true to get personal email addresses.
        Set reveal_phone_number=true to get phone numbers.
        Both may consume additional credits.

        For waterfall enrichment (async), set run_waterfall_email and/or
        run_waterfall_phone. Results arrive later at webhook_url (or the
        server's default webhook, if one is configured).

        Returns:
            A dict with person (or null), status, is_async, and for async
            calls enrichment_request_id, enrichment_status and webhook_url.
        """
        arguments = _arguments(
            email=email,
            linkedin_url=linkedin_url,
            first_name=first_name,
            last_name=last_name,
            name=name,
            organization_name=organization_name,
            domain=domain,
            reveal_personal_emails=reveal_personal_emails,
            reveal_phone_number=reveal_phone_number,
            run_waterfall_email=run_waterfall_email,
            run_waterfall_phone=run_waterfall_phone,
            webhook_url=webhook_url,
        )
        _log_request("enrich_person", **arguments)
        try:
            outcome = await execute_enrich_person(client, arguments, default_webhook_url)
        except (ValidationError, ProviderError) as exc:
            _log_status(f"Failed: {exc}")
            return _log_response("enrich_person", _error_dict(exc))

        _log_status(f"Status: {outcome.status}, matched: {outcome.person is not None}")
        _track(outcome)
        return _log_response("enrich_person", _outcome_dict(outcome))

    # =========================================================================
    # TOOL 3: search_and_enrich
    # =========================================================================
    # Composition, like search-then-analyze: the agent would always chain
    # these two calls, so one tool saves a round-trip per page.
    # =========================================================================
    @mcp.tool()
    async def search_and_enrich(
        person_titles: Titles,
        person_locations: Optional[Locations] = None,
        q_keywords: Optional[Keywords] = None,
        page: PageNumber = 1,
        per_page: PageSize = 25,
        reveal_personal_emails: bool = False,
        reveal_phone_number: bool = False,
        run_waterfall_email: Optional[bool] = None,
        run_waterfall_phone: Optional[bool] = None,
        webhook_url: Optional[str] = None,
    ) -> dict:
        """Search for people, then enrich every result with contact information.

        Runs search_people, then enrich_person for each person found, matching
        on name plus company name/domain. Each enrichment may consume credits,
        so keep per_page small.

        A failed enrichment for one person does not fail the batch: that
        person shows up with person=null and a "failed: ..." status.

        Args:
            person_titles: Job titles to search for (1-50).
            person_locations: Locations to filter by (up to 50).
            q_keywords: Keywords to search for in person profiles (max 500 characters).
            page: Page number (1-100, default: 1).
            per_page: Results per page (1-100, default: 25).
            reveal_personal_emails: Request personal email addresses.
            reveal_phone_number: Request phone numbers.
            run_waterfall_email: Async waterfall email enrichment (needs a webhook).
            run_waterfall_phone: Async waterfall phone enrichment (needs a webhook).
            webhook_url: Where async results are delivered.

        Returns:
            A dict with:
              - search_results: total_found, page, per_page
              - enriched_people: one enrichment result per person, in search order
              - enrichment_summary: attempted, successful, failed, async_pending
        """
        arguments = _arguments(
            person_titles=person_titles,
            person_locations=person_locations,
            q_keywords=q_keywords,
            page=page,
            per_page=per_page,
            reveal_personal_emails=reveal_personal_emails,
            reveal_phone_number=reveal_phone_number,
            run_waterfall_email=run_waterfall_email,
            run_waterfall_phone=run_waterfall_phone,
            webhook_url=webhook_url,
        )
        _log_request("search_and_enrich", **arguments)
        try:
            outcome = await execute_search_and_enrich(
                client, arguments, default_webhook_url, max_concurrency
            )
        except (ValidationError, ProviderError) as exc:
            _log_status(f"Failed: {exc}")
            return _log_response("search_and_enrich", _error_dict(exc))

        summary = outcome.enrichment_summary
        _log_status(f"Enriched {summary.successful}/{summary.attempted}, "
                    f"failed={summary.failed}, async_pending={summary.async_pending}")
        for entry in outcome.enriched_people:
            _track(entry)

        result = asdict(outcome)
        result["enriched_people"] = [_outcome_dict(o) for o in outcome.enriched_people]
        return _log_response("search_and_enrich", result)

    # =========================================================================
    # TOOL 4: get_enrichment_result
    # =========================================================================
    @mcp.tool()
    async def get_enrichment_result(enrichment_request_id: str) -> dict:
        """Check on a waterfall (async) enrichment started by enrich_person or search_and_enrich.

        Args:
            enrichment_request_id: The id returned by the async enrichment call.

        Returns:
            A dict with enrichment_request_id and state:
              - "completed": the webhook arrived; also carries person (or
                null), status, credits_used and timestamp
              - "pending": the job is known but Apollo has not called back yet
              - "unknown": this server never started that job, or the result
                has aged out
        """
        _log_request("get_enrichment_result", enrichment_request_id=enrichment_request_id)
        payload = inbox.get(enrichment_request_id)
        if payload is not None:
            return _log_response("get_enrichment_result", {"state": "completed", **asdict(payload)})
        state = "pending" if inbox.is_pending(enrichment_request_id) else "unknown"
        return _log_response("get_enrichment_result", {
            "enrichment_request_id": enrichment_request_id,
            "state": state,
        })

    # =========================================================================
    # Webhook receiver (HTTP transport only)
    # =========================================================================
    @mcp.custom_route("/webhooks/apollo", methods=["POST"])
    async def apollo_webhook(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "body must be JSON"}, status_code=400)
        try:
            payload = parse_webhook_payload(body)
        except ValidationError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)

        correlated = inbox.deliver(payload)
        _log_status(f"Webhook {payload.enrichment_request_id}: {payload.status} "
                    f"(correlated={correlated})")
        return JSONResponse({"received": True, "correlated": correlated})

    return mcp
