# =============================================================================
# core/apollo_client.py  —  Apollo.io API client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Translates validated tool input into the exact JSON bodies Apollo
#   expects, makes ONE HTTP POST per call, and turns any failure into a
#   ProviderError.
#
# ENDPOINTS:
#   POST /mixed_people/search   People Search (no emails, no phones!)
#   POST /people/match          People Enrichment (contact data on request)
#
# "ONLY SEND WHAT WAS ASKED FOR":
#   Optional fields are left out of the body entirely when they're empty,
#   and boolean flags are only sent when they're true.  Apollo treats the
#   *presence* of some flags as the toggle, so sending reveal_phone_number
#   as false is not the same as leaving it out.
#
# CREDENTIAL SAFETY:
#   The API key travels in the x-api-key header and nowhere else.  Error
#   messages carry status code + status text only: never the key, never
#   the request body, never the provider's error body.
#
# NO RETRIES:
#   A failed call is reported, not retried.  Timeouts come from httpx and
#   are surfaced as ProviderError like any other transport failure.
# =============================================================================

import logging
from typing import Any, Mapping, Optional

import httpx

from core.config import DEFAULT_BASE_URL
from core.errors import ConfigurationError, ProviderError
from core.models import EnrichmentResponse, PaginationInfo, SearchPage
from core.validation import EnrichPersonInput, SearchPeopleInput

logger = logging.getLogger(__name__)

SEARCH_ENDPOINT = "/mixed_people/search"
ENRICHMENT_ENDPOINT = "/people/match"

MAX_PER_PAGE = 100  # Apollo's hard ceiling

_IDENTIFIER_FIELDS = (
    "email",
    "linkedin_url",
    "first_name",
    "last_name",
    "name",
    "organization_name",
    "domain",
)
_FLAG_FIELDS = (
    "reveal_personal_emails",
    "reveal_phone_number",
    "run_waterfall_email",
    "run_waterfall_phone",
)


class ApolloClient:
    """Thin async wrapper over Apollo's search and enrichment endpoints."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ConfigurationError("Apollo API key is required")
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport  # tests inject httpx.MockTransport here

    def __repr__(self) -> str:
        return f"ApolloClient(base_url={self._base_url!r})"

    # -------------------------------------------------------------------------
    # Request bodies
    # -------------------------------------------------------------------------
    @staticmethod
    def build_search_body(query: SearchPeopleInput) -> dict[str, Any]:
        body: dict[str, Any] = {
            "page": query.page or 1,
            "per_page": min(query.per_page or 25, MAX_PER_PAGE),
        }
        if query.person_titles:
            body["person_titles"] = list(query.person_titles)
        if query.person_locations:
            body["person_locations"] = list(query.person_locations)
        if query.q_keywords:
            body["q_keywords"] = query.q_keywords
        return body

    @staticmethod
    def build_enrich_body(query: EnrichPersonInput) -> dict[str, Any]:
        body: dict[str, Any] = {}
        for name in _IDENTIFIER_FIELDS:
            value = getattr(query, name)
            if value:
                body[name] = value
        for name in _FLAG_FIELDS:
            if getattr(query, name):
                body[name] = True
        if query.webhook_url:
            body["webhook_url"] = query.webhook_url
        return body

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------
    async def search_people(self, query: SearchPeopleInput) -> SearchPage:
        """Run a People Search.  Returns raw people plus pagination.

        Missing pagination fields fall back to the request's own page and
        per_page, with zero totals.  A response without pagination is not
        an error.
        """
        data = await self._post(SEARCH_ENDPOINT, self.build_search_body(query))
        pagination = data.get("pagination")
        if not isinstance(pagination, Mapping):
            pagination = {}
        people = data.get("people")
        if not isinstance(people, list):
            people = []
        return SearchPage(
            people=[p for p in people if isinstance(p, Mapping)],
            pagination=PaginationInfo(
                page=pagination.get("page") or query.page or 1,
                per_page=pagination.get("per_page") or query.per_page or 25,
                total_entries=pagination.get("total_entries") or 0,
                total_pages=pagination.get("total_pages") or 0,
            ),
        )

    async def enrich_person(self, query: EnrichPersonInput) -> EnrichmentResponse:
        """Run a People Enrichment match.

        query.webhook_url must already be the effective callback URL; the
        executor resolves the server default before calling this.
        """
        data = await self._post(ENRICHMENT_ENDPOINT, self.build_enrich_body(query))
        person = data.get("person") or None
        if person is not None and not isinstance(person, Mapping):
            raise ProviderError(None, "response person was not a JSON object")
        return EnrichmentResponse(
            person=person,
            status=data.get("status") or "unknown",
            enrichment_request_id=data.get("enrichment_request_id"),
            enrichment_status=data.get("enrichment_status"),
            credits_used=data.get("credits_used"),
        )

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self._api_key,
            "Cache-Control": "no-cache",
        }

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        # Exceptions are re-raised "from None" so the httpx request object
        # (and its headers) never rides along in the traceback chain.
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as http:
                response = await http.post(path, json=body, headers=self._headers())
        except httpx.TimeoutException:
            logger.warning("Apollo %s timed out after %ss", path, self._timeout)
            raise ProviderError(None, "request timed out") from None
        except httpx.HTTPError as exc:
            logger.warning("Apollo %s transport failure: %s", path, type(exc).__name__)
            raise ProviderError(None, f"request failed ({type(exc).__name__})") from None

        logger.info("Apollo %s -> %s", path, response.status_code)
        if not response.is_success:
            raise ProviderError(response.status_code, response.reason_phrase)

        try:
            data = response.json()
        except ValueError:
            raise ProviderError(response.status_code, "response was not valid JSON") from None
        if not isinstance(data, dict):
            raise ProviderError(response.status_code, "response was not a JSON object")
        return data
