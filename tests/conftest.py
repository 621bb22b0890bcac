"""Shared fixtures: a stub Apollo API behind httpx.MockTransport."""

import json
from typing import Any, Callable

import httpx
import pytest

from core.apollo_client import ENRICHMENT_ENDPOINT, SEARCH_ENDPOINT, ApolloClient

TEST_API_KEY = "test-key-do-not-leak"


class StubApollo:
    """Answers Apollo endpoints from per-path handlers and records every call.

    A handler receives the decoded JSON body and returns either a dict
    (sent as a 200 JSON response) or a ready-made httpx.Response.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any], httpx.Headers]] = []
        self._handlers: dict[str, Callable[[dict[str, Any]], Any]] = {}

    def on_search(self, handler: Callable[[dict[str, Any]], Any]) -> None:
        self._handlers[SEARCH_ENDPOINT] = handler

    def on_enrich(self, handler: Callable[[dict[str, Any]], Any]) -> None:
        self._handlers[ENRICHMENT_ENDPOINT] = handler

    def bodies(self, endpoint: str) -> list[dict[str, Any]]:
        return [body for path, body, _ in self.calls if path.endswith(endpoint)]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        self.calls.append((request.url.path, body, request.headers))
        for endpoint, handler in self._handlers.items():
            if request.url.path.endswith(endpoint):
                result = handler(body)
                if isinstance(result, httpx.Response):
                    return result
                return httpx.Response(200, json=result)
        return httpx.Response(404)


def search_person(**overrides: Any) -> dict[str, Any]:
    person = {
        "id": "p1",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "name": "Ada Lovelace",
        "title": "CEO",
        "headline": "Founder",
        "linkedin_url": None,
        "email_status": "verified",
        "twitter_url": None,
        "github_url": "https://github.com/ada",
        "facebook_url": None,
        "city": "London",
        "state": None,
        "country": "United Kingdom",
        "organization_id": "o1",
        "organization": {
            "id": "o1",
            "name": "Analytical Engines",
            "primary_domain": "engines.io",
            "website_url": "https://engines.io",
            "linkedin_url": None,
            "industry": "computing",
            "estimated_num_employees": 12,
        },
    }
    person.update(overrides)
    return person


@pytest.fixture
def stub() -> StubApollo:
    return StubApollo()


@pytest.fixture
def client(stub: StubApollo) -> ApolloClient:
    return ApolloClient(TEST_API_KEY, transport=httpx.MockTransport(stub))
