# =============================================================================
# core/webhooks.py  —  Waterfall enrichment callbacks
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Waterfall (async) enrichment doesn't answer in the HTTP response.
#   Apollo POSTs the result to a webhook later, tagged with the
#   enrichment_request_id it handed out when the job started.  This module
#   parses those callbacks and matches them to the jobs this server started.
#
# STATE:
#   EnrichmentInbox is an in-memory dict that lives as long as the server
#   process.  Restart the server and pending jobs are forgotten.  Only
#   callbacks for jobs this server started are kept, and at most
#   max_results of them (oldest dropped first).  The agent reads them back
#   through the get_enrichment_result tool.
# =============================================================================

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from core.errors import ValidationError
from core.models import WebhookPayload
from core.normalize import normalize_enriched_person

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 1000


def parse_webhook_payload(raw: Any) -> WebhookPayload:
    """Validate a callback body and normalize its person.

    Raises:
        ValidationError: The body is not an object or has no job id.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(["webhook payload must be a JSON object"])

    job_id = raw.get("enrichment_request_id")
    if not job_id or not isinstance(job_id, str):
        raise ValidationError(["enrichment_request_id is required"])

    person = raw.get("person")
    if person is not None and not isinstance(person, Mapping):
        raise ValidationError(["person must be an object or null"])

    return WebhookPayload(
        enrichment_request_id=job_id,
        person=normalize_enriched_person(person) if person else None,
        status=raw.get("status") or "unknown",
        credits_used=raw.get("credits_used"),
        timestamp=raw.get("timestamp"),
    )


@dataclass(frozen=True)
class PendingJob:
    """An async enrichment this server started and is waiting on."""

    enrichment_request_id: str
    webhook_url: Optional[str] = None


class EnrichmentInbox:
    """Correlates webhook deliveries with the jobs that produced them."""

    def __init__(self, max_results: int = DEFAULT_MAX_RESULTS):
        self.max_results = max(1, max_results)
        self._pending: dict[str, PendingJob] = {}
        self._results: OrderedDict[str, WebhookPayload] = OrderedDict()

    def expect(self, enrichment_request_id: str, webhook_url: Optional[str] = None) -> None:
        """Remember a job id returned by an async enrich_person call."""
        self._pending[enrichment_request_id] = PendingJob(enrichment_request_id, webhook_url)

    def deliver(self, payload: WebhookPayload) -> bool:
        """Store a callback result if it matches a pending job.

        Returns True when it matched.  Callbacks for unknown job ids are
        logged and dropped.
        """
        job = self._pending.pop(payload.enrichment_request_id, None)
        if job is None:
            logger.warning("Dropping webhook for unknown job %s", payload.enrichment_request_id)
            return False

        self._results[payload.enrichment_request_id] = payload
        while len(self._results) > self.max_results:
            evicted, _ = self._results.popitem(last=False)
            logger.info("Evicted oldest enrichment result %s", evicted)
        logger.info("Webhook completed job %s (%s)", payload.enrichment_request_id, payload.status)
        return True

    def is_pending(self, enrichment_request_id: str) -> bool:
        return enrichment_request_id in self._pending

    def get(self, enrichment_request_id: str) -> Optional[WebhookPayload]:
        return self._results.get(enrichment_request_id)
