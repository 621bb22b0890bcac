# =============================================================================
# core/errors.py  —  Error taxonomy
# =============================================================================
#
# Three failure types, each with a different audience:
#
#   ValidationError     Bad or missing tool input.  Surfaced to the agent
#                       verbatim so it can fix the call and try again.
#   ProviderError       Apollo said no (non-2xx) or the network failed.
#                       Carries status code + status text ONLY.  The API key
#                       and the request body never end up in the message.
#   ConfigurationError  The server cannot start (e.g. no API key).  Fatal.
#
# All three share ApolloToolError so callers can catch "anything we raise"
# in one place.
# =============================================================================

from typing import Optional


class ApolloToolError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(ApolloToolError):
    """Tool input failed field bounds or a cross-field rule.

    violations holds one human-readable entry per problem, so the caller
    sees every broken rule at once rather than fixing them one by one.
    """

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__("Invalid input: " + "; ".join(self.violations))


class ProviderError(ApolloToolError):
    """The Apollo API call failed."""

    def __init__(self, status_code: Optional[int], status_text: str):
        self.status_code = status_code
        self.status_text = status_text
        if status_code is None:
            message = f"Apollo API error: {status_text}"
        else:
            message = f"Apollo API error: {status_code} {status_text}".rstrip()
        super().__init__(message)


class ConfigurationError(ApolloToolError):
    """The server is misconfigured and must not start."""
