# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL the logic for talking to Apollo.io and shaping
# its answers for an agent: validation, the HTTP client, normalization and
# the tool executors.
#
# CRITICAL ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or any agent framework.  The
#   executors are plain async functions you can call from a test with a
#   stub HTTP transport.  tools/ is just the wiring.
# =============================================================================
