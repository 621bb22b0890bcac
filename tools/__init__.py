# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool wrappers.
#
# ARCHITECTURAL ROLE:
#   tools/ is the "translation layer" between MCP and core/.  It:
#     1. Collects tool arguments and hands them to a core/ executor
#     2. Converts result dataclasses → dicts for JSON
#     3. Turns expected failures into {"error": ...} dicts
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT validate input or call Apollo themselves (core/ does)
#   - They do NOT read configuration (main.py passes it in)
#
# TOOL CONTRACT QUALITY:
#   The docstring of each tool is its description in MCP.  The agent reads
#   it to decide WHEN to call the tool, so the search-vs-enrich contact
#   data limitation is spelled out there, not just in code.
# =============================================================================
