"""Command-line entrypoint for the trino-graphql-mcp FastMCP server.

Running `trino-graphql-mcp` starts the server with FastMCP's default
transport; `fastmcp run` can be used instead for transport selection.
"""

from __future__ import annotations

import traceback

from fastmcp.utilities.logging import get_logger

from trino_graphql_mcp.server import mcp

# Configure a module-level logger for local server logs.
_logger = get_logger(__name__)


def main() -> None:
    """Start the trino-graphql-mcp FastMCP server via CLI."""
    try:
        mcp.run()
    except KeyboardInterrupt:
        _logger.info("Interrupted by user. Exiting cleanly.")
    except Exception:  # noqa: BLE001
        traceback.print_exc(limit=1)


if __name__ == "__main__":
    # Delegate to main() so behavior is consistent across execution paths.
    main()
