"""AiQo MCP Server - Entry point.

Runs the MCP server over stdio. stdout carries the protocol, so logs go to
stderr.
"""

import logging
import os

from .shell.mcp_server import mcp


logging.basicConfig(
    level=os.environ.get("AIQO_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the server."""
    logger.info("Starting AiQo MCP server on stdio (storage: %s)", os.environ.get("AIQO_STORAGE", "file"))
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
