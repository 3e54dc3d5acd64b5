"""
Daylite MCP server entry point.

Usage:
    daylite-mcp                                  # stdio transport
    daylite-mcp --transport http --port 8000     # streamable HTTP

Credentials are read from the environment; see config.py.
"""

from __future__ import annotations

import argparse
import logging
import sys

import caldav
import httpx
from fastmcp import FastMCP

from .caldav_session import DayliteCalDAVSession
from .config import DayliteConfig, load_config
from .errors import ConfigurationError
from .rest_client import DayliteRestClient
from .tools import register_all_tools

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Daylite CRM tools. Appointments and tasks live on the Daylite CalDAV server and are "
    "addressed by the URL returned from the list tools; contacts, companies, opportunities "
    "and projects come from the Daylite REST API and are addressed by numeric ID."
)


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout carries the stdio transport."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def create_server(
    config: DayliteConfig,
    *,
    caldav_client: caldav.DAVClient | None = None,
    rest_transport: httpx.AsyncBaseTransport | None = None,
) -> FastMCP:
    """Build the MCP server with a client for every configured credential set."""
    mcp = FastMCP("daylite", instructions=INSTRUCTIONS)

    session = None
    if config.caldav is not None:
        session = DayliteCalDAVSession(config.caldav, client=caldav_client)

    client = None
    if config.rest is not None:
        client = DayliteRestClient(config.rest, transport=rest_transport)

    tools = register_all_tools(mcp, session, client)
    logger.info(f"Registered {len(tools)} Daylite tools")
    for feature in config.features:
        logger.info(f"Enabled: {feature}")
    return mcp


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="daylite-mcp", description="Daylite CRM MCP server")
    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    mcp = create_server(config)
    if args.transport == "http":
        mcp.run(transport="http", host=args.host, port=args.port)
    else:
        mcp.run(transport="stdio")
    return 0


if __name__ == "__main__":
    sys.exit(main())
