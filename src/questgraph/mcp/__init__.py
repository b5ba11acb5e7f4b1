"""questgraph.mcp - Model Context Protocol boundary for the research graph.

Exposes the stage-gated graph as five MCP tools. The FastMCP SDK is an
optional extra; ``MCP_AVAILABLE`` tells callers whether it is installed.
GraphSession is importable without it, so the tool helpers can be used
and tested on their own.

Usage:
    from questgraph.mcp import MCP_AVAILABLE, run_server

    if MCP_AVAILABLE:
        run_server(transport="stdio")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from questgraph.mcp.context import GraphSession, GraphSettings

try:
    from mcp.server.fastmcp import FastMCP  # noqa: F401

    MCP_AVAILABLE = True
except ImportError:
    MCP_AVAILABLE = False

_INSTALL_HINT = "MCP dependencies not installed. Install with: pip install questgraph[mcp]"


def create_server(session: GraphSession | None = None, working_dir: Path | None = None) -> Any:
    """Build the FastMCP server for ``session`` (a new one when omitted).

    Raises:
        ImportError: If the mcp extra is not installed.
    """
    if not MCP_AVAILABLE:
        raise ImportError(_INSTALL_HINT)
    from questgraph.mcp.server import create_server as _create

    return _create(session=session, working_dir=working_dir)


def run_server(
    working_dir: Path | None = None,
    transport: str | None = None,
    config: dict[str, Any] | None = None,
) -> None:
    """Serve the research graph tools until the transport closes.

    Raises:
        ImportError: If the mcp extra is not installed.
    """
    if not MCP_AVAILABLE:
        raise ImportError(_INSTALL_HINT)
    from questgraph.mcp.server import run_server as _run

    _run(working_dir=working_dir, transport=transport, config=config)


__all__ = [
    "MCP_AVAILABLE",
    "GraphSession",
    "GraphSettings",
    "create_server",
    "run_server",
]
