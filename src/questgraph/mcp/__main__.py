"""Run the questgraph MCP server with ``python -m questgraph.mcp``.

Arguments are those of ``questgraph mcp serve``, e.g.
``python -m questgraph.mcp --transport sse``.
"""

import sys

from questgraph.cli import main

if __name__ == "__main__":
    sys.exit(main(["mcp", "serve", *sys.argv[1:]]))
