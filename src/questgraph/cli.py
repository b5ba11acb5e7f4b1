"""
questgraph.cli - Command-line interface.

Main entry point for the questgraph CLI tool.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from questgraph import __version__
from questgraph.config import ConfigError, config_to_toml, find_config_file, get_config
from questgraph.log import configure_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="questgraph",
        description="Stage-gated research reasoning graph served over MCP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  questgraph mcp serve                     # Serve over stdio
  questgraph mcp serve --transport sse     # Serve over SSE
  questgraph config show                   # View effective settings
  questgraph config path                   # Show config file location

For detailed command help: questgraph <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"questgraph {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (debug logging)",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # version command
    subparsers.add_parser(
        "version",
        help="Show version",
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="View configuration (show, path)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration File:
  questgraph looks for .questgraph.toml in the current directory or parent
  directories. Environment variables QUESTGRAPH_<SECTION>_<KEY> override
  file values, e.g. QUESTGRAPH_HYPOTHESES_MAX_HYPOTHESES=3.

Example (.questgraph.toml):
  [graph]
  default_disciplinary_tags = ["cardiology", "genetics"]
  enable_multi_layer = true

  [hypotheses]
  max_hypotheses = 4

  [logging]
  level = "DEBUG"
""",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_action")

    config_show = config_subparsers.add_parser(
        "show",
        help="Show effective configuration",
    )
    config_show.add_argument(
        "--section",
        help="Show only one section (e.g., 'graph', 'server')",
        metavar="SECTION",
    )
    config_show.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    config_subparsers.add_parser(
        "path",
        help="Show config file location",
    )

    # mcp command
    mcp_parser = subparsers.add_parser(
        "mcp",
        help="MCP server commands (requires questgraph[mcp])",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
MCP Client Configuration:

    {
      "mcpServers": {
        "questgraph": {
          "command": "questgraph",
          "args": ["mcp", "serve"]
        }
      }
    }

Tools:
  initialize_research_quest_graph  Stage 1: root node n0
  decompose_research_task          Stage 2: dimension nodes 2.x
  generate_hypotheses              Stage 3: hypothesis nodes 3.x.y
  get_graph_summary                Counts, topology and quality metrics
  export_graph_data                JSON or YAML export
""",
    )
    mcp_subparsers = mcp_parser.add_subparsers(dest="mcp_action")

    mcp_serve = mcp_subparsers.add_parser(
        "serve",
        help="Start MCP server",
    )
    mcp_serve.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default=None,
        help="Transport type (default: [server] transport, else stdio)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install questgraph[completion]
    # Then activate: eval "$(register-python-argcomplete questgraph)"
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "version":
            return version_command(args)
        elif args.command == "config":
            return config_command(args)
        elif args.command == "mcp":
            return mcp_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def load_configuration(args: argparse.Namespace) -> dict:
    """Resolve configuration from --config or discovery."""
    if args.config is not None and not args.config.is_file():
        raise ConfigError(f"Config file not found: {args.config}")
    return get_config(start_path=Path.cwd(), config_path=args.config)


def version_command(args: argparse.Namespace) -> int:
    """Handle version command."""
    print(f"questgraph {__version__}")
    return 0


def config_command(args: argparse.Namespace) -> int:
    """Handle config commands."""
    if args.config_action == "path":
        path = args.config or find_config_file(Path.cwd())
        if path is None:
            print("No .questgraph.toml found; using defaults", file=sys.stderr)
            return 1
        print(path)
        return 0

    if args.config_action == "show":
        config = load_configuration(args)
        if args.section:
            if args.section not in config:
                print(f"Error: unknown section '{args.section}'", file=sys.stderr)
                return 1
            config = {args.section: config[args.section]}
        if args.json:
            print(json.dumps(config, indent=2))
        else:
            print(config_to_toml(config), end="")
        return 0

    print("Usage: questgraph config {show,path}", file=sys.stderr)
    return 1


def mcp_command(args: argparse.Namespace) -> int:
    """Handle MCP server commands."""
    from questgraph.mcp import MCP_AVAILABLE, run_server

    if not MCP_AVAILABLE:
        print("Error: MCP dependencies not installed.", file=sys.stderr)
        print("Install with: pip install questgraph[mcp]", file=sys.stderr)
        return 1

    if args.mcp_action == "serve":
        config = load_configuration(args)
        level = "DEBUG" if args.verbose else config.get("logging", {}).get("level")
        configure_logging(level)

        # stdout carries the stdio transport
        transport = args.transport or config.get("server", {}).get("transport", "stdio")
        print("Starting questgraph MCP server...", file=sys.stderr)
        print(f"Working directory: {Path.cwd()}", file=sys.stderr)
        print(f"Transport: {transport}", file=sys.stderr)

        try:
            run_server(working_dir=Path.cwd(), transport=transport, config=config)
        except KeyboardInterrupt:
            print("\nServer stopped.", file=sys.stderr)
        return 0
    else:
        print("Usage: questgraph mcp serve", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
