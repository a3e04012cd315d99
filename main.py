#!/usr/bin/env python3
"""
Command line entry point for the Momo memory plugin.

Runs the plugin's user-facing operations against the current project, using
the same configuration and container tags the host plugin would use.

Usage:
    python main.py status                     # Show configuration and container tags
    python main.py add "Prefers tabs" --scope=user --type=preference
    python main.py search "database schema"   # Search both scopes
    python main.py list --scope=project       # List recent project memories
    python main.py profile                    # Show the computed user profile
    python main.py forget mem_abc123          # Forget a memory
    python main.py ingest ./notes.md --no-wait
"""

import argparse
import os
import sys

from helper import load_env, mask_secret
from momo_memory.config import get_config_dir
from momo_memory.logger import logger, setup_logging
from momo_memory.plugin import MomoPlugin, create_plugin
from momo_memory.tools import HELP_TEXT, ToolError


def handle_status(plugin: MomoPlugin) -> int:
    config = plugin.config
    print(f"Project directory: {plugin.directory}")
    print(f"Config directory:  {get_config_dir()}")
    print(f"Configured:        {'yes' if plugin.is_configured else 'no'}")
    print(f"API key:           {mask_secret(config.api_key)}")
    print(f"Base URL:          {config.base_url}")
    print(f"User tag:          {plugin.tags.user}")
    print(f"Project tag:       {plugin.tags.project}")
    return 0


def run_command(plugin: MomoPlugin, args) -> str:
    """Map a parsed subcommand onto the plugin's tools."""
    tools = plugin.tools

    if args.command == "add":
        return tools.momo("add", content=args.content, scope=args.scope, memory_type=args.type)
    if args.command == "search":
        return tools.momo("search", query=args.query, scope=args.scope, limit=args.limit)
    if args.command == "list":
        return tools.momo("list", scope=args.scope, limit=args.limit)
    if args.command == "profile":
        return tools.momo("profile", scope=args.scope)
    if args.command == "forget":
        return tools.momo("forget", memory_id=args.memory_id)
    if args.command == "ingest":
        return tools.ingest(
            args.input,
            input_type=args.input_type,
            scope=args.scope,
            extract_memories=not args.no_extract,
            metadata_json=args.metadata,
            content_type=args.content_type,
            wait=not args.no_wait,
            timeout_ms=args.timeout_ms,
            poll_interval_ms=args.poll_interval_ms,
        )
    return HELP_TEXT


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Momo memory - persistent memory for coding agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py status
  python main.py search "how do we run migrations" --scope=project
  python main.py ingest https://example.com/design-doc
        """
    )
    parser.add_argument(
        "--directory",
        type=str,
        default=None,
        help="Project directory (default: current directory)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: $MOMO_LOG_LEVEL or WARNING)"
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("status", help="Show configuration and container tags")
    subparsers.add_parser("help", help="Show memory tool help")

    add_parser = subparsers.add_parser("add", help="Store a memory")
    add_parser.add_argument("content", help="Memory content (<private> blocks are stripped)")
    add_parser.add_argument("--scope", choices=["user", "project"], default=None)
    add_parser.add_argument("--type", choices=["fact", "preference", "episode"], default=None)

    search_parser = subparsers.add_parser("search", help="Search memories")
    search_parser.add_argument("query")
    search_parser.add_argument("--scope", choices=["user", "project"], default=None)
    search_parser.add_argument("--limit", type=int, default=None)

    list_parser = subparsers.add_parser("list", help="List recent memories")
    list_parser.add_argument("--scope", choices=["user", "project"], default=None)
    list_parser.add_argument("--limit", type=int, default=None)

    profile_parser = subparsers.add_parser("profile", help="Show the computed profile")
    profile_parser.add_argument("--scope", choices=["user", "project"], default=None)

    forget_parser = subparsers.add_parser("forget", help="Forget a memory by ID")
    forget_parser.add_argument("memory_id")

    ingest_parser = subparsers.add_parser("ingest", help="Ingest text, a URL, or a file")
    ingest_parser.add_argument("input")
    ingest_parser.add_argument("--input-type", choices=["auto", "text", "url", "file"], default=None)
    ingest_parser.add_argument("--scope", choices=["user", "project"], default=None)
    ingest_parser.add_argument("--metadata", default=None, help="JSON object attached as metadata")
    ingest_parser.add_argument("--content-type", default=None)
    ingest_parser.add_argument("--no-extract", action="store_true", help="Skip memory extraction")
    ingest_parser.add_argument("--no-wait", action="store_true", help="Return once the job is queued")
    ingest_parser.add_argument("--timeout-ms", type=int, default=None)
    ingest_parser.add_argument("--poll-interval-ms", type=int, default=None)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_env()
    setup_logging(args.log_level)

    directory = os.path.abspath(args.directory) if args.directory else None
    if directory and not os.path.isdir(directory):
        logger.error(f"Project directory does not exist: {directory}")
        return 1

    plugin = create_plugin(directory=directory)
    try:
        if args.command in (None, "status"):
            return handle_status(plugin)

        try:
            output = run_command(plugin, args)
        except ToolError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except Exception as e:
            logger.error(f"Error: {e}")
            return 1

        print(output)
        return 1 if output.startswith("Error:") else 0
    finally:
        plugin.close()


if __name__ == "__main__":
    sys.exit(main())
