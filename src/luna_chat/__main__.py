"""CLI entry point for luna-chat."""

from __future__ import annotations

import argparse
import sys

from luna_chat.config import is_placeholder, load_config
from luna_chat.log import setup_logging


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c", "--config", default="config.yaml", help="Path to config file"
    )
    parser.add_argument(
        "-e", "--env", default=".env", help="Path to .env file"
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="luna-chat",
        description="Persona chat backend with tool calling and persisted sessions",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP server")
    _add_config_args(serve_parser)
    serve_parser.add_argument("--host", help="Override server.host")
    serve_parser.add_argument("--port", type=int, help="Override server.port")
    serve_parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")

    check_parser = subparsers.add_parser("config-check", help="Validate configuration")
    _add_config_args(check_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        # Default to serve
        args = parser.parse_args(["serve"])

    if args.command == "config-check":
        _check_config(args.config, args.env)
    elif args.command == "serve":
        _serve(args)


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    try:
        config = load_config(config_path, env_path)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Configuration valid: {config_path}")
    print(f"  Model        : {config.ai.model} (max {config.ai.max_tool_rounds} tool rounds)")
    print(f"  Bot id       : {config.ai.bot_id}")
    print(f"  Timezone     : {config.ai.timezone}")
    print(f"  Storage      : {config.storage.db_path}")
    print(f"  Server       : {config.server.host}:{config.server.port}")
    print(f"  Anthropic key: {'MISSING' if is_placeholder(config.anthropic.api_key) else 'set'}")
    print(f"  Weather key  : {'MISSING' if is_placeholder(config.weather.api_key) else 'set'}")
    print(f"  Admin secret : {'set' if config.server.admin_secret else 'not set (admin disabled)'}")
    if is_placeholder(config.anthropic.api_key):
        sys.exit(1)


def _serve(args: argparse.Namespace) -> None:
    """Load config and start the application."""
    try:
        config = load_config(args.config, args.env)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and .env.example to .env first")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    if is_placeholder(config.anthropic.api_key):
        print("Error: anthropic.api_key is not configured (set ANTHROPIC_API_KEY)", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_level, json_output=args.json_logs)

    import uvicorn

    from luna_chat.api.server import create_app

    uvicorn.run(
        create_app(config),
        host=args.host or config.server.host,
        port=args.port or config.server.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
