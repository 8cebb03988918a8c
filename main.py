#!/usr/bin/env python3
"""Main entry point for the LeetCode MCP Server."""

import argparse
import json
import logging
import sys
from typing import Optional
import structlog
from structlog.contextvars import clear_contextvars

from leetcode_mcp.config import ServerConfig, load_config, create_sample_config
from leetcode_mcp.protocol.server import MCPServer
from leetcode_mcp.transport import StdioTransport


def setup_logging(level: str = "info", debug: bool = False) -> None:
    """Setup structured logging on stderr; stdout carries the protocol."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stderr)


def create_transport(config: ServerConfig):
    """Create transport instance based on configuration."""
    transport_config = config.transport

    if transport_config.type == "stdio":
        return StdioTransport(transport_config.model_dump())
    else:
        raise ValueError(f"Unknown transport type: {transport_config.type}")


def run_server(config_file: Optional[str] = None, debug: bool = False) -> None:
    """Serve requests from stdin until it is closed."""
    config = load_config(config_file)
    if debug:
        config.debug = True
        config.log_level = "debug"

    setup_logging(config.log_level, config.debug)
    logger = structlog.get_logger()

    # Single info-level startup notice.
    logger.info(
        "LeetCode MCP Server started",
        server_name=config.server_name,
        version=config.server_version,
        transport_type=config.transport.type
    )

    try:
        with MCPServer(create_transport(config), config.to_dict()) as server:
            server.serve()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down")
    except Exception as e:
        logger.error("Server error", error=str(e), exc_info=True)
        sys.exit(1)
    finally:
        clear_contextvars()
        logger.debug("LeetCode MCP Server stopped")


def print_sample_config() -> None:
    print(json.dumps(create_sample_config(), indent=2))


def validate_config(config_file: Optional[str]) -> int:
    """Load the configuration, echo it and return a process exit status."""
    try:
        config = load_config(config_file)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    print("Configuration is valid")
    print(json.dumps(config.to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leetcode-mcp-server",
        description="MCP server exposing the LeetCode daily challenge over stdio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  leetcode-mcp-server
  leetcode-mcp-server --config config.json
  leetcode-mcp-server --sample-config > config.json
  LEETCODE_GRAPHQL_URL=https://leetcode.cn/graphql leetcode-mcp-server
"""
    )

    parser.add_argument("--config", "-c", help="Configuration file path (JSON format)")

    commands = parser.add_mutually_exclusive_group()
    commands.add_argument(
        "--sample-config",
        action="store_true",
        help="Print a sample configuration and exit"
    )
    commands.add_argument(
        "--validate-config",
        action="store_true",
        help="Check the configuration and exit"
    )

    parser.add_argument("--debug", action="store_true", help="Log at debug level in console format")
    return parser


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()

    if args.sample_config:
        print_sample_config()
    elif args.validate_config:
        sys.exit(validate_config(args.config))
    else:
        run_server(args.config, debug=args.debug)


if __name__ == "__main__":
    main()
