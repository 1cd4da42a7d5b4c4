"""
Command-line launcher for the service desk API.
"""

import argparse
import logging
import os
import sys

import uvicorn

from .config import get_settings
from .logging_conf import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Start the auto service desk API")
    parser.add_argument("--host", default=settings.HOST, help="Host to bind to")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Root log level")
    parser.add_argument("--json-logs", action="store_true", default=settings.LOG_JSON, help="Emit JSON log lines")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.json_logs)
    # --reload serves from a fresh process that only sees the environment
    os.environ["LOG_LEVEL"] = args.log_level
    os.environ["LOG_JSON"] = "true" if args.json_logs else "false"

    logger.info(f"🚀 Starting service desk on {args.host}:{args.port}")
    logger.info(f"❤️  Health check: http://{args.host}:{args.port}/api/health")
    try:
        uvicorn.run(
            "service_desk.server:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=args.log_level.lower(),
            log_config=None,
        )
    except Exception as e:
        logger.error(f"❌ Failed to start service desk: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
