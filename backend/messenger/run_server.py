#!/usr/bin/env python3
"""
Starts the messenger API with uvicorn.

Usage:
    python -m backend.messenger.run_server                  # 0.0.0.0:8000
    python -m backend.messenger.run_server --port 9000
    python -m backend.messenger.run_server --reload         # development
"""

import argparse
import logging
from pathlib import Path

import uvicorn

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Start the messenger backend")
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="address to bind (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="port to listen on (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="reload on code changes (development only)",
    )

    args = parser.parse_args()
    current_dir = Path(__file__).parent

    logging.basicConfig(level=logging.INFO)
    logger.info(f"[Server] host={args.host} port={args.port} reload={args.reload}")

    uvicorn.run(
        "backend.messenger.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        reload_dirs=[str(current_dir)] if args.reload else None,
    )


if __name__ == "__main__":
    main()
