#!/usr/bin/env python
"""
Serve the Ledgerly API (web sessions and the chat relay) with uvicorn.

Host, port, reload and log level come from Settings; flags override them.

Usage:
    python run_api.py                       # Settings from .env / environment
    python run_api.py --reload              # Restart on code changes
    python run_api.py --port 9000 --log-level debug
"""

import argparse

import uvicorn

from shared.config import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Serve the Ledgerly API")
    parser.add_argument("--reload", action="store_true", help="Restart the server when code changes")
    parser.add_argument("--host", type=str, default=settings.host, help=f"Bind address (default {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Bind port (default {settings.port})")
    parser.add_argument("--log-level", type=str, default=settings.log_level, help="uvicorn log level")
    args = parser.parse_args()

    uvicorn.run(
        "api:app",
        host=args.host,
        port=args.port,
        reload=args.reload or settings.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
