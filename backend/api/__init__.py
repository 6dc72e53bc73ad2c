"""
Ledgerly API package.

Provides the FastAPI application serving web sessions and the chat relay.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
