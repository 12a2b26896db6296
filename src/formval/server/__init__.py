"""
HTTP server module for formval.

Provides a Starlette app that validates client collector posts.
"""

from formval.server.app import create_app, parse_urlencoded, run_server

__all__ = [
    "create_app",
    "parse_urlencoded",
    "run_server",
]
