"""
Formval Server Entry Point.

Serve a set of forms over HTTP for the client-side collector.

Usage:
    # Forms come from a module attribute mapping form id -> factory
    python run_server.py --forms myapp.forms:FORMS

    # Custom host and port
    python run_server.py --forms myapp.forms:FORMS --host 0.0.0.0 --port 8080

    # Use environment variables
    FORMVAL_PORT=8080 python run_server.py --forms myapp.forms:FORMS
"""

import argparse
import asyncio
import importlib
import sys

from formval.config import get_config
from formval.server import run_server


def load_forms(target: str):
    """Load ``module:attribute`` and return the attribute."""
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Expected 'module:attribute', got '{target}'")
    module = importlib.import_module(module_name)
    return getattr(module, attribute)


def main():
    """Main entry point."""
    config = get_config()

    parser = argparse.ArgumentParser(
        description="Formval Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_server.py --forms myapp.forms:FORMS
  python run_server.py --forms myapp.forms:FORMS --host 0.0.0.0 --port 8080

Environment Variables:
  FORMVAL_HOST             Host to bind to (default: 127.0.0.1)
  FORMVAL_PORT             Port to listen on (default: 9110)
  FORMVAL_LOG_LEVEL        uvicorn log level (default: info)
  FORMVAL_CLIENT_VERSION   Reject submissions from other client versions
  FORMVAL_ENABLE_TRACING   Print a trace for every validation
        """,
    )

    parser.add_argument(
        "--forms",
        required=True,
        help="Forms mapping as module:attribute",
    )

    parser.add_argument(
        "--host",
        default=config.server_host,
        help=f"Host to bind to (default: {config.server_host})",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=config.server_port,
        help=f"Port to listen on (default: {config.server_port})",
    )

    args = parser.parse_args()

    try:
        forms = load_forms(args.forms)
    except (ImportError, AttributeError, ValueError) as e:
        print(f"Error loading forms: {e}")
        sys.exit(1)

    print("=" * 60)
    print("Formval Server")
    print("=" * 60)
    print(f"Host: {args.host}")
    print(f"Port: {args.port}")
    print(f"Forms: {', '.join(sorted(forms))}")
    print("=" * 60)

    try:
        asyncio.run(run_server(forms, host=args.host, port=args.port))
    except KeyboardInterrupt:
        print("\nServer stopped.")
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
