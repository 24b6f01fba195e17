#!/usr/bin/env python3
"""
Chirpy -- short-post social backend.

Usage:
  python main.py serve
  python main.py serve --port 8080
  python main.py serve --host 0.0.0.0 --reload

Environment variables (see core/config.py for the full list):
  PLATFORM      "dev" unlocks POST /admin/reset and a generated JWT_SECRET.
  JWT_SECRET    HS256 signing key, at least 32 characters. Required outside dev.
  POLKA_KEY     API key the payment provider presents on webhook calls.
  DB_URL        SQLAlchemy URL. Defaults to chirpy.db next to this file.
  STATIC_DIR    Directory served under /app. Defaults to static/ next to this file.
"""

import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="chirpy",
        description="Run the Chirpy API server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve
  PLATFORM=dev python main.py serve --reload
  JWT_SECRET=... POLKA_KEY=... python main.py serve --host 0.0.0.0 --port 8080
        """,
    )
    commands = parser.add_subparsers(dest="command")

    serve = commands.add_parser("serve", help="Start the HTTP server")
    serve.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind (default: 127.0.0.1)",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)",
    )
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change",
    )
    args = parser.parse_args()

    if args.command != "serve":
        parser.print_help()
        return

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
