#!/usr/bin/env python3
"""
Bookstore API -- book catalogue CRUD with cookie-based sessions.

Usage:
  python main.py
  python main.py --port 8080
  python main.py --host 0.0.0.0 --reload

Environment variables (see core/config.py for the full list):
  JWT_SECRET     Required. At least 32 characters. Signs session cookies.
  DATABASE_URL   Optional. Defaults to sqlite:///mydb.sqlite.
"""

import argparse

import uvicorn


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the bookstore API server.")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=3000, help="Port to listen on (default: 3000)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    # Import string rather than the app object so --reload can re-import it.
    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
