#!/usr/bin/env python3
"""
Command-line client for the ZEDLY API.

Logs in, calls API endpoints through the authenticated gateway and logs out.
The session is kept in a JSON file between invocations so an expired access
token is renewed transparently on the next call.
"""

import argparse
import asyncio
import json
import os
import sys
from typing import Any, Dict, Optional

from client_gateway.app.main import ZedlyClient
from shared.config import get_config
from shared.errors import ZedlyClientException


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _build_client(args: argparse.Namespace) -> ZedlyClient:
    overrides: Dict[str, Any] = {
        "base_url": args.base_url,
        "storage_backend": "file",
        "storage_path": args.session_file,
        "log_level": args.log_level,
        "enable_metrics": False,
    }
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    client = ZedlyClient(get_config(**overrides))
    client.navigator.on_navigate = lambda path: print(f"[zedly] session ended, please log in again ({path})", file=sys.stderr)
    return client


async def run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the exit code."""
    async with _build_client(args) as client:
        if args.command == "login":
            result = await client.session.login(args.username, args.password, remember=args.remember)
            if result.must_change_password:
                print("[zedly] password change required, run 'change-password'", file=sys.stderr)
                return 0
            _print_json(result.user)
            return 0

        if args.command == "change-password":
            await client.session.change_password(args.old_password, args.new_password)
            print("[zedly] password changed")
            return 0

        if args.command == "whoami":
            user = await client.session.current_user()
            if user is None:
                print("[zedly] not logged in", file=sys.stderr)
                return 1
            _print_json(user)
            return 0

        if args.command == "logout":
            await client.session.logout()
            print("[zedly] logged out")
            return 0

        body: Optional[Any] = json.loads(args.json) if args.json else None
        response = await client.request(args.method, args.path, json=body)
        try:
            _print_json(response.json())
        except ValueError:
            print(response.text)
        return 0 if response.is_success else 1


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Call the ZEDLY API with automatic token renewal.")
    parser.add_argument("--base-url", default=os.getenv("ZEDLY_BASE_URL", "http://localhost:3000"), help="ZEDLY API base URL")
    parser.add_argument("--session-file", default=os.getenv("ZEDLY_STORAGE_PATH", "~/.zedly/session.json"), help="Where the session is stored")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds (default: none)")
    parser.add_argument("--log-level", default=os.getenv("ZEDLY_LOG_LEVEL", "warning"), help="Log level")

    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Log in and store the session")
    login.add_argument("--username", required=True)
    login.add_argument("--password", required=True)
    login.add_argument("--remember", action="store_true", help="Remember the username")

    change = commands.add_parser("change-password", help="Change the password")
    change.add_argument("--old-password", required=True)
    change.add_argument("--new-password", required=True)

    commands.add_parser("whoami", help="Show the cached user")
    commands.add_parser("logout", help="Log out and clear the session")

    request = commands.add_parser("request", help="Call an API endpoint")
    request.add_argument("method", help="HTTP method")
    request.add_argument("path", help="Path, e.g. /api/student/results")
    request.add_argument("--json", default=None, help="JSON request body")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130
    except ZedlyClientException as exc:
        print(exc.to_response().model_dump_json(indent=2), file=sys.stderr)
        return 1
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[zedly] failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
