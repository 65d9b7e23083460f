# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Miles walk CLI."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..config import WalkSettings, load_walk_settings
from ..errors import InvalidWalkRequest
from ..http import HttpxWalker
from ..log import setup_logging
from ..models import WalkRequest, WalkResult, WalkSuccess
from ..runtime import run_walk

CLI_BODY_PREVIEW_CHARS = 200


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Walk a URL once and report timing or the failure cause")
    parser.add_argument("url", help="Target URL (http or https)")
    parser.add_argument("-X", "--method", default="GET", help="HTTP method (default: GET)")
    parser.add_argument(
        "-t",
        "--timeout",
        type=int,
        default=None,
        help="Request timeout in milliseconds (default: MILES_DEFAULT_TIMEOUT_MS or 10000)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output the JSON result record instead of a summary",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (certificate failures are then not reported)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: MILES_LOG_LEVEL or WARNING)")
    return parser


def _format_timing(pair: list[Any]) -> str:
    seconds, millis = pair
    return f"{seconds}s {millis:.3f}ms"


def _print_json(result: WalkResult) -> None:
    json.dump(result.to_dict(), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(result: WalkResult) -> None:
    payload = result.to_dict()
    if isinstance(result, WalkSuccess):
        print(f"[miles] HTTP {result.status}")
        print(f"Latency: {_format_timing(payload['latency'])}")
        print(f"Duration: {_format_timing(payload['duration'])}")
        body = result.text
        if len(body) > CLI_BODY_PREVIEW_CHARS:
            body = body[:CLI_BODY_PREVIEW_CHARS] + "...[truncated]"
        if body:
            print(f"Body: {body}")
        return

    error = payload["error"]
    print(f"[miles] Failed ({payload['cause'] or 'unclassified'})")
    code_suffix = f" [{error['code']}]" if error["code"] else ""
    print(f"Error: {error['type']}{code_suffix}: {error['message']}")
    print(f"Duration: {_format_timing(payload['duration'])}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        request = WalkRequest(url=args.url, method=args.method, timeout_ms=args.timeout)
    except InvalidWalkRequest as exc:
        parser.error(str(exc))

    settings: WalkSettings = load_walk_settings()
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    result = run_walk(request, walker=HttpxWalker(settings))

    if args.json:
        _print_json(result)
    else:
        _pretty_print(result)

    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
