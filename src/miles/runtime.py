# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Invocation entry points wrapping a single walk."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any

from .config import WalkSettings, load_walk_settings
from .http.httpx_client import HttpxWalker
from .log import setup_logging
from .models.walk import WalkRequest, WalkResult


def run_walk(request: WalkRequest, *, settings: WalkSettings | None = None, walker: HttpxWalker | None = None) -> WalkResult:
    """Run one walk on a fresh event loop and return its result."""
    walker = walker or HttpxWalker(settings or load_walk_settings())
    return asyncio.run(walker.walk(request))


def parse_event(event: Mapping[str, Any]) -> WalkRequest:
    """
    Build a walk request from an invocation event.

    The event carries a JSON document in ``body`` with ``url``, ``method`` and an
    optional ``timeout`` in milliseconds. Malformed JSON raises
    ``json.JSONDecodeError`` and a bad URL raises ``InvalidWalkRequest``; neither
    is turned into a walk failure.
    """
    raw_body = event.get("body") if isinstance(event, Mapping) else None
    payload = json.loads(raw_body) if raw_body else {}
    return WalkRequest.from_payload(payload)


def handler(event: Mapping[str, Any], context: Any = None) -> dict[str, Any]:  # noqa: ARG001
    """Lambda-style handler: parse the event, walk, return the result record."""
    setup_logging()
    request = parse_event(event)
    return run_walk(request).to_dict()


__all__ = ["handler", "parse_event", "run_walk"]
