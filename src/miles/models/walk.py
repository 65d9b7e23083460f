# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Walk request/result models."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import urlsplit

from ..errors import Cause, InvalidWalkRequest

DEFAULT_PORTS = {"http": 80, "https": 443}


def _coerce_timeout_ms(value: Any) -> int | None:
    """Return a positive millisecond timeout or ``None`` when the value is unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return parsed if parsed > 0 else None


def split_seconds(elapsed: float) -> list[int | float]:
    """Express a duration as ``[whole seconds, fractional milliseconds]``."""
    fraction, whole = math.modf(max(elapsed, 0.0))
    return [int(whole), fraction * 1000.0]


@dataclass(frozen=True)
class WalkRequest:
    """A single walk target; invalid URLs fail at construction time."""

    url: str
    method: str = "GET"
    timeout_ms: int | None = None

    def __post_init__(self) -> None:
        url = str(self.url).strip()
        try:
            parts = urlsplit(url)
            parts.port  # noqa: B018 - raises on malformed or out-of-range ports
        except ValueError as exc:
            raise InvalidWalkRequest(f"Invalid URL: {url!r}") from exc
        if parts.scheme not in DEFAULT_PORTS:
            raise InvalidWalkRequest(f"Unsupported URL scheme: {url!r}")
        if not parts.hostname:
            raise InvalidWalkRequest(f"URL has no host: {url!r}")
        if not str(self.method or "").strip():
            raise InvalidWalkRequest("Missing HTTP method")
        object.__setattr__(self, "url", url)
        object.__setattr__(self, "method", str(self.method).strip().upper())
        object.__setattr__(self, "timeout_ms", _coerce_timeout_ms(self.timeout_ms))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> WalkRequest:
        """Build a request from a decoded ``{url, method, timeout}`` payload."""
        if not isinstance(payload, Mapping):
            raise InvalidWalkRequest("Walk payload must be a JSON object")
        url = payload.get("url")
        method = payload.get("method")
        if url is None:
            raise InvalidWalkRequest("Missing URL")
        if method is None:
            raise InvalidWalkRequest("Missing HTTP method")
        return cls(url=str(url), method=str(method), timeout_ms=payload.get("timeout"))

    @property
    def is_tls(self) -> bool:
        return self.scheme == "https"

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme

    @property
    def hostname(self) -> str:
        return urlsplit(self.url).hostname or ""

    @property
    def explicit_port(self) -> int | None:
        return urlsplit(self.url).port

    @property
    def port(self) -> int:
        return self.explicit_port or DEFAULT_PORTS[self.scheme]

    @property
    def target(self) -> str:
        """Origin-form request target: path (defaulting to ``/``) plus query."""
        parts = urlsplit(self.url)
        path = parts.path or "/"
        return f"{path}?{parts.query}" if parts.query else path

    @property
    def host_header(self) -> str:
        host = self.hostname
        if ":" in host:
            host = f"[{host}]"
        port = self.explicit_port
        if port and port != DEFAULT_PORTS[self.scheme]:
            return f"{host}:{port}"
        return host


@dataclass(frozen=True)
class WalkSuccess:
    """Response observed; ``latency`` is time to headers, ``duration`` time to close."""

    status: int
    body: bytes
    latency: float
    duration: float

    @property
    def success(self) -> bool:
        return True

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "status": self.status,
            "body": self.text,
            "latency": split_seconds(self.latency),
            "duration": split_seconds(self.duration),
        }


@dataclass(frozen=True)
class WalkFailure:
    """The walk did not complete; ``cause`` is ``None`` when unclassified."""

    cause: Cause | None
    error_type: str
    error_message: str
    duration: float
    error_code: str | None = None

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "cause": self.cause.value if self.cause is not None else None,
            "error": {
                "type": self.error_type,
                "code": self.error_code,
                "message": self.error_message,
            },
            "duration": split_seconds(self.duration),
        }


WalkResult = Union[WalkSuccess, WalkFailure]
