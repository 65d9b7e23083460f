# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for Miles walks."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"miles-walk/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class WalkSettings:
    """Walk defaults.

    ``default_timeout_ms`` applies when a request carries no usable timeout and
    ``dns_timeout`` (seconds) is the fixed ceiling on name resolution.

    The request timer bounds the whole exchange (resolution, connect, headers
    and body), not socket idle time, so the fallback is 10 s rather than a few
    milliseconds; a call with a missing or non-positive timeout may therefore
    wait up to 10 s. Lower it with ``MILES_DEFAULT_TIMEOUT_MS``.
    """

    default_timeout_ms: int = 10_000
    dns_timeout: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> "WalkSettings":
        """Create settings from environment variables (evaluated at call time)."""
        default_timeout_ms = _int_env("MILES_DEFAULT_TIMEOUT_MS", cls.default_timeout_ms)
        if default_timeout_ms <= 0:
            default_timeout_ms = cls.default_timeout_ms
        dns_timeout = _float_env("MILES_DNS_TIMEOUT", cls.dns_timeout)
        if dns_timeout <= 0:
            dns_timeout = cls.dns_timeout
        return cls(
            default_timeout_ms=default_timeout_ms,
            dns_timeout=dns_timeout,
            user_agent=os.getenv("MILES_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("MILES_VERIFY_SSL", cls.verify_ssl),
        )


def load_walk_settings() -> WalkSettings:
    """Load walk settings from environment with sensible defaults."""
    return WalkSettings.from_env()
