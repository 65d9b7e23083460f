# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for Miles."""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "miles"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _resolve_level(level: str | None) -> int:
    name = (level or os.getenv("MILES_LOG_LEVEL") or "WARNING").strip().upper()
    return getattr(logging, name, logging.WARNING)


def setup_logging(level: str | None = None) -> None:
    """
    Configure logging for CLI and handler use.

    Hosted runtimes usually install a root handler before our code runs, which
    turns ``basicConfig`` into a no-op, so the package logger level is set
    explicitly as well.
    """
    effective_level = _resolve_level(level)
    logging.basicConfig(level=effective_level, format=LOG_FORMAT)
    logging.getLogger(LOGGER_NAME).setLevel(effective_level)


__all__ = ["LOGGER_NAME", "setup_logging"]
