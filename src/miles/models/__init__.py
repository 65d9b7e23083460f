# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for Miles."""

from .walk import WalkFailure, WalkRequest, WalkResult, WalkSuccess, split_seconds

__all__ = [
    "WalkFailure",
    "WalkRequest",
    "WalkResult",
    "WalkSuccess",
    "split_seconds",
]
