# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Walk transport exports."""

from .httpx_client import HttpxWalker, Phase
from .resolver import BoundedResolver, ResolvedAddress

__all__ = [
    "BoundedResolver",
    "HttpxWalker",
    "Phase",
    "ResolvedAddress",
]
