# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Miles package entrypoint.

A walk performs one HTTP or HTTPS request against a URL, measures time to the
response headers and to connection close, and reports failures as one of a
small set of causes (``dns``, ``tls``, ``abort`` or unclassified) instead of
raising transport errors.
"""

from .config import WalkSettings, load_walk_settings
from .errors import Cause, DnsLookupTimeout, InvalidWalkRequest, SocketTimeout, classify_error, describe_exception
from .http import BoundedResolver, HttpxWalker
from .log import setup_logging
from .models import WalkFailure, WalkRequest, WalkResult, WalkSuccess
from .runtime import handler, run_walk
from .version import __version__

__all__ = [
    "BoundedResolver",
    "Cause",
    "DnsLookupTimeout",
    "HttpxWalker",
    "InvalidWalkRequest",
    "SocketTimeout",
    "WalkFailure",
    "WalkRequest",
    "WalkResult",
    "WalkSettings",
    "WalkSuccess",
    "classify_error",
    "describe_exception",
    "handler",
    "load_walk_settings",
    "run_walk",
    "setup_logging",
    "__version__",
]
