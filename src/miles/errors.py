# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Failure taxonomy for walks and helpers to classify raised errors."""

from __future__ import annotations

import errno
import socket
import ssl
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

DNS_LOOKUP_TIMEOUT_MESSAGE = "DNS lookup timeout"
SOCKET_TIMEOUT_MESSAGE = "Socket timeout"
SOCKET_TIMEOUT_CODE = "ECONNTIMEOUT"


class Cause(str, Enum):
    DNS = "dns"
    TLS = "tls"
    ABORT = "abort"


TLS_ERROR_CODES = frozenset(
    {
        "HOSTNAME_MISMATCH",
        "CERT_HAS_EXPIRED",
        "DEPTH_ZERO_SELF_SIGNED_CERT",
        "SELF_SIGNED_CERT_IN_CHAIN",
    }
)
SOCKET_ERROR_CODES = frozenset(
    {
        "ECONNRESET",
        "ECONNREFUSED",
        SOCKET_TIMEOUT_CODE,
    }
)

# OpenSSL X509_V_ERR_* values reported through SSLCertVerificationError.verify_code.
_VERIFY_CODE_NAMES = {
    9: "CERT_NOT_YET_VALID",
    10: "CERT_HAS_EXPIRED",
    18: "DEPTH_ZERO_SELF_SIGNED_CERT",
    19: "SELF_SIGNED_CERT_IN_CHAIN",
    20: "UNABLE_TO_GET_ISSUER_CERT_LOCALLY",
    21: "UNABLE_TO_VERIFY_LEAF_SIGNATURE",
    23: "CERT_REVOKED",
    62: "HOSTNAME_MISMATCH",
}
_EAI_NAMES = {getattr(socket, name): name for name in dir(socket) if name.startswith("EAI_")}


class WalkError(Exception):
    """Base class for errors synthesized by the walk itself."""

    code: str | None = None


class InvalidWalkRequest(WalkError, ValueError):
    """Raised when a walk request cannot be built from its inputs."""


class DnsLookupTimeout(WalkError):
    """Name resolution did not finish within the resolver ceiling."""

    def __init__(self, message: str = DNS_LOOKUP_TIMEOUT_MESSAGE):
        super().__init__(message)


class SocketTimeout(WalkError):
    """The request-level timer fired before the exchange completed."""

    code = SOCKET_TIMEOUT_CODE

    def __init__(self, message: str = SOCKET_TIMEOUT_MESSAGE):
        super().__init__(message)


@dataclass(frozen=True)
class ErrorDetails:
    """Diagnostic fields extracted from a raised error."""

    type: str
    message: str
    code: str | None = None
    resolution_failed: bool = False


def _iter_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and every error it wraps, outermost first."""
    seen: set[int] = set()
    pending: list[BaseException] = [exc]
    while pending:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.extend(getattr(current, "exceptions", None) or ())
        if current.__cause__ is not None:
            pending.append(current.__cause__)
        # httpcore re-raises with a suppressed context, so follow it regardless.
        if current.__context__ is not None:
            pending.append(current.__context__)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))


def _error_code(exc: BaseException) -> str | None:
    if isinstance(exc, WalkError):
        return exc.code
    if isinstance(exc, ssl.SSLCertVerificationError):
        verify_code = getattr(exc, "verify_code", None)
        return _VERIFY_CODE_NAMES.get(verify_code, "CERTIFICATE_VERIFY_FAILED")
    if isinstance(exc, ssl.SSLError):
        return getattr(exc, "reason", None)
    if isinstance(exc, (socket.gaierror, socket.herror)):
        return _EAI_NAMES.get(exc.errno, "EAI_FAIL")
    if isinstance(exc, OSError) and isinstance(exc.errno, int) and exc.errno > 0:
        return errno.errorcode.get(exc.errno)
    return None


def _is_resolution_error(exc: BaseException) -> bool:
    return isinstance(exc, (DnsLookupTimeout, socket.gaierror, socket.herror))


def describe_exception(exc: BaseException) -> ErrorDetails:
    """
    Extract type, code and message from an error and the errors it wraps.

    The type is the outermost class name, the code comes from the first error in
    the chain that carries one, and the message falls back to inner errors when
    the outer one is blank (httpx timeouts often are).
    """
    code: str | None = None
    message = ""
    resolution_failed = False
    for inner in _iter_exception_chain(exc):
        if code is None:
            code = _error_code(inner)
        if not message:
            message = str(inner)
        resolution_failed = resolution_failed or _is_resolution_error(inner)
    return ErrorDetails(
        type=type(exc).__name__,
        message=message,
        code=code,
        resolution_failed=resolution_failed,
    )


def classify_error(details: ErrorDetails) -> Cause | None:
    """Map extracted error details to a cause; ``None`` means unclassified."""
    if details.resolution_failed or details.message == DNS_LOOKUP_TIMEOUT_MESSAGE:
        return Cause.DNS
    if details.code in TLS_ERROR_CODES:
        return Cause.TLS
    if details.code in SOCKET_ERROR_CODES:
        return Cause.ABORT
    return None


def classify_exception(exc: BaseException) -> tuple[Cause | None, ErrorDetails]:
    details = describe_exception(exc)
    return classify_error(details), details


__all__ = [
    "Cause",
    "DNS_LOOKUP_TIMEOUT_MESSAGE",
    "DnsLookupTimeout",
    "ErrorDetails",
    "InvalidWalkRequest",
    "SOCKET_ERROR_CODES",
    "SOCKET_TIMEOUT_CODE",
    "SOCKET_TIMEOUT_MESSAGE",
    "SocketTimeout",
    "TLS_ERROR_CODES",
    "WalkError",
    "classify_error",
    "classify_exception",
    "describe_exception",
]
