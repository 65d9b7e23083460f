# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed walk orchestration."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

import httpx

from ..config import WalkSettings, load_walk_settings
from ..errors import SocketTimeout, classify_exception
from ..models.walk import WalkFailure, WalkRequest, WalkResult, WalkSuccess, split_seconds
from .resolver import BoundedResolver

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    PENDING = "pending"
    HEADERS_RECEIVED = "headers_received"
    BODY_COMPLETE = "body_complete"
    FAILED = "failed"
    FINALIZED = "finalized"


_TRANSITIONS = {
    Phase.PENDING: {Phase.HEADERS_RECEIVED, Phase.FAILED},
    Phase.HEADERS_RECEIVED: {Phase.BODY_COMPLETE, Phase.FAILED},
    Phase.BODY_COMPLETE: {Phase.FINALIZED, Phase.FAILED},
    Phase.FAILED: {Phase.FINALIZED},
    Phase.FINALIZED: set(),
}


@dataclass
class _Exchange:
    """Per-walk progress; owned by a single walk and never returned."""

    started: float
    phase: Phase = Phase.PENDING
    status: int | None = None
    latency: float | None = None
    chunks: list[bytes] = field(default_factory=list)
    body: bytes = b""
    error: BaseException | None = None

    def elapsed(self) -> float:
        return time.perf_counter() - self.started

    def _advance(self, phase: Phase) -> None:
        if phase not in _TRANSITIONS[self.phase]:
            raise RuntimeError(f"Invalid walk transition {self.phase.value} -> {phase.value}")
        self.phase = phase

    def headers_received(self, status: int) -> None:
        self._advance(Phase.HEADERS_RECEIVED)
        self.status = status
        self.latency = self.elapsed()

    def chunk_received(self, chunk: bytes) -> None:
        if self.phase is Phase.HEADERS_RECEIVED and chunk:
            self.chunks.append(chunk)

    def body_complete(self) -> None:
        self._advance(Phase.BODY_COMPLETE)
        self.body = b"".join(self.chunks)

    def failed(self, error: BaseException) -> None:
        if self.phase is Phase.FAILED:
            return
        self._advance(Phase.FAILED)
        self.error = error
        self.chunks.clear()

    def finalize(self) -> WalkResult:
        duration = self.elapsed()
        if self.phase is Phase.BODY_COMPLETE and self.status is not None and self.latency is not None:
            result: WalkResult = WalkSuccess(
                status=self.status,
                body=self.body,
                latency=self.latency,
                duration=duration,
            )
        elif self.phase is Phase.FAILED and self.error is not None:
            cause, details = classify_exception(self.error)
            result = WalkFailure(
                cause=cause,
                error_type=details.type,
                error_code=details.code,
                error_message=details.message,
                duration=duration,
            )
        else:
            raise RuntimeError(f"Cannot finalize a walk in phase {self.phase.value}")
        self._advance(Phase.FINALIZED)
        return result


class HttpxWalker:
    """
    Run one HTTP(S) request per ``walk`` call and report how it went.

    The hostname is resolved through a ``BoundedResolver`` and the connection is
    opened against the resolved address; the original hostname is kept for the
    ``Host`` header and TLS server name so certificate checks are unaffected.
    Nothing is pooled or retried between calls.
    """

    def __init__(
        self,
        settings: WalkSettings | None = None,
        resolver: BoundedResolver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or load_walk_settings()
        self.resolver = resolver or BoundedResolver(timeout=self.settings.dns_timeout)
        self._transport = transport

    def effective_timeout_ms(self, request: WalkRequest) -> int:
        if request.timeout_ms is not None and request.timeout_ms > 0:
            return request.timeout_ms
        return self.settings.default_timeout_ms

    def _build_client(self) -> httpx.AsyncClient:
        transport = self._transport or httpx.AsyncHTTPTransport(verify=self.settings.verify_ssl, retries=0)
        return httpx.AsyncClient(
            transport=transport,
            follow_redirects=False,
            timeout=None,
            trust_env=False,
        )

    async def walk(self, request: WalkRequest) -> WalkResult:
        timeout_ms = self.effective_timeout_ms(request)
        logger.info(
            "Walking %s",
            {
                "hostname": request.hostname,
                "tls": request.is_tls,
                "port": request.port,
                "path": request.target,
                "method": request.method,
                "timeout": timeout_ms,
            },
        )

        exchange = _Exchange(started=time.perf_counter())
        try:
            async with asyncio.timeout(timeout_ms / 1000.0) as deadline:
                await self._exchange(request, exchange)
        except TimeoutError as exc:
            exchange.failed(SocketTimeout() if deadline.expired() else exc)
        except Exception as exc:  # noqa: BLE001
            exchange.failed(exc)

        result = exchange.finalize()
        if isinstance(result, WalkSuccess):
            logger.info("Success! HTTP %s", result.status)
        else:
            logger.info(
                "Failure! Cause is %r, error is %s",
                result.cause.value if result.cause else None,
                {"type": result.error_type, "code": result.error_code, "message": result.error_message},
            )
        seconds, millis = split_seconds(result.duration)
        logger.info("This walk took %s seconds, %.3f milliseconds", seconds, millis)
        return result

    async def _exchange(self, request: WalkRequest, exchange: _Exchange) -> None:
        resolved = await self.resolver.resolve(request.hostname, request.port)
        url = f"{request.scheme}://{resolved.url_host}:{request.port}{request.target}"
        headers = {"Host": request.host_header, "User-Agent": self.settings.user_agent}
        extensions = {"sni_hostname": request.hostname} if request.is_tls else {}

        async with self._build_client() as client:
            async with client.stream(request.method, url, headers=headers, extensions=extensions) as response:
                exchange.headers_received(response.status_code)
                async for chunk in response.aiter_raw():
                    exchange.chunk_received(chunk)
                exchange.body_complete()


__all__ = ["HttpxWalker", "Phase"]
