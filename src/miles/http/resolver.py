# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Name resolution with its own timeout ceiling."""

from __future__ import annotations

import asyncio
import logging
import socket
import threading
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import DnsLookupTimeout

logger = logging.getLogger(__name__)

AddrInfo = tuple[Any, ...]
Lookup = Callable[[str, int], Awaitable[Sequence[AddrInfo]]]


@dataclass(frozen=True)
class ResolvedAddress:
    address: str
    family: int

    @property
    def url_host(self) -> str:
        """Host as it must appear inside a URL (IPv6 literals bracketed)."""
        return f"[{self.address}]" if self.family == socket.AF_INET6 else self.address


async def _system_lookup(hostname: str, port: int) -> Sequence[AddrInfo]:
    """
    Run ``socket.getaddrinfo`` on a daemon thread.

    The loop's default executor is joined when ``asyncio.run`` shuts down, so a
    hung lookup there would hold the caller long after the timer fired. An
    abandoned daemon thread is never joined.
    """
    loop = asyncio.get_running_loop()
    answer: asyncio.Future[Sequence[AddrInfo]] = loop.create_future()

    def _deliver(infos: Sequence[AddrInfo] | None, error: BaseException | None) -> None:
        if answer.done():
            return
        if error is not None:
            answer.set_exception(error)
        else:
            answer.set_result(infos or [])

    def _post(infos: Sequence[AddrInfo] | None, error: BaseException | None) -> None:
        try:
            loop.call_soon_threadsafe(_deliver, infos, error)
        except RuntimeError:
            # Loop already closed; the walk finished without this answer.
            logger.debug("Discarding late DNS answer for %s", hostname)

    def _lookup() -> None:
        try:
            infos = socket.getaddrinfo(hostname, port, type=socket.SOCK_STREAM)
        except Exception as exc:  # noqa: BLE001
            _post(None, exc)
        else:
            _post(infos, None)

    threading.Thread(target=_lookup, name=f"miles-dns-{hostname}", daemon=True).start()
    return await answer


class BoundedResolver:
    """
    Resolve a hostname or fail within ``timeout`` seconds.

    The lookup and the timer race; the first to finish decides the outcome and
    the other is cancelled, so a late lookup result is discarded. A timeout
    surfaces as ``DnsLookupTimeout``.
    """

    def __init__(self, timeout: float = 1.0, lookup: Lookup | None = None):
        self.timeout = timeout
        self._lookup = lookup or _system_lookup

    async def resolve(self, hostname: str, port: int) -> ResolvedAddress:
        try:
            infos = await asyncio.wait_for(self._lookup(hostname, port), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.debug("DNS lookup for %s exceeded %.3fs", hostname, self.timeout)
            raise DnsLookupTimeout() from None
        if not infos:
            raise socket.gaierror(socket.EAI_NONAME, f"No addresses found for {hostname}")
        # IPv4 first, matching what most local test servers bind to.
        ordered = sorted(infos, key=lambda info: info[0] != socket.AF_INET)
        family, *_, sockaddr = ordered[0]
        return ResolvedAddress(address=str(sockaddr[0]), family=int(family))


__all__ = ["BoundedResolver", "ResolvedAddress"]
