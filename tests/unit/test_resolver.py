# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import socket
import time

import pytest

from miles.errors import DNS_LOOKUP_TIMEOUT_MESSAGE, DnsLookupTimeout
from miles.http.resolver import BoundedResolver


def _info(family, address, port=80):
    sockaddr = (address, port) if family == socket.AF_INET else (address, port, 0, 0)
    return (family, socket.SOCK_STREAM, 6, "", sockaddr)


@pytest.mark.asyncio
async def test_resolver_prefers_ipv4():
    async def lookup(hostname, port):
        return [_info(socket.AF_INET6, "::1", port), _info(socket.AF_INET, "127.0.0.1", port)]

    resolved = await BoundedResolver(timeout=1.0, lookup=lookup).resolve("localhost", 80)
    assert resolved.address == "127.0.0.1"
    assert resolved.family == socket.AF_INET
    assert resolved.url_host == "127.0.0.1"


@pytest.mark.asyncio
async def test_resolver_brackets_ipv6_only_results():
    async def lookup(hostname, port):
        return [_info(socket.AF_INET6, "2001:db8::1", port)]

    resolved = await BoundedResolver(timeout=1.0, lookup=lookup).resolve("v6.example", 443)
    assert resolved.url_host == "[2001:db8::1]"


@pytest.mark.asyncio
async def test_resolver_times_out_independently_and_discards_late_answer():
    calls = []

    async def slow_lookup(hostname, port):
        calls.append(hostname)
        await asyncio.sleep(1.0)
        return [_info(socket.AF_INET, "10.0.0.1", port)]

    resolver = BoundedResolver(timeout=0.05, lookup=slow_lookup)
    start = time.perf_counter()
    with pytest.raises(DnsLookupTimeout) as excinfo:
        await resolver.resolve("slow.example", 80)
    elapsed = time.perf_counter() - start

    assert str(excinfo.value) == DNS_LOOKUP_TIMEOUT_MESSAGE
    assert elapsed < 0.5
    assert calls == ["slow.example"]


@pytest.mark.asyncio
async def test_resolver_propagates_lookup_errors():
    async def failing_lookup(hostname, port):
        raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

    with pytest.raises(socket.gaierror):
        await BoundedResolver(timeout=1.0, lookup=failing_lookup).resolve("missing.example", 80)


@pytest.mark.asyncio
async def test_resolver_treats_empty_answer_as_not_found():
    async def empty_lookup(hostname, port):
        return []

    with pytest.raises(socket.gaierror):
        await BoundedResolver(timeout=1.0, lookup=empty_lookup).resolve("empty.example", 80)


@pytest.mark.asyncio
async def test_resolver_system_lookup_resolves_ip_literals():
    resolved = await BoundedResolver(timeout=1.0).resolve("127.0.0.1", 80)
    assert resolved.address == "127.0.0.1"
