# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import dataclasses

import pytest

from miles.errors import Cause, InvalidWalkRequest
from miles.models import WalkFailure, WalkRequest, WalkSuccess, split_seconds


def test_walk_request_normalizes_http_url():
    request = WalkRequest(url="http://localhost:8888", method="get", timeout_ms=60000)
    assert request.is_tls is False
    assert request.hostname == "localhost"
    assert request.port == 8888
    assert request.target == "/"
    assert request.method == "GET"
    assert request.timeout_ms == 60000
    assert request.host_header == "localhost:8888"


def test_walk_request_defaults_https_port_and_keeps_query():
    request = WalkRequest(url="https://Example.COM/status/check?deep=1", method="HEAD")
    assert request.is_tls is True
    assert request.hostname == "example.com"
    assert request.port == 443
    assert request.target == "/status/check?deep=1"
    assert request.host_header == "example.com"


def test_walk_request_brackets_ipv6_host_header():
    request = WalkRequest(url="http://[::1]:8080/x", method="GET")
    assert request.hostname == "::1"
    assert request.host_header == "[::1]:8080"


@pytest.mark.parametrize(
    "url",
    ["not a url", "/relative/path", "ftp://example.com/file", "http://", "http://example.com:99999/", "undefined"],
)
def test_walk_request_rejects_invalid_urls(url):
    with pytest.raises(InvalidWalkRequest):
        WalkRequest(url=url, method="GET")


def test_walk_request_rejects_blank_method():
    with pytest.raises(InvalidWalkRequest):
        WalkRequest(url="http://example.com", method="  ")


def test_invalid_walk_request_is_a_value_error():
    with pytest.raises(ValueError):
        WalkRequest(url="mailto:someone@example.com")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(250, 250), ("1000", 1000), (12.9, 12), (None, None), (0, None), (-5, None), ("soon", None), (True, None)],
)
def test_walk_request_timeout_coercion(raw, expected):
    assert WalkRequest(url="http://example.com", timeout_ms=raw).timeout_ms == expected


def test_from_payload_requires_url_and_method():
    with pytest.raises(InvalidWalkRequest):
        WalkRequest.from_payload({"method": "GET"})
    with pytest.raises(InvalidWalkRequest):
        WalkRequest.from_payload({"url": "http://example.com"})
    with pytest.raises(InvalidWalkRequest):
        WalkRequest.from_payload(["http://example.com"])

    request = WalkRequest.from_payload({"url": "http://example.com/a", "method": "post", "timeout": "250"})
    assert request == WalkRequest(url="http://example.com/a", method="POST", timeout_ms=250)


def test_results_are_immutable():
    success = WalkSuccess(status=200, body=b"ok", latency=0.01, duration=0.02)
    with pytest.raises(dataclasses.FrozenInstanceError):
        success.status = 500  # type: ignore[misc]


def test_split_seconds():
    seconds, millis = split_seconds(2.5)
    assert seconds == 2
    assert millis == pytest.approx(500.0)
    assert split_seconds(-1.0) == [0, 0.0]


def test_success_to_dict_has_only_success_fields():
    success = WalkSuccess(status=200, body=b'{"foo":"bar"}', latency=0.0125, duration=1.25)
    payload = success.to_dict()
    assert payload["success"] is True
    assert payload["status"] == 200
    assert payload["body"] == '{"foo":"bar"}'
    assert payload["latency"][0] == 0
    assert payload["latency"][1] == pytest.approx(12.5)
    assert payload["duration"][0] == 1
    assert set(payload) == {"success", "status", "body", "latency", "duration"}


def test_failure_to_dict_has_only_failure_fields():
    failure = WalkFailure(
        cause=Cause.ABORT,
        error_type="ConnectError",
        error_code="ECONNREFUSED",
        error_message="All connection attempts failed",
        duration=0.003,
    )
    payload = failure.to_dict()
    assert payload["success"] is False
    assert payload["cause"] == "abort"
    assert payload["error"] == {
        "type": "ConnectError",
        "code": "ECONNREFUSED",
        "message": "All connection attempts failed",
    }
    assert set(payload) == {"success", "cause", "error", "duration"}

    unclassified = dataclasses.replace(failure, cause=None, error_code=None).to_dict()
    assert unclassified["cause"] is None
    assert unclassified["error"]["code"] is None


def test_success_text_replaces_invalid_utf8():
    success = WalkSuccess(status=200, body=b"\xffok", latency=0.0, duration=0.0)
    assert success.body == b"\xffok"
    assert success.text.endswith("ok")
