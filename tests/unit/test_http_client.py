"""Unit tests for HttpDirectoryClient against an httpx.MockTransport daemon."""

from __future__ import annotations

import json

import httpx
import pytest

from proxyswitch.core.exceptions import DirectoryError, DirectoryErrorKind
from proxyswitch.directory.client import (
    DEFAULT_PROBE_TIMEOUT_MS,
    DEFAULT_PROBE_URL,
    HttpDirectoryClient,
)

PROXIES = {
    "proxies": {
        "GLOBAL": {"name": "GLOBAL", "type": "Selector", "now": "DIRECT", "all": ["DIRECT", "HK"]},
        "HK": {"name": "HK", "type": "Trojan"},
        "DIRECT": {"name": "DIRECT", "type": "Direct"},
    }
}


def _client(handler, secret: str = "") -> HttpDirectoryClient:
    return HttpDirectoryClient(
        "http://daemon:9090/", secret, transport=httpx.MockTransport(handler)
    )


class TestFetchSnapshot:
    def test_decodes_snapshot(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/proxies"
            return httpx.Response(200, json=PROXIES)

        snap = _client(handler).fetch_snapshot()
        assert snap.groups == ("GLOBAL",)
        assert snap.group("GLOBAL").now == "DIRECT"

    def test_bearer_header_when_secret_set(self) -> None:
        seen: list[str | None] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(200, json=PROXIES)

        _client(handler, secret="s3cr3t").fetch_snapshot()
        _client(handler).fetch_snapshot()
        assert seen == ["Bearer s3cr3t", None]

    def test_bad_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="Unauthorized")

        with pytest.raises(DirectoryError) as info:
            _client(handler).fetch_snapshot()
        err = info.value
        assert err.kind is DirectoryErrorKind.BAD_STATUS
        assert err.status_code == 401
        assert err.body == "Unauthorized"
        assert str(err) == "unexpected status code 401: Unauthorized"

    def test_malformed_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>not json</html>")

        with pytest.raises(DirectoryError) as info:
            _client(handler).fetch_snapshot()
        assert info.value.kind is DirectoryErrorKind.MALFORMED

    def test_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DirectoryError) as info:
            _client(handler).fetch_snapshot()
        assert info.value.kind is DirectoryErrorKind.UNREACHABLE
        assert "connection refused" in str(info.value)


class TestSetActiveMember:
    @pytest.mark.parametrize("status", [200, 204])
    def test_success_statuses(self, status: int) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(status)

        _client(handler).set_active_member("GLOBAL", "HK")
        request = requests[0]
        assert request.method == "PUT"
        assert request.url.path == "/proxies/GLOBAL"
        assert json.loads(request.content) == {"name": "HK"}

    def test_group_name_is_escaped(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.raw_path.decode())
            return httpx.Response(204)

        _client(handler).set_active_member("Proxy Group/A", "x")
        assert paths == ["/proxies/Proxy%20Group%2FA"]

    def test_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Selector update error: proxy not exist"})

        with pytest.raises(DirectoryError) as info:
            _client(handler).set_active_member("GLOBAL", "nope")
        assert info.value.kind is DirectoryErrorKind.BAD_STATUS
        assert info.value.status_code == 400


class TestMeasureDelay:
    def test_defaults_and_result(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"delay": 142})

        assert _client(handler).measure_delay("GLOBAL", "HK") == 142
        request = requests[0]
        assert request.url.path == "/proxies/GLOBAL/delay"
        assert json.loads(request.content) == {
            "url": DEFAULT_PROBE_URL,
            "timeout": DEFAULT_PROBE_TIMEOUT_MS,
        }
        assert request.url.params["timeout"] == str(DEFAULT_PROBE_TIMEOUT_MS)

    def test_custom_probe(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"delay": 7})

        _client(handler).measure_delay("GLOBAL", "HK", "https://example.test/204", 1500)
        assert bodies == [{"url": "https://example.test/204", "timeout": 1500}]

    def test_missing_delay_field(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"message": "?"})

        with pytest.raises(DirectoryError) as info:
            _client(handler).measure_delay("GLOBAL", "HK")
        assert info.value.kind is DirectoryErrorKind.MALFORMED

    def test_timeout_is_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(DirectoryError) as info:
            _client(handler).measure_delay("GLOBAL", "HK")
        assert info.value.kind is DirectoryErrorKind.UNREACHABLE


class TestClose:
    def test_closed_client_is_unreachable(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=PROXIES)

        client = _client(handler)
        client.close()
        with pytest.raises(DirectoryError) as info:
            client.fetch_snapshot()
        assert info.value.kind is DirectoryErrorKind.UNREACHABLE
        assert calls == []
