"""Tests for the Modrinth registry client."""

import asyncio

import aiohttp
import pytest

from conftest import API, FakeResponse, FakeSession
from modpack_installer.exceptions import DecodeError, TransportError
from modpack_installer.models import DEFAULT_USER_AGENT, SupportLevel
from modpack_installer.services import RegistryClient


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def make_client(session, sleep=None):
    return RegistryClient(session=session, sleep=sleep or SleepRecorder())


class TestFetch:
    """Test request/response handling."""

    def test_sends_user_agent_on_every_request(self):
        session = FakeSession({f"{API}/project/a": FakeResponse(body={"ok": 1})})
        client = make_client(session)

        asyncio.run(client.fetch("/project/a"))
        asyncio.run(client.fetch("/project/a"))

        assert len(session.requests) == 2
        for _, headers in session.requests:
            assert headers == {"User-Agent": DEFAULT_USER_AGENT}

    def test_returns_decoded_body(self):
        session = FakeSession({f"{API}/project/a": FakeResponse(body={"id": "a"})})

        assert asyncio.run(make_client(session).fetch("/project/a")) == {"id": "a"}

    def test_non_2xx_raises_transport_error(self):
        session = FakeSession({f"{API}/project/a": FakeResponse(500)})

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(make_client(session).fetch("/project/a"))

        assert exc_info.value.context["status_code"] == 500

    def test_not_found_raises_transport_error(self):
        with pytest.raises(TransportError):
            asyncio.run(make_client(FakeSession()).fetch("/project/missing"))

    def test_malformed_json_raises_decode_error(self):
        session = FakeSession({f"{API}/project/a": FakeResponse(raw=b"<html>")})

        with pytest.raises(DecodeError):
            asyncio.run(make_client(session).fetch("/project/a"))

    def test_connection_failure_raises_transport_error(self):
        session = FakeSession(
            {f"{API}/project/a": aiohttp.ClientConnectionError("refused")}
        )

        with pytest.raises(TransportError):
            asyncio.run(make_client(session).fetch("/project/a"))


class TestRateLimit:
    """Test 429 handling."""

    def test_waits_reset_plus_one_then_retries(self):
        url = f"{API}/project/a"
        session = FakeSession(
            {
                url: [
                    FakeResponse(429, headers={"X-Ratelimit-Reset": "3"}),
                    FakeResponse(body={"id": "a"}),
                ]
            }
        )
        sleep = SleepRecorder()

        body = asyncio.run(make_client(session, sleep).fetch("/project/a"))

        assert body == {"id": "a"}
        assert sleep.delays == [4]
        assert session.urls == [url, url]

    def test_retries_until_quota_resets(self):
        url = f"{API}/project/a"
        limited = [FakeResponse(429, headers={"X-Ratelimit-Reset": "0"}) for _ in range(5)]
        session = FakeSession({url: limited + [FakeResponse(body=[1, 2])]})
        sleep = SleepRecorder()

        body = asyncio.run(make_client(session, sleep).fetch("/project/a"))

        assert body == [1, 2]
        assert sleep.delays == [1] * 5

    def test_missing_reset_header_uses_fallback_window(self):
        url = f"{API}/project/a"
        session = FakeSession({url: [FakeResponse(429), FakeResponse(body={})]})
        sleep = SleepRecorder()
        client = RegistryClient(session=session, sleep=sleep, rate_limit_fallback=60)

        asyncio.run(client.fetch("/project/a"))

        assert sleep.delays == [61]


class TestTypedLookups:
    def test_get_package_and_release(self):
        session = FakeSession(
            {
                f"{API}/project/sodium": FakeResponse(
                    body={
                        "id": "AANobbMI",
                        "title": "Sodium",
                        "client_side": "required",
                        "server_side": "unsupported",
                        "versions": ["r1"],
                    }
                ),
                f"{API}/project/AANobbMI/version/r1": FakeResponse(
                    body={
                        "project_id": "AANobbMI",
                        "files": [{"url": "https://cdn/s.jar", "filename": "s.jar"}],
                        "dependencies": [],
                        "game_versions": ["1.20.1"],
                        "loaders": ["fabric"],
                    }
                ),
            }
        )
        client = make_client(session)

        package = asyncio.run(client.get_package("sodium"))
        release = asyncio.run(client.get_release(package.id, "r1"))

        assert package.server_support == SupportLevel.UNSUPPORTED
        assert release.files[0].filename == "s.jar"

    def test_get_package_with_wrong_shape_raises_decode_error(self):
        session = FakeSession({f"{API}/project/x": FakeResponse(body={"id": "x"})})

        with pytest.raises(DecodeError):
            asyncio.run(make_client(session).get_package("x"))

    def test_injected_session_is_not_closed(self):
        session = FakeSession()

        async def _run():
            async with make_client(session):
                pass

        asyncio.run(_run())

        assert session.closed is False
