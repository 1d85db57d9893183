"""Shared fakes for the aiohttp session, the registry client and the writer."""

import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from modpack_installer.exceptions import DownloadNetworkError, TransportError
from modpack_installer.models import (
    DependencyInfo,
    DependencyKind,
    DownloadTarget,
    FileInfo,
    Outcome,
    PackageInfo,
    ReleaseInfo,
    SupportLevel,
)

API = "https://api.modrinth.com/v2"


class FakeContent:
    def __init__(self, data: bytes, fail_after: Optional[Exception] = None):
        self._data = data
        self._fail_after = fail_after

    async def iter_chunked(self, size: int):
        for i in range(0, len(self._data), size):
            yield self._data[i : i + size]
        if self._fail_after is not None:
            raise self._fail_after


class FakeResponse:
    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        raw: Optional[bytes] = None,
        url: str = "",
        fail_after: Optional[Exception] = None,
    ):
        self.status = status
        self.headers = headers or {}
        self.url = url
        if raw is None:
            raw = b"" if body is None else json.dumps(body).encode()
        self._raw = raw
        self.content = FakeContent(raw, fail_after)

    async def json(self, content_type=None):
        return json.loads(self._raw.decode())

    async def text(self):
        return self._raw.decode()


class _RequestContext:
    def __init__(self, response):
        self._response = response

    async def __aenter__(self):
        if isinstance(self._response, BaseException):
            raise self._response
        return self._response

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Replays queued responses per URL; the last queued response repeats."""

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, List[Any]] = {}
        self.requests: List[Tuple[str, Optional[dict]]] = []
        self.closed = False
        for url, responses in (routes or {}).items():
            self.add(url, responses)

    def add(self, url: str, responses: Any) -> None:
        if not isinstance(responses, list):
            responses = [responses]
        self.routes[url] = list(responses)

    def get(self, url: str, headers: Optional[dict] = None, **kwargs):
        self.requests.append((url, headers))
        queue = self.routes.get(url)
        if not queue:
            return _RequestContext(FakeResponse(404, url=url))
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, FakeResponse):
            response.url = url
        return _RequestContext(response)

    @property
    def urls(self) -> List[str]:
        return [url for url, _ in self.requests]

    async def close(self):
        self.closed = True


def make_package(
    package_id: str,
    releases: List[str],
    client: SupportLevel = SupportLevel.REQUIRED,
    server: SupportLevel = SupportLevel.REQUIRED,
) -> PackageInfo:
    return PackageInfo(
        id=package_id,
        display_name=package_id.title(),
        client_support=client,
        server_support=server,
        known_release_ids=releases,
    )


def make_release(
    package_id: str,
    filename: Optional[str] = None,
    game_versions=("1.20.1",),
    loaders=("fabric",),
    deps: Tuple[Tuple[str, DependencyKind], ...] = (),
) -> ReleaseInfo:
    filename = filename or f"{package_id}.jar"
    return ReleaseInfo(
        owning_package_id=package_id,
        files=[FileInfo(f"https://cdn.example/{filename}", filename)],
        dependencies=[DependencyInfo(dep_id, kind) for dep_id, kind in deps],
        supported_platform_versions=set(game_versions),
        supported_loaders=set(loaders),
    )


class FakeRegistry:
    """In-memory stand-in for RegistryClient recording every lookup."""

    def __init__(self):
        self.packages: Dict[str, PackageInfo] = {}
        self.releases: Dict[Tuple[str, str], Any] = {}
        self.package_calls: List[str] = []
        self.release_calls: List[Tuple[str, str]] = []

    def add(self, package: PackageInfo, releases: Optional[Dict[str, Any]] = None):
        self.packages[package.id] = package
        for release_id, release in (releases or {}).items():
            self.releases[(package.id, release_id)] = release

    def add_simple(self, package_id: str, deps=(), **kwargs) -> PackageInfo:
        package = make_package(package_id, ["v1"], **kwargs)
        self.add(package, {"v1": make_release(package_id, deps=deps)})
        return package

    async def get_package(self, ref: str) -> PackageInfo:
        self.package_calls.append(ref)
        if ref not in self.packages:
            raise TransportError(f"unknown package {ref}")
        return self.packages[ref]

    async def get_release(self, package_id: str, release_id: str) -> ReleaseInfo:
        self.release_calls.append((package_id, release_id))
        release = self.releases.get((package_id, release_id))
        if release is None:
            raise TransportError(f"unknown release {release_id}")
        if isinstance(release, Exception):
            raise release
        return release


class FakeWriter:
    """Records writes in order instead of touching the network or disk."""

    def __init__(self, failing: Tuple[str, ...] = ()):
        self.written: List[str] = []
        self.failing = set(failing)

    async def write(self, target, release, package=None) -> Outcome:
        package_id = package.id if package else release.owning_package_id
        if package_id in self.failing:
            raise DownloadNetworkError(f"boom {package_id}")
        if release.is_empty:
            return Outcome.SKIPPED
        self.written.append(package_id)
        return Outcome.DOWNLOADED


@pytest.fixture
def target(tmp_path):
    return DownloadTarget(destination_directory=str(tmp_path), platform_version="1.20.1")


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def writer():
    return FakeWriter()
