"""Shared fakes and fixtures."""

from __future__ import annotations

import asyncio
import json
from typing import Mapping

import httpx
import pytest

from repo_explorer.domain.exceptions import TransportFailure
from repo_explorer.domain.ports.http_transport import RawResponse
from repo_explorer.infrastructure.config import Settings
from repo_explorer.infrastructure.github_rest_adapter import GitHubRestAdapter
from repo_explorer.infrastructure.httpx_transport import HttpxTransport

API = "https://api.test"


def listing_record(name: str, type_: str = "file", download_url: str | None = None, path: str | None = None) -> dict:
    """A contents-endpoint record with the fields GitHub actually sends."""
    path = path or name
    return {
        "name": name,
        "path": path,
        "sha": "0" * 40,
        "size": 0 if type_ == "dir" else 12,
        "url": f"{API}/repos/o/r/contents/{path}",
        "html_url": f"https://github.com/o/r/blob/main/{path}",
        "git_url": f"{API}/repos/o/r/git/blobs/{path}",
        "download_url": download_url,
        "type": type_,
        "_links": {"self": f"{API}/repos/o/r/contents/{path}"},
    }


def json_response(payload: object, status: int = 200) -> RawResponse:
    return RawResponse(status_code=status, content=json.dumps(payload).encode(), encoding="utf-8")


class ScriptedTransport:
    """In-memory ``HttpTransport``: answers by URL and records every call.

    A route may map to a ``RawResponse``, an exception to raise, or an
    ``asyncio.Event`` to wait on before answering with ``default``.
    """

    def __init__(self, routes: dict[str, object] | None = None, default: RawResponse | None = None) -> None:
        self.routes: dict[str, object] = dict(routes or {})
        self.default = default or RawResponse(status_code=404, content=b'{"message": "Not Found"}')
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.gates: dict[str, asyncio.Event] = {}

    def hold(self, url: str) -> asyncio.Event:
        """Block requests for *url* until the returned event is set."""
        gate = asyncio.Event()
        self.gates[url] = gate
        return gate

    async def get(self, url: str, headers: Mapping[str, str]) -> RawResponse:
        self.calls.append((url, dict(headers)))
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        answer = self.routes.get(url, self.default)
        if isinstance(answer, BaseException):
            raise answer
        assert isinstance(answer, RawResponse)
        return answer

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


@pytest.fixture()
def settings() -> Settings:
    return Settings(github_api_url=API, user_agent="explorer-tests", _env_file=None)


@pytest.fixture()
def scripted() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture()
def adapter(scripted: ScriptedTransport, settings: Settings) -> GitHubRestAdapter:
    return GitHubRestAdapter(scripted, settings)


def mock_adapter(handler, settings: Settings) -> tuple[GitHubRestAdapter, httpx.AsyncClient]:
    """Adapter wired through the real httpx transport over ``httpx.MockTransport``."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GitHubRestAdapter(HttpxTransport(client), settings), client


def transport_failure(url: str = f"{API}/user") -> TransportFailure:
    return TransportFailure(f"Network error fetching {url}: connection refused")
