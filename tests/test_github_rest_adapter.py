"""Tests for the four repository operations."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from conftest import API, ScriptedTransport, json_response, listing_record, mock_adapter, transport_failure
from repo_explorer.domain.entities import EntryType, OperationResult, RepositoryEntry
from repo_explorer.domain.exceptions import ApiError, DecodeFailure, NotFoundError, TransportFailure
from repo_explorer.domain.ports.http_transport import RawResponse
from repo_explorer.infrastructure.github_rest_adapter import GitHubRestAdapter


def _respond(status: int, body: bytes | str = b"{}", content_type: str = "application/json"):
    if isinstance(body, str):
        body = body.encode()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=body, headers={"Content-Type": content_type})

    return handler


# ── validate_token ──────────────────────────────────────────────────────────


@pytest.mark.asyncio()
async def test_token_valid_on_200(settings) -> None:
    adapter, client = mock_adapter(_respond(200), settings)
    async with client:
        assert await adapter.is_token_valid("t") is True


@pytest.mark.asyncio()
async def test_token_invalid_on_401(settings) -> None:
    adapter, client = mock_adapter(_respond(401, '{"message": "Bad credentials"}'), settings)
    async with client:
        assert await adapter.is_token_valid("t") is False
        result = await adapter.validate_token("t")

    assert result == OperationResult(False, "")
    assert isinstance(result.error, ApiError)
    assert result.error.status_code == 401
    assert result.error.server_message == "Bad credentials"


@pytest.mark.asyncio()
async def test_token_invalid_on_404(settings) -> None:
    adapter, client = mock_adapter(_respond(404, '{"message": "Not Found"}'), settings)
    async with client:
        assert await adapter.is_token_valid("t") is False
        result = await adapter.validate_token("t")

    assert result == OperationResult(False, "")
    assert isinstance(result.error, NotFoundError)


@pytest.mark.asyncio()
async def test_token_with_non_ascii_character_is_invalid(settings) -> None:
    adapter, client = mock_adapter(_respond(200), settings)
    async with client:
        assert await adapter.is_token_valid("ghp_t\u00f6k") is False
        result = await adapter.validate_token("ghp_t\u00f6k")

    assert result == OperationResult(False, "")
    assert isinstance(result.error, TransportFailure)


@pytest.mark.asyncio()
async def test_validate_token_returns_token_for_persistence(adapter, scripted) -> None:
    scripted.routes[f"{API}/user"] = json_response({"login": "octocat"})

    result = await adapter.validate_token("ghp_secret")

    assert result == OperationResult(True, "ghp_secret")
    url, headers = scripted.calls[0]
    assert url == f"{API}/user"
    assert headers["Authorization"] == "Bearer ghp_secret"
    assert headers["Accept"] == "application/vnd.github.v3+json"
    assert headers["User-Agent"] == "explorer-tests"


@pytest.mark.asyncio()
async def test_token_invalid_on_transport_failure(adapter, scripted) -> None:
    scripted.routes[f"{API}/user"] = transport_failure()

    result = await adapter.validate_token("t")

    assert result.success is False
    assert isinstance(result.error, TransportFailure)


# ── validate_owner ──────────────────────────────────────────────────────────


@pytest.mark.asyncio()
async def test_owner_valid_on_200(settings) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"login": "octocat"})

    adapter, client = mock_adapter(handler, settings)
    async with client:
        assert await adapter.is_owner_valid("t", "octocat") is True
    assert seen == [f"{API}/users/octocat"]


@pytest.mark.asyncio()
async def test_owner_invalid_on_404(settings) -> None:
    adapter, client = mock_adapter(_respond(404, '{"message": "Not Found"}'), settings)
    async with client:
        result = await adapter.validate_owner("t", "nobody")

    assert result == OperationResult(False, "")
    assert isinstance(result.error, NotFoundError)


# ── list_directory ──────────────────────────────────────────────────────────


@pytest.mark.asyncio()
async def test_list_directory_parses_root_listing(settings) -> None:
    body = json.dumps([
        listing_record("README.md", "file", "d1"),
        listing_record("src", "dir", None),
    ])
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=body.encode(), headers={"Content-Type": "application/json"})

    adapter, client = mock_adapter(handler, settings)
    async with client:
        result = await adapter.list_directory("t", "octocat", "Hello-World", "")

    assert result == OperationResult(
        success=True,
        data=[
            RepositoryEntry("README.md", "README.md", EntryType.FILE, "d1"),
            RepositoryEntry("src", "src", EntryType.DIRECTORY, None),
        ],
    )
    assert str(seen[0].url) == f"{API}/repos/octocat/Hello-World/contents/"
    assert seen[0].headers["Authorization"] == "Bearer t"


@pytest.mark.asyncio()
async def test_list_directory_builds_nested_path_url(adapter, scripted) -> None:
    url = f"{API}/repos/o/r/contents/src/main"
    scripted.routes[url] = json_response([listing_record("app.py", path="src/main/app.py", download_url="d")])

    result = await adapter.list_directory("t", "o", "r", "src/main")

    assert result.success is True
    assert [e.path for e in result.data] == ["src/main/app.py"]
    assert scripted.urls() == [url]


@pytest.mark.asyncio()
async def test_list_directory_not_found_is_empty_failure(settings) -> None:
    adapter, client = mock_adapter(_respond(404, '{"message": "Not Found"}'), settings)
    async with client:
        result = await adapter.list_directory("t", "o", "missing", "")

    assert result == OperationResult(False, [])
    assert isinstance(result.error, NotFoundError)


@pytest.mark.asyncio()
@pytest.mark.parametrize("status", [400, 401, 403, 422, 500, 503])
async def test_list_directory_other_errors_are_empty_failure(adapter, scripted, status) -> None:
    scripted.default = RawResponse(status, b'{"message": "nope"}')

    result = await adapter.list_directory("t", "o", "r", "")

    assert result == OperationResult(False, [])
    assert isinstance(result.error, ApiError)
    assert result.error.status_code == status


@pytest.mark.asyncio()
async def test_list_directory_undecodable_body_is_decode_failure(adapter, scripted) -> None:
    scripted.default = RawResponse(200, b"<html>not json</html>")

    result = await adapter.list_directory("t", "o", "r", "")

    assert result == OperationResult(False, [])
    assert isinstance(result.error, DecodeFailure)


@pytest.mark.asyncio()
async def test_list_directory_on_file_path_is_decode_failure(adapter, scripted) -> None:
    # the contents endpoint answers a file path with a single object, not a list
    scripted.default = json_response(listing_record("README.md", download_url="d1"))

    result = await adapter.list_directory("t", "o", "r", "README.md")

    assert result.success is False
    assert isinstance(result.error, DecodeFailure)


@pytest.mark.asyncio()
async def test_list_directory_transport_failure(adapter, scripted) -> None:
    scripted.default = transport_failure()  # type: ignore[assignment]

    result = await adapter.list_directory("t", "o", "r", "")

    assert result == OperationResult(False, [])
    assert isinstance(result.error, TransportFailure)


# ── fetch_file_content / fetch_file_bytes ───────────────────────────────────


@pytest.mark.asyncio()
async def test_fetch_file_content_returns_body_on_success(settings) -> None:
    adapter, client = mock_adapter(_respond(200, "hello world", "text/plain"), settings)
    async with client:
        result = await adapter.fetch_file_content("t", "http://example/readme")
    assert result == OperationResult(True, "hello world")


@pytest.mark.asyncio()
async def test_fetch_file_content_returns_body_as_is_on_non_2xx(settings) -> None:
    adapter, client = mock_adapter(_respond(400, "error page", "text/plain"), settings)
    async with client:
        result = await adapter.fetch_file_content("t", "http://example/readme")
    assert result == OperationResult(False, "error page")
    assert isinstance(result.error, ApiError)


@pytest.mark.asyncio()
async def test_fetch_file_content_uses_raw_accept_header(adapter, scripted) -> None:
    scripted.routes["http://example/readme"] = RawResponse(200, "naïve ✓".encode("utf-8"), "utf-8")

    result = await adapter.fetch_file_content("t", "http://example/readme")

    assert result.data == "naïve ✓"
    _, headers = scripted.calls[0]
    assert headers["Accept"] == "application/vnd.github.v3.raw"


@pytest.mark.asyncio()
async def test_fetch_file_bytes_returns_untouched_bytes(settings) -> None:
    payload = b"\x89PNG\r\n\x1a\n\x00\xff\xfe\x01"
    adapter, client = mock_adapter(_respond(200, payload, "application/octet-stream"), settings)
    async with client:
        result = await adapter.fetch_file_bytes("t", "http://example/diagram.png")
    assert result == OperationResult(True, payload)


@pytest.mark.asyncio()
async def test_fetch_file_bytes_returns_body_as_is_on_non_2xx(settings) -> None:
    adapter, client = mock_adapter(_respond(404, bytes([9, 8, 7]), "application/octet-stream"), settings)
    async with client:
        result = await adapter.fetch_file_bytes("t", "http://example/gone.png")
    assert result == OperationResult(False, bytes([9, 8, 7]))
    assert isinstance(result.error, NotFoundError)


@pytest.mark.asyncio()
async def test_fetch_on_transport_failure_returns_empty(adapter, scripted) -> None:
    scripted.default = transport_failure("http://example/x")  # type: ignore[assignment]

    text = await adapter.fetch_file_content("t", "http://example/x")
    raw = await adapter.fetch_file_bytes("t", "http://example/x")

    assert text == OperationResult(False, "")
    assert raw == OperationResult(False, b"")


@pytest.mark.asyncio()
async def test_operations_never_retry(adapter, scripted) -> None:
    scripted.default = RawResponse(503, b"unavailable")

    await adapter.list_directory("t", "o", "r", "")
    await adapter.fetch_file_content("t", "http://example/x")

    assert len(scripted.calls) == 2


# ── Cancellation ────────────────────────────────────────────────────────────


@pytest.mark.asyncio()
async def test_cancellation_propagates_out_of_listing(settings) -> None:
    scripted = ScriptedTransport(default=json_response([]))
    gate = scripted.hold(f"{API}/repos/o/r/contents/")
    adapter = GitHubRestAdapter(scripted, settings)

    task = asyncio.create_task(adapter.list_directory("t", "o", "r", ""))
    await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert not gate.is_set()


# ── Unknown charsets ────────────────────────────────────────────────────────


@pytest.mark.asyncio()
async def test_unknown_charset_falls_back_on_success(settings) -> None:
    adapter, client = mock_adapter(_respond(200, "hello world", "text/plain; charset=x-bogus"), settings)
    async with client:
        result = await adapter.fetch_file_content("t", "http://example/readme")
    assert result == OperationResult(True, "hello world")


@pytest.mark.asyncio()
async def test_unknown_charset_on_error_status_still_classified(settings) -> None:
    adapter, client = mock_adapter(
        _respond(404, '{"message": "Not Found"}', "application/json; charset=x-bogus"), settings
    )
    async with client:
        listing = await adapter.list_directory("t", "o", "r", "")
        owner = await adapter.validate_owner("t", "o")
        token = await adapter.validate_token("t")

    assert listing == OperationResult(False, [])
    assert isinstance(listing.error, NotFoundError)
    assert owner.success is False
    assert token.success is False


@pytest.mark.asyncio()
async def test_adapter_defaults_to_cached_settings(scripted, settings, monkeypatch) -> None:
    monkeypatch.setattr(
        "repo_explorer.infrastructure.github_rest_adapter.get_settings", lambda: settings
    )
    scripted.routes[f"{API}/user"] = json_response({"login": "octocat"})

    assert await GitHubRestAdapter(scripted).is_token_valid("t") is True
    assert scripted.urls() == [f"{API}/user"]
