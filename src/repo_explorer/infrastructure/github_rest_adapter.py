"""GitHub REST API adapter — implements the RepositoryGateway port."""

from __future__ import annotations

import logging
from urllib.parse import quote

from repo_explorer.domain.entities import OperationResult, RepositoryEntry
from repo_explorer.domain.exceptions import DecodeFailure
from repo_explorer.domain.ports.http_transport import HttpTransport
from repo_explorer.infrastructure.config import Settings, get_settings
from repo_explorer.services.content_decoder import decode_listing
from repo_explorer.services.response_classifier import (
    Classification,
    Outcome,
    execute,
    raise_if_cancelled,
)

logger = logging.getLogger(__name__)

_JSON_ACCEPT = "application/vnd.github.v3+json"
_RAW_ACCEPT = "application/vnd.github.v3.raw"


class GitHubRestAdapter:
    """Concrete ``RepositoryGateway`` backed by the GitHub v3 REST API.

    Every operation issues exactly one GET, never retries, and folds every
    failure into an :class:`OperationResult`.  Only cancellation escapes.
    """

    def __init__(self, transport: HttpTransport, settings: Settings | None = None) -> None:
        self._transport = transport
        settings = settings or get_settings()
        self._api_base = settings.github_api_url.rstrip("/")
        self._user_agent = settings.user_agent

    # ── Validation ──────────────────────────────────────────────────────

    async def validate_token(self, token: str) -> OperationResult[str]:
        """GET /user → token echoed back on success, for the caller to persist."""
        logger.info("Validating GitHub token")
        result = await self._api_get(f"{self._api_base}/user", token)

        if result.outcome is Outcome.SUCCESS:
            logger.info("GitHub token validation successful")
            return OperationResult.ok(token)

        self._log_failure("Token validation", result)
        return OperationResult.failed("", result.error)

    async def is_token_valid(self, token: str) -> bool:
        return (await self.validate_token(token)).success

    async def validate_owner(self, token: str, owner: str) -> OperationResult[str]:
        """GET /users/{owner} → owner login on success."""
        logger.info("Validating GitHub owner: %s", owner)
        result = await self._api_get(f"{self._api_base}/users/{quote(owner, safe='')}", token)

        if result.outcome is Outcome.SUCCESS:
            logger.info("GitHub owner validation successful for %s", owner)
            return OperationResult.ok(owner)

        self._log_failure(f"Owner validation for {owner}", result)
        return OperationResult.failed("", result.error)

    async def is_owner_valid(self, token: str, owner: str) -> bool:
        return (await self.validate_owner(token, owner)).success

    # ── Listing ─────────────────────────────────────────────────────────

    async def list_directory(
        self, token: str, owner: str, repo: str, path: str = ""
    ) -> OperationResult[list[RepositoryEntry]]:
        """GET /repos/{owner}/{repo}/contents/{path} → one level of entries.

        Either the complete level is returned or an empty list with
        ``success=False``; never a partial listing.
        """
        url = self.contents_url(owner, repo, path)
        logger.info("Listing directory: repo=%s/%s path=%r", owner, repo, path)
        result = await self._api_get(url, token)

        if result.outcome is not Outcome.SUCCESS:
            self._log_failure(f"Listing {owner}/{repo}:{path or '/'}", result)
            return OperationResult.failed([], result.error)

        assert result.response is not None
        try:
            entries = decode_listing(result.response.content)
        except DecodeFailure as exc:
            logger.warning("Listing %s/%s:%s could not be decoded: %s", owner, repo, path, exc)
            return OperationResult.failed([], exc)

        logger.debug("Directory listing %s/%s:%s has %d entries", owner, repo, path, len(entries))
        return OperationResult.ok(entries)

    def contents_url(self, owner: str, repo: str, path: str = "") -> str:
        base = f"{self._api_base}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/contents/"
        return f"{base}{quote(path.strip('/'))}" if path else base

    # ── File content ────────────────────────────────────────────────────

    async def fetch_file_content(self, token: str, download_url: str) -> OperationResult[str]:
        """Download a file and decode it as text.

        On a non-2xx answer the server's body is still returned, unmodified,
        alongside ``success=False``.
        """
        logger.info("Fetching file content: %s", download_url)
        result = await self._raw_get(download_url, token)

        if result.response is None:
            self._log_failure("File fetch", result)
            return OperationResult.failed("", result.error)

        if result.outcome is Outcome.SUCCESS:
            logger.info("Successfully fetched file content")
            return OperationResult.ok(result.response.text)

        self._log_failure("File fetch", result)
        return OperationResult.failed(result.response.text, result.error)

    async def fetch_file_bytes(self, token: str, download_url: str) -> OperationResult[bytes]:
        """Download a file as untouched bytes (images and other binaries)."""
        logger.info("Fetching binary file content: %s", download_url)
        result = await self._raw_get(download_url, token)

        if result.response is None:
            self._log_failure("Binary file fetch", result)
            return OperationResult.failed(b"", result.error)

        if result.outcome is Outcome.SUCCESS:
            logger.info("Successfully fetched binary file content")
            return OperationResult.ok(result.response.content)

        self._log_failure("Binary file fetch", result)
        return OperationResult.failed(result.response.content, result.error)

    # ── Internals ───────────────────────────────────────────────────────

    def _headers(self, token: str, accept: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": accept,
            "User-Agent": self._user_agent,
        }

    async def _api_get(self, url: str, token: str) -> Classification:
        result = await execute(self._transport.get(url, self._headers(token, _JSON_ACCEPT)))
        raise_if_cancelled(result)
        return result

    async def _raw_get(self, url: str, token: str) -> Classification:
        result = await execute(self._transport.get(url, self._headers(token, _RAW_ACCEPT)))
        raise_if_cancelled(result)
        return result

    @staticmethod
    def _log_failure(what: str, result: Classification) -> None:
        if result.status_code is None:
            logger.warning("%s failed: %s", what, result.error)
        else:
            logger.warning("%s failed: HTTP %d, %s", what, result.status_code, result.error)
