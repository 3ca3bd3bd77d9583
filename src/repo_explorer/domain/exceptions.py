"""Domain exception hierarchy.

Adapters raise these; the repository operations absorb them into an
``OperationResult`` and the message catalog turns them into display text.
"""

from __future__ import annotations


class RepoExplorerError(Exception):
    """Base exception for the entire package."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidRepositoryRefError(RepoExplorerError):
    """The supplied owner / repository name is not a valid GitHub reference."""


# ── Transport ───────────────────────────────────────────────────────────────


class TransportFailure(RepoExplorerError):
    """The request never produced an HTTP response (network, timeout, bad URL)."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class NotFoundError(RepoExplorerError):
    """The requested owner, repository, path or file does not exist (404)."""


class ApiError(RepoExplorerError):
    """Any other non-2xx response; keeps the status and server message verbatim."""

    def __init__(self, status_code: int, server_message: str) -> None:
        super().__init__(f"HTTP {status_code}: {server_message}")
        self.status_code = status_code
        self.server_message = server_message


# ── Payload errors ──────────────────────────────────────────────────────────


class DecodeFailure(RepoExplorerError):
    """A 2xx payload did not match the expected directory-listing shape."""


class MissingDownloadUrlError(RepoExplorerError):
    """A file entry carries no ``download_url``; its content cannot be fetched."""
