"""Port: repository gateway — the operations the browsing layer consumes."""

from __future__ import annotations

from typing import Protocol

from repo_explorer.domain.entities import OperationResult, RepositoryEntry


class RepositoryGateway(Protocol):
    """Abstract contract for read-only GitHub repository access."""

    async def validate_token(self, token: str) -> OperationResult[str]:
        """Check *token* against the identity endpoint."""
        ...

    async def validate_owner(self, token: str, owner: str) -> OperationResult[str]:
        """Check that *owner* is an existing user or organization."""
        ...

    async def list_directory(
        self, token: str, owner: str, repo: str, path: str = ""
    ) -> OperationResult[list[RepositoryEntry]]:
        """Return one level of the repository tree; ``""`` is the root."""
        ...

    async def fetch_file_content(self, token: str, download_url: str) -> OperationResult[str]:
        """Return a file body decoded as text."""
        ...

    async def fetch_file_bytes(self, token: str, download_url: str) -> OperationResult[bytes]:
        """Return a file body as untouched bytes."""
        ...
