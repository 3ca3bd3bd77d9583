"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from repo_explorer.domain.exceptions import InvalidRepositoryRefError

_OWNER_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")
_REPO_RE = re.compile(r"^[A-Za-z0-9\-_.]{1,100}$")
_GITHUB_URL_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[A-Za-z0-9\-]+)/(?P<repo>[A-Za-z0-9\-_.]+?)(?:\.git)?/?$"
)

_BINARY_SUFFIXES = (".png", ".jpg", ".jpeg")


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """Validated ``owner/name`` pair.

    Whitespace around either part is stripped.  Rejects anything GitHub
    itself would not accept as a login or repository name.
    """

    owner: str
    name: str

    @classmethod
    def from_parts(cls, owner: str, name: str) -> RepositoryRef:
        """Trim and validate the two fields typed by the user."""
        owner = owner.strip()
        name = name.strip()
        if not _OWNER_RE.match(owner):
            raise InvalidRepositoryRefError(f"Invalid GitHub owner: '{owner}'.")
        if not _REPO_RE.match(name) or name in (".", ".."):
            raise InvalidRepositoryRefError(f"Invalid repository name: '{name}'.")
        return cls(owner=owner, name=name)

    @classmethod
    def from_url(cls, url: str) -> RepositoryRef:
        """Parse ``https://github.com/<owner>/<repo>``."""
        url = url.strip()
        match = _GITHUB_URL_RE.match(url)
        if not match:
            raise InvalidRepositoryRefError(
                f"Invalid GitHub URL: '{url}'. "
                "Expected format: https://github.com/<owner>/<repo>"
            )
        return cls.from_parts(match["owner"], match["repo"])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class FileKind(str, Enum):
    """How a selected file's body must be materialized."""

    TEXT = "text"
    BINARY = "binary"

    @classmethod
    def for_name(cls, file_name: str) -> FileKind:
        """Images are fetched as raw bytes; everything else as text."""
        if file_name.lower().endswith(_BINARY_SUFFIXES):
            return cls.BINARY
        return cls.TEXT
