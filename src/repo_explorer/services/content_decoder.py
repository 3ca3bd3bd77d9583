"""GitHub content decoder — directory-listing JSON to RepositoryEntry rows."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from repo_explorer.domain.entities import EntryType, RepositoryEntry
from repo_explorer.domain.exceptions import DecodeFailure


class GitHubContent(BaseModel):
    """One record of ``GET /repos/{owner}/{repo}/contents/{path}``.

    Only the fields the tree needs are declared; GitHub adds fields over
    time and those are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    path: str
    type: str
    download_url: str | None = None

    def to_entry(self) -> RepositoryEntry:
        # symlink and submodule rows cannot be listed, so they stay leaves
        entry_type = EntryType.DIRECTORY if self.type == "dir" else EntryType.FILE
        return RepositoryEntry(
            name=self.name,
            path=self.path,
            entry_type=entry_type,
            download_url=self.download_url,
        )


_LISTING = TypeAdapter(list[GitHubContent])


def decode_listing(body: str | bytes) -> list[RepositoryEntry]:
    """Parse a directory-listing payload.

    Raises :class:`DecodeFailure` on malformed JSON, on a non-list payload
    (e.g. the path named a file), or on a record missing a required field.
    """
    try:
        records = _LISTING.validate_json(body)
    except ValidationError as exc:
        raise DecodeFailure(
            f"Unexpected directory listing payload ({exc.error_count()} error(s)): {exc}"
        ) from exc
    return [record.to_entry() for record in records]
