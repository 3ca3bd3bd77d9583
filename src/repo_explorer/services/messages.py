"""User-facing messages: translate failures into display text.

Each failure kind maps to one message template; the resource being
accessed picks the not-found wording.  No path ever shows a traceback.
"""

from __future__ import annotations

from enum import Enum

from repo_explorer.domain.exceptions import (
    ApiError,
    DecodeFailure,
    InvalidRepositoryRefError,
    MissingDownloadUrlError,
    NotFoundError,
    RepoExplorerError,
    TransportFailure,
)


class Resource(str, Enum):
    """What the failed call was trying to reach."""

    TOKEN = "token"
    OWNER = "owner"
    REPOSITORY = "repository"
    FILE = "file"


MESSAGES: dict[str, str] = {
    "token.invalid": "Invalid GitHub token. Please check the token and try again.",
    "owner.notFound": "GitHub owner '{owner}' does not exist.",
    "repository.notFound": "Repository '{repository}' or path '{path}' does not exist.",
    "file.notFound": "File '{file}' was not found.",
    "file.noContent": "File '{file}' has no retrievable content.",
    "input.invalid": "{detail}",
    "decode.failed": "GitHub returned an unexpected response: {detail}",
    "network.failed": "Could not reach GitHub: {detail}",
    "api.error": "GitHub API error: {status} - {detail}",
    "generic.failed": "Failed to load the {resource} from GitHub.",
}

_NOT_FOUND_KEYS: dict[Resource, str] = {
    Resource.TOKEN: "token.invalid",
    Resource.OWNER: "owner.notFound",
    Resource.REPOSITORY: "repository.notFound",
    Resource.FILE: "file.notFound",
}


def message(key: str, **params: object) -> str:
    """Render catalog entry *key* with *params*."""
    return MESSAGES[key].format(**params)


def describe_failure(
    error: RepoExplorerError | None,
    resource: Resource,
    *,
    detailed: bool = True,
    **context: object,
) -> str:
    """Pick the message for a failed operation.

    With ``detailed=False`` an API, network or decode failure is reported
    as a generic per-resource message, without the status and server text.
    *context* supplies template fields such as ``owner`` or ``path``.
    """
    params = {"owner": "", "repository": "", "path": "/", "file": "", **context}

    if resource is Resource.TOKEN:
        if isinstance(error, (ApiError, NotFoundError)) or not detailed:
            return message("token.invalid")

    if isinstance(error, MissingDownloadUrlError):
        return message("file.noContent", **params)
    if isinstance(error, InvalidRepositoryRefError):
        return message("input.invalid", detail=str(error))
    if isinstance(error, NotFoundError):
        return message(_NOT_FOUND_KEYS[resource], **params)
    if not detailed:
        return message("generic.failed", resource=resource.value)
    if isinstance(error, ApiError):
        return message("api.error", status=error.status_code, detail=error.server_message)
    if isinstance(error, DecodeFailure):
        return message("decode.failed", detail=str(error))
    if isinstance(error, TransportFailure):
        return message("network.failed", detail=str(error))
    return message("api.error", status="unknown", detail=str(error) if error else "no details")
