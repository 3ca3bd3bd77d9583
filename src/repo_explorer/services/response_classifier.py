"""Response classifier — one place that turns a response into an outcome.

Every repository operation needs the same split: success, not found, any
other failure, or caller cancellation.  :func:`execute` runs the request
and returns a :class:`Classification`; the operations branch on its
:class:`Outcome` instead of inspecting status codes themselves.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable

from repo_explorer.domain.exceptions import (
    ApiError,
    NotFoundError,
    RepoExplorerError,
    TransportFailure,
)
from repo_explorer.domain.ports.http_transport import RawResponse


class Outcome(str, Enum):
    """Closed set of classification results."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    OTHER_ERROR = "other_error"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class Classification:
    """Tagged result of one request.

    ``response`` is present whenever the server answered, including on
    error statuses, so callers can hand the body back untouched.
    """

    outcome: Outcome
    response: RawResponse | None = None
    error: RepoExplorerError | None = None

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


def server_message(response: RawResponse) -> str:
    """Extract GitHub's ``message`` field, falling back to the raw body."""
    body = response.text.strip()
    try:
        payload = json.loads(body)
    except ValueError:
        return body
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return body


def classify(response: RawResponse) -> Classification:
    """Map a status code onto the success / not-found / other-error split."""
    if response.is_success:
        return Classification(Outcome.SUCCESS, response)

    message = server_message(response)
    if response.status_code == 404:
        return Classification(Outcome.NOT_FOUND, response, NotFoundError(message))
    return Classification(
        Outcome.OTHER_ERROR, response, ApiError(response.status_code, message)
    )


async def execute(request: Awaitable[RawResponse]) -> Classification:
    """Await *request* and classify whatever it produced.

    A transport failure becomes ``OTHER_ERROR`` with no response.
    Cancellation is reported as ``CANCELLED``; the caller must re-raise
    (see :func:`raise_if_cancelled`) rather than treat it as a failure.
    """
    try:
        response = await request
    except asyncio.CancelledError:
        return Classification(Outcome.CANCELLED)
    except TransportFailure as exc:
        return Classification(Outcome.OTHER_ERROR, error=exc)
    return classify(response)


def raise_if_cancelled(classification: Classification) -> None:
    """Turn a ``CANCELLED`` classification back into ``CancelledError``."""
    if classification.outcome is Outcome.CANCELLED:
        raise asyncio.CancelledError
