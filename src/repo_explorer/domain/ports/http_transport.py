"""Port: HTTP transport — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol


@dataclass(frozen=True, slots=True)
class RawResponse:
    """Status code plus the undecoded body of one HTTP response."""

    status_code: int
    content: bytes = b""
    encoding: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        """Body decoded as text; only computed when asked for.

        An unknown encoding name falls back to UTF-8.
        """
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code <= 299


class HttpTransport(Protocol):
    """Issues one authenticated GET.

    Implementations raise :class:`~repo_explorer.domain.exceptions.TransportFailure`
    when no response was obtained.  They do not log, retry, or interpret
    status codes.
    """

    async def get(self, url: str, headers: Mapping[str, str]) -> RawResponse:
        """Perform the request and return the raw response."""
        ...
