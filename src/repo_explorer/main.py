"""Wiring for host applications: logging setup and shared HTTP client lifecycle."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from repo_explorer.infrastructure.config import Settings, get_settings
from repo_explorer.infrastructure.github_rest_adapter import GitHubRestAdapter
from repo_explorer.infrastructure.httpx_transport import HttpxTransport
from repo_explorer.services.browsing_session import BrowsingSession, TokenProvider


def configure_logging(settings: Settings | None = None) -> None:
    """Route package logs through the root logger at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )


@asynccontextmanager
async def open_explorer(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[GitHubRestAdapter]:
    """Yield a ready adapter; the underlying ``httpx.AsyncClient`` is closed on exit.

    *transport* replaces the network, e.g. with ``httpx.MockTransport``.
    """
    settings = settings or get_settings()
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout),
        transport=transport,
        follow_redirects=True,
    )
    try:
        yield GitHubRestAdapter(HttpxTransport(client), settings)
    finally:
        await client.aclose()


@asynccontextmanager
async def open_session(
    token_provider: TokenProvider,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[BrowsingSession]:
    """Yield a browsing session; its outstanding work is cancelled on exit."""
    settings = settings or get_settings()
    async with open_explorer(settings, transport) as gateway:
        session = BrowsingSession(
            gateway,
            token_provider,
            detailed_errors=settings.expansion_error_detail == "detailed",
            sort_children=settings.sort_directories_first,
        )
        try:
            yield session
        finally:
            await session.close()
