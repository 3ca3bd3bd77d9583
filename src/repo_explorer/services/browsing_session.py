"""Browsing session: the core behind one repository browsing dialog.

The session owns the tree, the in-flight registry, and every task it
spawns.  The token comes from a caller-supplied provider on each action
and is never kept.  :meth:`BrowsingSession.close` cancels whatever is
still running; cancelled work never reports an error.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

from repo_explorer.domain.entities import TreeNode
from repo_explorer.domain.exceptions import (
    InvalidRepositoryRefError,
    MissingDownloadUrlError,
    NotFoundError,
    RepoExplorerError,
)
from repo_explorer.domain.ports.repository_gateway import RepositoryGateway
from repo_explorer.domain.value_objects import FileKind, RepositoryRef
from repo_explorer.services.in_flight import InFlightRegistry
from repo_explorer.services.messages import Resource, describe_failure
from repo_explorer.services.tree_materializer import (
    ExpansionStatus,
    LazyTreeMaterializer,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TokenProvider = Callable[[], str]


@dataclass(frozen=True, slots=True)
class SessionOutcome(Generic[T]):
    """Result of a user action: a value, a message to show, or a silent skip."""

    ok: bool
    value: T | None = None
    message: str | None = None
    skipped: bool = False


@dataclass(frozen=True, slots=True)
class FileView:
    """A fetched file ready to be shown."""

    name: str
    path: str
    kind: FileKind
    content: str | bytes


async def sign_in(gateway: RepositoryGateway, token: str) -> SessionOutcome[str]:
    """Validate *token*; on success its value is returned for the caller to persist."""
    token = token.strip()
    result = await gateway.validate_token(token)
    if result.success:
        return SessionOutcome(ok=True, value=result.data)
    return SessionOutcome(ok=False, message=describe_failure(result.error, Resource.TOKEN))


class BrowsingSession:
    """State and outstanding work of one browsing dialog.

    Parameters
    ----------
    gateway:
        Repository operations.
    token_provider:
        Called on every action to obtain the current credential.
    detailed_errors:
        Include HTTP status and server message in failure messages.
    sort_children:
        Directories-first, case-insensitive ordering of listed levels.
    """

    def __init__(
        self,
        gateway: RepositoryGateway,
        token_provider: TokenProvider,
        *,
        detailed_errors: bool = True,
        sort_children: bool = True,
    ) -> None:
        self._gateway = gateway
        self._token_provider = token_provider
        self._detailed = detailed_errors
        self._sort = sort_children
        self._in_flight = InFlightRegistry()
        self._tasks: set[asyncio.Task] = set()
        self._tree: LazyTreeMaterializer | None = None
        self._closed = False

    # ── Properties ──────────────────────────────────────────────────────

    @property
    def tree(self) -> LazyTreeMaterializer | None:
        return self._tree

    @property
    def root(self) -> TreeNode | None:
        return self._tree.root if self._tree else None

    @property
    def in_flight(self) -> InFlightRegistry:
        return self._in_flight

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Actions ─────────────────────────────────────────────────────────

    async def open_repository(self, owner: str, name: str) -> SessionOutcome[TreeNode]:
        """Validate owner, then materialize the root level of ``owner/name``."""
        try:
            ref = RepositoryRef.from_parts(owner, name)
        except InvalidRepositoryRefError as exc:
            return self._failure(exc, Resource.REPOSITORY)
        return await self._open(ref)

    async def open_repository_url(self, url: str) -> SessionOutcome[TreeNode]:
        """Same as :meth:`open_repository` for a ``https://github.com/<owner>/<repo>`` URL."""
        try:
            ref = RepositoryRef.from_url(url)
        except InvalidRepositoryRefError as exc:
            return self._failure(exc, Resource.REPOSITORY)
        return await self._open(ref)

    async def _open(self, ref: RepositoryRef) -> SessionOutcome[TreeNode]:
        token = self._token_provider()
        logger.info("Opening repository %s", ref.full_name)

        owner_result = await self._gateway.validate_owner(token, ref.owner)
        if not owner_result.success:
            return self._failure(owner_result.error, Resource.OWNER, owner=ref.owner)

        tree = LazyTreeMaterializer(
            self._gateway, ref, in_flight=self._in_flight, sort_children=self._sort
        )
        expansion = await tree.expand(tree.root, token)
        if expansion.status is ExpansionStatus.SKIPPED:
            return SessionOutcome(ok=False, skipped=True)
        if expansion.status is ExpansionStatus.FAILED:
            assert expansion.listing is not None
            return self._failure(
                expansion.listing.error,
                Resource.REPOSITORY,
                repository=ref.full_name,
                path="/",
            )

        self._tree = tree
        logger.info("Repository %s opened with %d root entries", ref.full_name, len(expansion.children))
        return SessionOutcome(ok=True, value=tree.root)

    async def expand(self, node: TreeNode) -> SessionOutcome[list[TreeNode]]:
        """Load the children of a collapsed directory node."""
        tree = self._require_tree()
        expansion = await tree.expand(node, self._token_provider())

        if expansion.status is ExpansionStatus.SKIPPED:
            return SessionOutcome(ok=True, value=[], skipped=True)
        if expansion.status is ExpansionStatus.FAILED:
            assert expansion.listing is not None
            return self._failure(
                expansion.listing.error,
                Resource.REPOSITORY,
                repository=tree.repository.full_name,
                path=node.path or "/",
            )
        return SessionOutcome(ok=True, value=expansion.children)

    async def expand_path(self, path: str) -> SessionOutcome[list[TreeNode]]:
        """Expand the already-materialized directory at *path*."""
        tree = self._require_tree()
        node = tree.root.find(path)
        if node is None:
            return self._failure(
                NotFoundError(path), Resource.REPOSITORY, repository=tree.repository.full_name, path=path
            )
        return await self.expand(node)

    async def open_file(self, node: TreeNode) -> SessionOutcome[FileView]:
        """Fetch a selected file as text or bytes depending on its name."""
        entry = node.entry
        if entry is None or entry.is_directory:
            return SessionOutcome(ok=False, skipped=True)

        if not entry.download_url:
            logger.warning("File %s has no download URL", entry.path)
            return self._failure(MissingDownloadUrlError(entry.path), Resource.FILE, file=entry.name)

        kind = FileKind.for_name(entry.name)
        with self._in_flight.claim(entry.download_url) as acquired:
            if not acquired:
                return SessionOutcome(ok=False, skipped=True)

            token = self._token_provider()
            if kind is FileKind.BINARY:
                result = await self._gateway.fetch_file_bytes(token, entry.download_url)
            else:
                result = await self._gateway.fetch_file_content(token, entry.download_url)

        if not result.success:
            return self._failure(result.error, Resource.FILE, file=entry.name)
        return SessionOutcome(
            ok=True,
            value=FileView(name=entry.name, path=entry.path, kind=kind, content=result.data),
        )

    # ── Task tracking ───────────────────────────────────────────────────

    def submit(self, work: Awaitable[T]) -> asyncio.Task[T]:
        """Run *work* in a task owned by this session."""
        if self._closed:
            raise RuntimeError("Browsing session is closed")
        task = asyncio.ensure_future(work)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def close(self) -> None:
        """Cancel every outstanding task and wait for them to unwind."""
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Browsing session closed (%d task(s) cancelled)", len(tasks))

    async def __aenter__(self) -> BrowsingSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── Internals ───────────────────────────────────────────────────────

    def _require_tree(self) -> LazyTreeMaterializer:
        if self._tree is None:
            raise RuntimeError("No repository is open in this session")
        return self._tree

    def _failure(
        self, error: RepoExplorerError | None, resource: Resource, **context: object
    ) -> SessionOutcome:
        text = describe_failure(error, resource, detailed=self._detailed, **context)
        logger.warning("%s", text)
        return SessionOutcome(ok=False, message=text)
