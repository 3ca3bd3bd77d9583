"""Lazy tree materializer — expands directory nodes one level at a time.

Per directory node: ``COLLAPSED → EXPANDING → EXPANDED``.  ``EXPANDED`` is
sticky; a failed listing sends the node back to ``COLLAPSED`` with its
placeholder intact so the user can try again.  Only the coroutine that
awaited the listing touches the node, after the result is back.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from repo_explorer.domain.entities import (
    ExpansionState,
    OperationResult,
    RepositoryEntry,
    TreeNode,
)
from repo_explorer.domain.ports.repository_gateway import RepositoryGateway
from repo_explorer.domain.value_objects import RepositoryRef
from repo_explorer.services.in_flight import InFlightRegistry

logger = logging.getLogger(__name__)


class ExpansionStatus(str, Enum):
    EXPANDED = "expanded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ExpansionResult:
    """What one expand request did to its node."""

    status: ExpansionStatus
    children: list[TreeNode] = field(default_factory=list)
    listing: OperationResult[list[RepositoryEntry]] | None = None


def display_order(entries: list[RepositoryEntry]) -> list[RepositoryEntry]:
    """Directories first, then case-insensitive name."""
    return sorted(entries, key=lambda e: (not e.is_directory, e.name.lower()))


class LazyTreeMaterializer:
    """Builds the browsing tree of one repository on demand.

    Parameters
    ----------
    gateway:
        Source of directory listings.
    repository:
        The repository being browsed.
    in_flight:
        Registry shared with the rest of the session; keys are paths.
    sort_children:
        Apply :func:`display_order` to every attached level.
    """

    def __init__(
        self,
        gateway: RepositoryGateway,
        repository: RepositoryRef,
        in_flight: InFlightRegistry | None = None,
        sort_children: bool = True,
    ) -> None:
        self._gateway = gateway
        self._repository = repository
        self._in_flight = in_flight or InFlightRegistry()
        self._sort = sort_children
        self.root = TreeNode.root(repository.full_name)

    @property
    def repository(self) -> RepositoryRef:
        return self._repository

    async def expand(self, node: TreeNode, token: str) -> ExpansionResult:
        """Fetch and attach the children of *node*.

        Skipped without a network call when *node* is not a directory, is
        already expanded or expanding, or its path is already in flight.
        """
        if not node.is_directory or node.state is not ExpansionState.COLLAPSED:
            return ExpansionResult(ExpansionStatus.SKIPPED)

        with self._in_flight.claim(node.path) as acquired:
            if not acquired:
                return ExpansionResult(ExpansionStatus.SKIPPED)

            node.state = ExpansionState.EXPANDING
            try:
                listing = await self._gateway.list_directory(
                    token, self._repository.owner, self._repository.name, node.path
                )
            except asyncio.CancelledError:
                logger.debug("Expansion of %r cancelled", node.path)
                # only write on the cancel path: drop our own EXPANDING marker
                node.state = ExpansionState.COLLAPSED
                raise

        if not listing.success:
            node.state = ExpansionState.COLLAPSED
            return ExpansionResult(ExpansionStatus.FAILED, listing=listing)

        return ExpansionResult(
            ExpansionStatus.EXPANDED,
            children=self.attach(node, listing.data),
            listing=listing,
        )

    def attach(self, node: TreeNode, entries: list[RepositoryEntry]) -> list[TreeNode]:
        """Replace *node*'s placeholder with *entries* and mark it expanded."""
        if self._sort:
            entries = display_order(entries)
        children = node.replace_children(entries)
        node.state = ExpansionState.EXPANDED
        if node.entry is not None:
            node.entry.is_expanded = True
        logger.debug("Expanded %r with %d children", node.path, len(children))
        return children
