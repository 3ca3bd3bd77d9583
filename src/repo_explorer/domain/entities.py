"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from repo_explorer.domain.exceptions import RepoExplorerError

T = TypeVar("T")


class EntryType(str, Enum):
    """Kind of a directory-listing row."""

    FILE = "file"
    DIRECTORY = "dir"


class ExpansionState(str, Enum):
    """Lifecycle of a directory node in the lazy tree."""

    COLLAPSED = "collapsed"
    EXPANDING = "expanding"
    EXPANDED = "expanded"


@dataclass(slots=True)
class RepositoryEntry:
    """One row of a GitHub contents listing."""

    name: str
    path: str
    entry_type: EntryType
    download_url: str | None = None
    is_expanded: bool = False

    @property
    def is_directory(self) -> bool:
        return self.entry_type is EntryType.DIRECTORY

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class OperationResult(Generic[T]):
    """Uniform return shape of every repository operation.

    ``data`` is always a usable value (empty list / string / bytes on
    failure).  ``error`` holds the typed cause of a failure so the caller
    can choose a message; it takes no part in equality.
    """

    success: bool
    data: T
    error: RepoExplorerError | None = field(default=None, compare=False)

    @classmethod
    def ok(cls, data: T) -> OperationResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, data: T, error: RepoExplorerError | None = None) -> OperationResult[T]:
        return cls(success=False, data=data, error=error)


@dataclass(slots=True, eq=False)
class TreeNode:
    """A node of the browsing tree: root, entry, or loading placeholder.

    Directory nodes start ``COLLAPSED`` with a single placeholder child,
    which is swapped for real children on the first successful expansion.
    """

    label: str
    entry: RepositoryEntry | None = None
    parent: TreeNode | None = field(default=None, repr=False)
    children: list[TreeNode] = field(default_factory=list, repr=False)
    state: ExpansionState = ExpansionState.COLLAPSED
    is_placeholder: bool = False
    is_root: bool = False

    PLACEHOLDER_LABEL = "Loading..."

    @classmethod
    def root(cls, label: str) -> TreeNode:
        node = cls(label=label, is_root=True)
        node.add_placeholder()
        return node

    @classmethod
    def for_entry(cls, entry: RepositoryEntry, parent: TreeNode | None = None) -> TreeNode:
        node = cls(label=entry.name, entry=entry, parent=parent)
        if entry.is_directory:
            node.add_placeholder()
        return node

    @property
    def path(self) -> str:
        """Repository-relative path; the root is ``""``."""
        return self.entry.path if self.entry is not None else ""

    @property
    def is_directory(self) -> bool:
        if self.is_root:
            return True
        return self.entry is not None and self.entry.is_directory

    @property
    def has_placeholder(self) -> bool:
        return any(child.is_placeholder for child in self.children)

    def add_placeholder(self) -> None:
        if not self.has_placeholder:
            self.children.append(
                TreeNode(label=self.PLACEHOLDER_LABEL, parent=self, is_placeholder=True)
            )

    def replace_children(self, entries: list[RepositoryEntry]) -> list[TreeNode]:
        """Drop every current child (placeholder included) and attach *entries*."""
        self.children = [TreeNode.for_entry(entry, parent=self) for entry in entries]
        return self.children

    def find(self, path: str) -> TreeNode | None:
        """Depth-first lookup of an already-materialized node by path."""
        if self.path == path and not self.is_placeholder:
            return self
        for child in self.children:
            if child.is_placeholder:
                continue
            if child.path == path or path.startswith(f"{child.path}/"):
                found = child.find(path)
                if found is not None:
                    return found
        return None

    def __str__(self) -> str:
        return self.label
