"""Data structures and interface shared by all content providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Collection:
    """A top-level collection (repository) of an owner."""

    name: str
    identifier: str


@dataclass(frozen=True)
class RemoteEntry:
    """
    An immediate child of a path within a collection.

    The kind is either "dir" or "file". The size is only a hint and may be missing. The
    content locator is an opaque reference to the contents (like a download URL).
    """

    name: str
    path: str
    kind: str
    size: Optional[int] = None
    content_locator: Optional[str] = None


class ContentProvider(ABC):
    """Interface of a remote content tree."""

    @abstractmethod
    def list_collections(self, owner: str) -> List[Collection]:
        """List the collections that belong to the owner."""

    @abstractmethod
    def list_children(self, collection: str, path: str) -> List[RemoteEntry]:
        """List the immediate children of a directory ("" is the collection root)."""

    @abstractmethod
    def fetch_content(self, collection: str, path: str) -> Tuple[bytes, str]:
        """Retrieve the (still encoded) contents of a file and its encoding name."""

    def close(self) -> None:
        """Release any resources held by the provider."""
