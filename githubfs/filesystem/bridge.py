"""
Module with the inode-based file system operations on top of the caches.

This is where kernel requests meet the remote content tree. Every operation resolves an
inode through the inode table and then either answers from the caches or has them fetch
what is missing. Apart from the inode table and the caches there is no state, so
operations can safely be invoked from any number of threads at the same time.
"""

from dataclasses import dataclass
import errno
import os
import time
from typing import Callable, Iterator, Optional

from githubfs.config import CacheConfig
from githubfs.constants import ROOT_INODE
from githubfs.errors import NotFoundError
from githubfs.filesystem.caching.contents import ContentCache
from githubfs.filesystem.caching.directory import DirectoryCache, DirectoryEntry
from githubfs.filesystem.common import Attributes, Kind
from githubfs.filesystem.inodes import InodeTable
from githubfs.logger import log
from githubfs.provider import ContentProvider


@dataclass
class Entry:
    """
    Result of a successful lookup.

    The timeouts specify how long (in seconds) the kernel may cache the name and the
    attributes of the entry without asking again.
    """

    inode: int
    kind: Kind
    attr: Attributes
    entry_timeout: float
    attr_timeout: float


@dataclass(frozen=True)
class ListedEntry:
    """Entry produced by readdir() along with the offset to continue after it."""

    name: str
    inode: int
    kind: Kind
    next_offset: int


class FileSystemBridge:
    """
    Read-only file system operations on inodes, backed by a content provider.

    Inode 1 is the root directory and contains a directory per collection of the owner.
    All other inodes are allocated as directories are listed.
    """

    def __init__(
        self,
        owner: str,
        provider: ContentProvider,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Instantiate the file system for the collections of an owner."""
        self._owner = owner
        self._provider = provider
        self._config = config or CacheConfig()

        self._inodes = InodeTable()
        self._directories = DirectoryCache(
            owner, self._inodes, provider, self._config.directory_ttl, clock
        )
        self._contents = ContentCache(
            self._inodes,
            provider,
            self._config.content_window,
            self._config.max_contents,
            clock,
        )

    @property
    def inodes(self) -> InodeTable:
        return self._inodes

    @property
    def directories(self) -> DirectoryCache:
        return self._directories

    #
    # Lifecycle
    #

    def init(self) -> None:
        """
        Prepare the file system for being mounted.

        The root listing is populated upfront so that problems like bad credentials or
        an unknown owner are reported before the mount is attempted. Nothing below the
        root is fetched.
        """
        collections = self._directories.children(ROOT_INODE)

        log.info(f"found {len(collections)} repositories for {self._owner}")

    def destroy(self) -> None:
        """Release all resources. There are no changes to flush."""
        self._contents.clear()
        self._provider.close()

    #
    # Operations
    #

    def lookup(self, parent: int, name: str) -> Entry:
        """Find a directory entry by name."""
        log.debug(f"lookup(parent={parent}, name={name!r})")

        for child in self._directories.children(parent):
            # The first entry wins if the provider reports duplicate names.
            if child.name == name:
                return Entry(
                    inode=child.inode,
                    kind=child.kind,
                    attr=self.getattr(child.inode),
                    entry_timeout=self._config.entry_timeout,
                    attr_timeout=self._config.attr_timeout,
                )

        raise NotFoundError(f"no entry named {name!r} in inode {parent}")

    def getattr(self, inode: int) -> Attributes:
        """Retrieve the attributes of an inode without contacting the remote."""
        record = self._inodes.record(inode)

        if record is None:
            raise NotFoundError(f"unknown inode {inode}")

        return Attributes.from_record(record)

    def readdir(self, inode: int, offset: int = 0) -> Iterator[ListedEntry]:
        """
        List the entries of a directory, starting at the specified offset.

        The "." and ".." entries come first, followed by the children in the order
        reported by the content provider. Offsets refer to positions in that sequence,
        so an enumeration can be resumed at any point as long as the listing hasn't
        expired in between.
        """
        log.debug(f"readdir(inode={inode}, offset={offset})")

        record = self._inodes.record(inode)

        if record is None or record.kind is not Kind.DIRECTORY:
            raise NotFoundError(f"inode {inode} is not a known directory")

        # Fetch eagerly so errors are raised by this call rather than by the iterator.
        entries = [
            DirectoryEntry(".", inode, Kind.DIRECTORY),
            DirectoryEntry("..", record.parent, Kind.DIRECTORY),
        ] + list(self._directories.children(inode))

        return self._iterate_entries(entries, max(offset, 0))

    @staticmethod
    def _iterate_entries(entries: list, offset: int) -> Iterator[ListedEntry]:
        for i in range(offset, len(entries)):
            entry = entries[i]
            yield ListedEntry(entry.name, entry.inode, entry.kind, i + 1)

    def read(self, inode: int, offset: int, length: int) -> bytes:
        """Read up to length bytes of a file starting at offset."""
        kind = self._inodes.kind_of(inode)

        if kind is None:
            raise NotFoundError(f"unknown inode {inode}")
        elif kind is Kind.DIRECTORY:
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR))
        elif offset < 0 or length < 0:
            raise OSError(errno.EINVAL, os.strerror(errno.EINVAL))

        data = self._contents.get(inode)

        return data[offset : offset + length]
