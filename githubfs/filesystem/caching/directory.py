"""Module that implements the lazily populated cache of directory listings."""

from __future__ import annotations

from dataclasses import dataclass
import errno
import os
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from githubfs.constants import ROOT_INODE
from githubfs.errors import NotFoundError
from githubfs.filesystem.caching.common import InflightIndex
from githubfs.filesystem.common import InodeRecord, Kind
from githubfs.filesystem.inodes import InodeTable
from githubfs.logger import log
from githubfs.provider import ContentProvider


@dataclass(frozen=True)
class DirectoryEntry:
    """Immediate child of a directory."""

    name: str
    inode: int
    kind: Kind


@dataclass(frozen=True)
class DirectoryListing:
    """
    Snapshot of the children of a directory.

    Entries are kept in the order reported by the content provider. A listing is never
    modified after it has been created. Refreshing a directory replaces its listing as a
    whole, so readers always see either the old or the new listing and never a mix.
    """

    entries: Tuple[DirectoryEntry, ...]
    populated_at: float
    stale: bool = False

    def expired(self, now: float, ttl: float) -> bool:
        return self.stale or now - self.populated_at >= ttl


class DirectoryCache:
    """
    Cache of directory listings that are fetched on demand and expire after a TTL.

    Only the immediate children of a directory are fetched when it is listed. Nested
    directories are registered in the inode table, but their own children are not
    fetched until they are listed themselves.

    Listings are fetched without holding the cache lock, so one slow directory doesn't
    block access to all the others. Concurrent requests for the same uncached directory
    are collapsed into a single fetch.
    """

    def __init__(
        self,
        owner: str,
        inodes: InodeTable,
        provider: ContentProvider,
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Instantiate an empty cache for the collections of the specified owner."""
        self._owner = owner
        self._inodes = inodes
        self._provider = provider
        self._ttl = ttl
        self._clock = clock

        self._lock = threading.Lock()
        self._listings: Dict[int, DirectoryListing] = {}
        self._inflight = InflightIndex()

    def children(self, inode: int) -> Tuple[DirectoryEntry, ...]:
        """Return the (cached) children of a directory."""
        # The kind may have changed since the listing was cached.
        self._check_directory(inode)

        listing = self._cached_listing(inode)

        if listing is not None:
            return listing.entries

        return self._inflight.run(inode, lambda: self._populate(inode)).entries

    def invalidate(self, inode: int) -> None:
        """Mark a listing as stale so that it is fetched again on its next access."""
        with self._lock:
            listing = self._listings.get(inode)

            if listing is not None and not listing.stale:
                self._listings[inode] = DirectoryListing(
                    entries=listing.entries,
                    populated_at=listing.populated_at,
                    stale=True,
                )

    def is_populated(self, inode: int) -> bool:
        """Return whether a (possibly expired) listing exists for the directory."""
        with self._lock:
            return inode in self._listings

    def _cached_listing(self, inode: int) -> Optional[DirectoryListing]:
        with self._lock:
            listing = self._listings.get(inode)

        if listing is None or listing.expired(self._clock(), self._ttl):
            return None

        return listing

    def _populate(self, inode: int) -> DirectoryListing:
        """Fetch the children of a directory and store them as its new listing."""
        # Another thread may have finished populating while this one was waiting.
        listing = self._cached_listing(inode)

        if listing is not None:
            return listing

        record = self._check_directory(inode)

        if inode == ROOT_INODE:
            entries = self._fetch_collections()
        else:
            entries = self._fetch_children(inode, record.collection, record.path)

        listing = DirectoryListing(entries=tuple(entries), populated_at=self._clock())

        with self._lock:
            self._listings[inode] = listing

        log.debug(f"populated listing of inode {inode} with {len(entries)} entries")

        return listing

    def _check_directory(self, inode: int) -> InodeRecord:
        record = self._inodes.record(inode)

        if record is None:
            raise NotFoundError(f"unknown inode {inode}")
        elif record.kind is not Kind.DIRECTORY:
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR))

        return record

    def _fetch_collections(self) -> List[DirectoryEntry]:
        entries = []

        for collection in self._provider.list_collections(self._owner):
            child = self._inodes.resolve_or_create(
                collection.identifier, "", Kind.DIRECTORY, parent=ROOT_INODE
            )
            entries.append(DirectoryEntry(collection.name, child, Kind.DIRECTORY))

        return entries

    def _fetch_children(
        self, inode: int, collection: str, path: str
    ) -> List[DirectoryEntry]:
        entries = []

        for remote_entry in self._provider.list_children(collection, path):
            kind = Kind.from_remote(remote_entry.kind)
            child = self._inodes.resolve_or_create(
                collection,
                remote_entry.path,
                kind,
                size=remote_entry.size if kind is Kind.FILE else None,
                parent=inode,
            )
            entries.append(DirectoryEntry(remote_entry.name, child, kind))

        return entries
