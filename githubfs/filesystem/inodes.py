"""
Module with the registry that gives remote paths a stable inode number.

The kernel refers to files by inode number across calls and expects the same file to
keep the same number for as long as it's mounted. Handing out a new number whenever a
path is listed or looked up again results in duplicate entries and stale file handles
for client tools, so every path gets its number exactly once and keeps it until the
file system is unmounted.
"""

import dataclasses
import threading
import time
from typing import Dict, Optional, Tuple

from githubfs.constants import ROOT_INODE
from githubfs.errors import InternalError
from githubfs.filesystem.common import InodeRecord, Kind

# Key of the mount root, which doesn't belong to any collection.
ROOT_KEY = ("", "")


class InodeTable:
    """
    Thread-safe mapping between inode numbers and (collection, path) pairs.

    Inode numbers are allocated from a counter that only ever increases, so a number is
    never reused for a different path even if the original path disappears remotely.

    All operations are short and don't perform I/O, so a single lock protects the whole
    table.
    """

    def __init__(self) -> None:
        """Instantiate a table that only contains the mount root."""
        self._lock = threading.Lock()

        self._records: Dict[int, InodeRecord] = {}
        self._inodes: Dict[Tuple[str, str], int] = {}

        self._next_inode = ROOT_INODE + 1

        self._insert(
            InodeRecord(
                inode=ROOT_INODE,
                collection=ROOT_KEY[0],
                path=ROOT_KEY[1],
                kind=Kind.DIRECTORY,
                parent=ROOT_INODE,
                size=0,
                mtime_ns=time.time_ns(),
            )
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def resolve_or_create(
        self,
        collection: str,
        path: str,
        kind: Kind,
        size: Optional[int] = None,
        parent: int = ROOT_INODE,
    ) -> int:
        """
        Return the inode for a path, allocating one if the path wasn't seen before.

        The kind and size hint of known paths are updated to the latest reported values,
        but their inode number stays the same.
        """
        key = (collection, path.strip("/"))

        with self._lock:
            inode = self._inodes.get(key)

            if inode is None:
                inode = self._next_inode
                self._next_inode += 1

                self._insert(
                    InodeRecord(
                        inode=inode,
                        collection=key[0],
                        path=key[1],
                        kind=kind,
                        parent=parent,
                        size=size or 0,
                        mtime_ns=time.time_ns(),
                    )
                )
            else:
                record = self._record(inode)

                if record.kind != kind or (size is not None and record.size != size):
                    self._records[inode] = dataclasses.replace(
                        record,
                        kind=kind,
                        size=record.size if size is None else size,
                    )

            return inode

    def path_of(self, inode: int) -> Optional[Tuple[str, str]]:
        """Return the (collection, path) pair of an inode, if it is known."""
        record = self.record(inode)

        return (record.collection, record.path) if record else None

    def kind_of(self, inode: int) -> Optional[Kind]:
        """Return the kind of entry behind an inode, if it is known."""
        record = self.record(inode)

        return record.kind if record else None

    def record(self, inode: int) -> Optional[InodeRecord]:
        """Return a snapshot of everything known about an inode."""
        with self._lock:
            if inode not in self._records:
                return None

            return self._record(inode)

    def update_size(self, inode: int, size: int) -> None:
        """Record the actual size of a file once its contents are known."""
        with self._lock:
            record = self._records.get(inode)

            if record is not None and record.size != size:
                self._records[inode] = dataclasses.replace(record, size=size)

    def _insert(self, record: InodeRecord) -> None:
        key = (record.collection, record.path)

        self._records[record.inode] = record
        self._inodes[key] = record.inode

    def _record(self, inode: int) -> InodeRecord:
        """Retrieve a record while holding the lock and verify the reverse mapping."""
        record = self._records[inode]

        if self._inodes.get((record.collection, record.path)) != inode:
            raise InternalError(f"inode {inode} is missing from the path index")

        return record
