"""Data structures used by multiple file system components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import os
import stat
from typing import Union


class Kind(Enum):
    """Kind of file system entry."""

    DIRECTORY = "dir"
    FILE = "file"

    @staticmethod
    def from_remote(kind: str) -> Kind:
        """Map the kind reported by a content provider, treating unknown kinds as files."""
        return Kind.DIRECTORY if kind == Kind.DIRECTORY.value else Kind.FILE

    @property
    def mode(self) -> int:
        """Return the file type and permission bits, which never include write bits."""
        if self is Kind.DIRECTORY:
            return stat.S_IFDIR | 0o755
        else:
            return stat.S_IFREG | 0o644


@dataclass(frozen=True)
class InodeRecord:
    """Snapshot of what is known about the entry behind an inode."""

    inode: int
    collection: str
    path: str
    kind: Kind
    parent: int
    size: int
    mtime_ns: int


@dataclass
class Attributes:
    """Container of file system attributes (basically os.stat_result as a dataclass)."""

    st_mode: int
    st_ino: int
    st_nlink: int
    st_uid: int
    st_gid: int
    st_size: int
    st_blksize: int
    st_blocks: int
    st_atime_ns: int
    st_mtime_ns: int
    st_ctime_ns: int

    BLOCK_SIZE = 512

    def __init__(self, **attribs: Union[int, float]) -> None:
        """
        Instantiate with the specified file system attributes.

        You must specify the attributes declared in this class, but you may include any
        number of extra attributes.
        """
        for name, value in attribs.items():
            setattr(self, name, value)

    @staticmethod
    def from_record(record: InodeRecord) -> Attributes:
        """Instantiate from the record of an inode, owned by the mounting user."""
        size = record.size if record.kind is Kind.FILE else 0

        return Attributes(
            st_mode=record.kind.mode,
            st_ino=record.inode,
            st_nlink=2 if record.kind is Kind.DIRECTORY else 1,
            st_uid=os.getuid(),
            st_gid=os.getgid(),
            st_size=size,
            st_blksize=Attributes.BLOCK_SIZE,
            st_blocks=(size + Attributes.BLOCK_SIZE - 1) // Attributes.BLOCK_SIZE,
            st_atime_ns=record.mtime_ns,
            st_mtime_ns=record.mtime_ns,
            st_ctime_ns=record.mtime_ns,
        )

    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.st_mode)
