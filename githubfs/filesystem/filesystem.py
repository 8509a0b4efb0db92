"""Module that exposes the inode-based file system through the path-based FUSE API."""

import errno
import os
from typing import Callable, Iterator, Optional, Tuple

from githubfs.constants import ROOT_INODE
from githubfs.filesystem.bridge import FileSystemBridge
from githubfs.filesystem.fuse import Operations
from githubfs.filesystem.fuse.fuse import ST_RDONLY


class GitHubFileSystem(Operations):
    """
    Class that implements a read-only FUSE file system on top of the bridge.

    The high-level FUSE API refers to entries by path, so every path is resolved into
    an inode by looking up its components one by one, starting at the root. Lookups are
    answered from the directory cache, so this only results in requests for
    directories that haven't been visited yet (or whose listing has expired).

    Open files use their inode as file handle.
    """

    def __init__(
        self, bridge: FileSystemBridge, mount_callback: Optional[Callable] = None
    ):
        """Instantiate file system with the bridge that implements the operations."""
        self._bridge = bridge
        self._mount_callback = mount_callback

    def init(self) -> None:
        """File system has been successfully mounted by FUSE."""
        if self._mount_callback is not None:
            self._mount_callback()

    def destroy(self) -> None:
        self._bridge.destroy()

    def resolve(self, path: str) -> int:
        """Resolve an absolute path into an inode."""
        inode = ROOT_INODE

        for name in path.split("/"):
            if name:
                inode = self._bridge.lookup(inode, name).inode

        return inode

    #
    # File operations
    #

    def open(self, path: str, flags: int) -> int:
        if flags & os.O_ACCMODE != os.O_RDONLY:
            raise OSError(errno.EROFS, os.strerror(errno.EROFS))

        inode = self.resolve(path)

        if self._bridge.getattr(inode).is_dir():
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR))

        return inode

    def read(self, path: str, fh: int, offset: int, size: int) -> bytes:
        return self._bridge.read(fh, offset, size)

    #
    # Metadata access
    #

    def getattr(self, path: str, fh: Optional[int]) -> dict:
        inode = fh if fh else self.resolve(path)

        return self._bridge.getattr(inode).__dict__

    def readdir(self, path: str, offset: int) -> Iterator[Tuple[str, dict, int]]:
        entries = self._bridge.readdir(self.resolve(path), offset)

        for entry in entries:
            stat_values = {"st_ino": entry.inode, "st_mode": entry.kind.mode}
            yield entry.name, stat_values, entry.next_offset

    #
    # Miscellaneous
    #

    def statfs(self, path: str) -> dict:
        return {
            "f_bsize": 4096,
            "f_frsize": 4096,
            "f_files": len(self._bridge.inodes),
            "f_flag": ST_RDONLY,
            "f_namemax": 255,
        }
