"""
Modules that expose the repositories of a GitHub owner as a read-only file system.

The GitHub API only knows about paths within repositories, while the kernel refers to
files by inode numbers that must stay the same for as long as the file system is
mounted. The file system is therefore organized around an inode table that hands out a
number for every path the first time it is seen and keeps it from then on.

Directories are only fetched when they are visited, one level at a time. A repository
with thousands of nested directories costs a single request to list at its root, and
nothing more until one of those directories is entered. Listings are cached for a
while, after which they are fetched again to pick up remote changes. Entries that
survive the refresh keep their inode numbers.

File contents are fetched in full upon the first read and kept around briefly to serve
the chunked reads that follow. Anything more would risk serving outdated contents for
a file system that is otherwise kept in sync with the remote.

All of this is implemented in terms of inodes in FileSystemBridge, which is then wrapped
by GitHubFileSystem to resolve the paths of the high-level FUSE API into inodes.
"""

from .bridge import Entry, FileSystemBridge, ListedEntry
from .filesystem import GitHubFileSystem

__all__ = [
    "Entry",
    "FileSystemBridge",
    "GitHubFileSystem",
    "ListedEntry",
]
