"""
Modules that give access to the remote content tree that githubfs exposes.

A content provider knows about three things: the collections (repositories) of an
owner, the immediate children of a path within a collection, and the contents of a file
within a collection. The file system never talks to the network in any other way, which
keeps all transport concerns (authentication, pagination, retries, rate limits) in one
place.

Providers report failures with the exceptions from githubfs.errors so that the file
system can tell a missing file apart from a network outage or revoked credentials.
"""

from .common import Collection, ContentProvider, RemoteEntry
from .github import GitHubContentProvider

__all__ = [
    "Collection",
    "ContentProvider",
    "GitHubContentProvider",
    "RemoteEntry",
]
