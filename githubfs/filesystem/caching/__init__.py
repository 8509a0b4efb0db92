"""
Modules that keep remote metadata and contents around to avoid redundant requests.

Every file system operation would otherwise translate into at least one request to the
GitHub API, with hundreds of milliseconds of latency and a strict rate limit. Client
tools tend to access the same entries many times in a row (e.g. ls -l stats every entry
it just listed), so two caches sit between the file system and the content provider:

* DirectoryCache keeps the listing of each visited directory for a configurable TTL.
Listings are fetched one level at a time, only when a directory is actually visited.
* ContentCache keeps the full contents of a file for a short window, which is enough to
serve the sequence of chunked read() calls that the kernel makes for a single file.

Both caches collapse concurrent requests for the same directory or file into a single
remote request, which matters when a tool like grep -r starts many reads in parallel.
Nothing is persisted to disk; the caches live as long as the mount.
"""

from .contents import ContentCache, decode_content
from .directory import DirectoryCache, DirectoryEntry, DirectoryListing

__all__ = [
    "ContentCache",
    "DirectoryCache",
    "DirectoryEntry",
    "DirectoryListing",
    "decode_content",
]
