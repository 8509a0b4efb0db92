"""Module that fetches, decodes and briefly retains file contents."""

import base64
import binascii
import collections
import threading
import time
from typing import Callable, Dict, Tuple

from githubfs.errors import DecodeError, NotFoundError, UnsupportedEncodingError
from githubfs.filesystem.caching.common import FileContents, InflightIndex
from githubfs.filesystem.inodes import InodeTable
from githubfs.logger import log
from githubfs.provider import ContentProvider


def decode_content(data: bytes, encoding: str) -> bytes:
    """
    Decode file contents as delivered by a content provider.

    Base64 contents may be wrapped across lines. Anything that isn't valid base64 after
    removing the line breaks is rejected instead of being decoded partially.
    """
    if encoding == "base64":
        try:
            return base64.b64decode(b"".join(data.split()), validate=True)
        except binascii.Error as e:
            raise DecodeError(f"failed to decode base64 content: {e}")
    elif encoding == "identity":
        return data
    else:
        raise UnsupportedEncodingError(f"unknown content encoding: {encoding}")


class ContentCache:
    """
    Short-lived cache of file contents to serve a burst of reads with a single fetch.

    The kernel reads files in chunks of limited size, so reading a single file results
    in a sequence of read() calls in quick succession. The contents are fetched in full
    upon the first read and retained for a short window to serve the rest. They are not
    meant to be cached any longer than that, so old contents are dropped on a
    least-recently-fetched basis once the window has passed or too many files are held.

    Concurrent reads of a file that isn't cached yet result in a single fetch.
    """

    def __init__(
        self,
        inodes: InodeTable,
        provider: ContentProvider,
        window: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Instantiate an empty contents cache."""
        self._inodes = inodes
        self._provider = provider
        self._window = window
        self._max_entries = max_entries
        self._clock = clock

        self._lock = threading.Lock()
        self._entries: Dict[int, Tuple[float, FileContents]] = collections.OrderedDict()
        self._inflight = InflightIndex()

    def count(self) -> int:
        """Return the number of files with retained contents."""
        with self._lock:
            return len(self._entries)

    def get(self, inode: int) -> bytes:
        """Return the decoded contents of a file."""
        with self._lock:
            self._expire()
            entry = self._entries.get(inode)

        if entry is not None:
            return entry[1].data

        return self._inflight.run(inode, lambda: self._fetch(inode)).data

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _fetch(self, inode: int) -> FileContents:
        # Another fetch may have completed between the cache check and becoming leader.
        with self._lock:
            self._expire()
            entry = self._entries.get(inode)

        if entry is not None:
            return entry[1]

        key = self._inodes.path_of(inode)

        if key is None:
            raise NotFoundError(f"unknown inode {inode}")

        collection, path = key

        try:
            data, encoding = self._provider.fetch_content(collection, path)
            contents = FileContents.from_data(decode_content(data, encoding))
        except OSError as e:
            log.error(f"failed to fetch contents of {collection}:/{path}: {e}")
            raise

        # The size hint from the listing may be missing or outdated.
        self._inodes.update_size(inode, contents.size)

        with self._lock:
            self._entries.pop(inode, None)
            self._entries[inode] = (self._clock(), contents)
            self._expire()

        return contents

    def _expire(self) -> None:
        """Drop contents that have outlived the window (requires the lock to be held)."""
        now = self._clock()

        for inode, (fetched_at, _) in list(self._entries.items()):
            if now - fetched_at >= self._window or len(self._entries) > self._max_entries:
                del self._entries[inode]
            else:
                break
