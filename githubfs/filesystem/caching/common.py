"""Data structures used by multiple file system caching components."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
import threading
from typing import Any, Callable, Dict, TypeVar

import lz4.frame

from githubfs.logger import log

T = TypeVar("T")


@dataclass
class FileContents:
    """
    Container for the full contents of a file.

    File contents are kept compressed while they wait for subsequent reads, which keeps
    the memory usage of a burst of reads across many files in check.
    """

    compressed_data: bytes
    size: int

    @staticmethod
    def from_data(data: bytes) -> FileContents:
        """Wrap raw file data into a FileContents object."""
        return FileContents(
            compressed_data=lz4.frame.compress(data),
            size=len(data),
        )

    @property
    def data(self) -> bytes:
        """Retrieve and decompress the original file data."""
        return lz4.frame.decompress(self.compressed_data)


class InflightIndex:
    """
    Collection of pending results to deduplicate concurrent work by arbitrary keys.

    The first thread to request work for a key performs it, while threads that request
    the same key in the meanwhile wait for that result instead of repeating the work.
    Keys are released as soon as the work has finished (successfully or not), so a
    failure is delivered to everyone that was waiting, but never to later callers.
    """

    def __init__(self) -> None:
        """Instantiate an InflightIndex."""
        self._global_lock = threading.Lock()

        self._pending: Dict[Any, Future] = {}

    def run(self, key: Any, fn: Callable[[], T]) -> T:
        """Run fn for the specified key or wait for the run that is already pending."""
        with self._global_lock:
            future = self._pending.get(key)
            leader = future is None

            if leader:
                future = Future()
                self._pending[key] = future

        if not leader:
            log.debug(f"waiting for pending work on {key}")
            return future.result()

        try:
            result = fn()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._global_lock:
                del self._pending[key]

    @property
    def pending_count(self) -> int:
        """Return the number of keys with work in progress."""
        with self._global_lock:
            return len(self._pending)
