"""Module that adds flags to pytest to enable extra tests, and shared fixtures."""

import base64
import threading
from typing import Dict, List, Optional, Tuple

import pytest

from githubfs.errors import NotFoundError
from githubfs.provider import Collection, ContentProvider, RemoteEntry


def pytest_addoption(parser):
    parser.addoption(
        "--fuse", action="store_true", default=False, help="Run FUSE tests"
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "fuse: mark test as requiring FUSE to run")


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--fuse"):
        skip_fuse = pytest.mark.skip(reason="only runs with --fuse option")

        for item in items:
            if "fuse" in item.keywords:
                item.add_marker(skip_fuse)


class FakeProvider(ContentProvider):
    """In-memory content provider that records every call made to it."""

    def __init__(self) -> None:
        self.collections: List[Collection] = []
        self.listings: Dict[Tuple[str, str], List[RemoteEntry]] = {}
        self.files: Dict[Tuple[str, str], bytes] = {}

        self.calls: List[tuple] = []
        self.closed = False

        # Cleared to make fetches block until it is set again.
        self.gate = threading.Event()
        self.gate.set()

        self._calls_lock = threading.Lock()

    def add_collection(self, identifier: str) -> None:
        self.collections.append(Collection(identifier.split("/")[-1], identifier))
        self.listings[(identifier, "")] = []

    def add_dir(self, collection: str, path: str) -> None:
        self._add_entry(collection, path, "dir")
        self.listings[(collection, path)] = []

    def add_file(self, collection: str, path: str, data: bytes) -> None:
        self._add_entry(collection, path, "file", len(data))
        self.files[(collection, path)] = data

    def remove(self, collection: str, path: str) -> None:
        parent = path.rpartition("/")[0]
        self.listings[(collection, parent)] = [
            e for e in self.listings[(collection, parent)] if e.path != path
        ]

    def count(self, *call: str) -> int:
        with self._calls_lock:
            return self.calls.count(call)

    def list_collections(self, owner: str) -> List[Collection]:
        self._record("list_collections", owner)
        return list(self.collections)

    def list_children(self, collection: str, path: str) -> List[RemoteEntry]:
        self._record("list_children", collection, path)

        try:
            return list(self.listings[(collection, path)])
        except KeyError:
            raise NotFoundError(f"{collection}:/{path}")

    def fetch_content(self, collection: str, path: str) -> Tuple[bytes, str]:
        self._record("fetch_content", collection, path)

        try:
            return base64.encodebytes(self.files[(collection, path)]), "base64"
        except KeyError:
            raise NotFoundError(f"{collection}:/{path}")

    def close(self) -> None:
        self.closed = True

    def _add_entry(
        self, collection: str, path: str, kind: str, size: Optional[int] = None
    ) -> None:
        parent, _, name = path.rpartition("/")
        self.listings[(collection, parent)].append(RemoteEntry(name, path, kind, size))

    def _record(self, *call: str) -> None:
        with self._calls_lock:
            self.calls.append(call)

        self.gate.wait(timeout=10)


class FakeClock:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def empty_provider():
    return FakeProvider()


@pytest.fixture
def provider():
    """
    Provider with the collection acme/lib, which contains:

    * README.md
    * src/
        * main.py
        * util/
            * text.py
    """
    p = FakeProvider()

    p.add_collection("acme/lib")
    p.add_file("acme/lib", "README.md", b"# lib\n\nA library.\n")
    p.add_dir("acme/lib", "src")
    p.add_file("acme/lib", "src/main.py", b"print('hello')\n")
    p.add_dir("acme/lib", "src/util")
    p.add_file("acme/lib", "src/util/text.py", b"")

    p.add_collection("acme/docs")

    return p


@pytest.fixture
def clock():
    return FakeClock()
