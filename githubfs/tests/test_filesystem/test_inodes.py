import threading

import pytest

from githubfs.constants import ROOT_INODE
from githubfs.errors import InternalError
from githubfs.filesystem.common import Kind
from githubfs.filesystem.inodes import InodeTable


def test_root_inode():
    table = InodeTable()

    assert len(table) == 1
    assert table.kind_of(ROOT_INODE) == Kind.DIRECTORY
    assert table.path_of(ROOT_INODE) == ("", "")
    assert table.record(ROOT_INODE).parent == ROOT_INODE


def test_resolve_or_create_is_idempotent():
    table = InodeTable()

    a = table.resolve_or_create("acme/lib", "src/main.py", Kind.FILE)
    b = table.resolve_or_create("acme/lib", "src/main.py", Kind.FILE)

    assert a == b
    assert a > ROOT_INODE
    assert len(table) == 2


def test_resolve_or_create_normalizes_slashes():
    table = InodeTable()

    a = table.resolve_or_create("acme/lib", "src/", Kind.DIRECTORY)
    b = table.resolve_or_create("acme/lib", "/src", Kind.DIRECTORY)

    assert a == b
    assert table.path_of(a) == ("acme/lib", "src")


def test_distinct_paths_get_distinct_inodes():
    table = InodeTable()

    inodes = {
        table.resolve_or_create("acme/lib", "a", Kind.FILE),
        table.resolve_or_create("acme/lib", "b", Kind.FILE),
        table.resolve_or_create("acme/docs", "a", Kind.FILE),
    }

    assert inodes == {2, 3, 4}


def test_unknown_inode():
    table = InodeTable()

    assert table.path_of(123) is None
    assert table.kind_of(123) is None
    assert table.record(123) is None


def test_kind_and_size_updates_keep_inode():
    table = InodeTable()

    inode = table.resolve_or_create("acme/lib", "x", Kind.FILE, size=10)
    assert table.record(inode).size == 10

    assert table.resolve_or_create("acme/lib", "x", Kind.FILE) == inode
    assert table.record(inode).size == 10

    assert table.resolve_or_create("acme/lib", "x", Kind.DIRECTORY) == inode
    assert table.kind_of(inode) == Kind.DIRECTORY


def test_update_size():
    table = InodeTable()

    inode = table.resolve_or_create("acme/lib", "x", Kind.FILE)
    assert table.record(inode).size == 0

    table.update_size(inode, 1234)
    assert table.record(inode).size == 1234

    # Unknown inodes are ignored
    table.update_size(999, 1)


def test_parent_is_recorded():
    table = InodeTable()

    parent = table.resolve_or_create("acme/lib", "", Kind.DIRECTORY)
    child = table.resolve_or_create("acme/lib", "README.md", Kind.FILE, parent=parent)

    assert table.record(child).parent == parent


def test_concurrent_resolve_allocates_once():
    table = InodeTable()
    barrier = threading.Barrier(8)
    results = []

    def resolve():
        barrier.wait()
        results.append(table.resolve_or_create("acme/lib", "same", Kind.FILE))

    threads = [threading.Thread(target=resolve) for _ in range(8)]

    for t in threads:
        t.start()

    for t in threads:
        t.join()

    assert len(set(results)) == 1
    assert len(table) == 2


def test_missing_reverse_mapping_fails_loudly():
    table = InodeTable()

    inode = table.resolve_or_create("acme/lib", "x", Kind.FILE)
    del table._inodes[("acme/lib", "x")]

    with pytest.raises(InternalError):
        table.record(inode)
