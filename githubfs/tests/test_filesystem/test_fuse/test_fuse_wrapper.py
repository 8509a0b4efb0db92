import errno
import os
from unittest import mock

import pytest

from githubfs.errors import AuthFailureError, InternalError, NotFoundError
from githubfs.filesystem.fuse import FUSE, FuseConfig, Operations


@pytest.fixture
def fuse():
    # Return the plain Python wrapper instead of a C function pointer.
    with mock.patch.object(FUSE, "_typeof", return_value=lambda fn: fn):
        yield FUSE(Operations(), FuseConfig())


def wrap(fuse, fn):
    return fuse._wrap_operation("test", fn)


def test_result_is_passed_through(fuse):
    assert wrap(fuse, lambda: 123)() == 123


def test_none_becomes_zero(fuse):
    assert wrap(fuse, lambda: None)() == 0


def test_os_errors_become_negative_errno(fuse):
    def not_found():
        raise NotFoundError("gone")

    def denied():
        raise AuthFailureError("bad credentials")

    assert wrap(fuse, not_found)() == -errno.ENOENT
    assert wrap(fuse, denied)() == -errno.EACCES


def test_os_error_without_errno(fuse):
    def fail():
        raise OSError("no errno")

    assert wrap(fuse, fail)() == -errno.EIO


def test_not_implemented(fuse):
    def fail():
        raise NotImplementedError()

    assert wrap(fuse, fail)() == -errno.ENOSYS


def test_unexpected_exception(fuse, caplog):
    def fail():
        raise ValueError("unexpected")

    assert wrap(fuse, fail)() == -errno.EIO
    assert "fuse::test() raised an unexpected exception" in caplog.text


def test_internal_error_aborts(fuse, caplog):
    def fail():
        raise InternalError("inode 3 is missing from the path index")

    with mock.patch("os.abort") as mock_abort:
        wrap(fuse, fail)()

    mock_abort.assert_called_once()
    assert "inode 3 is missing from the path index" in caplog.text


def test_default_operations():
    ops = Operations()

    ops.init()
    ops.destroy()
    ops.release("/a", 1)

    with pytest.raises(NotImplementedError):
        ops.getattr("/a", None)

    with pytest.raises(NotImplementedError):
        ops.open("/a", os.O_RDONLY)


def test_fuse_config_defaults():
    config = FuseConfig()

    assert config.use_ino
    assert config.readdir_ino
    assert config.options == []
