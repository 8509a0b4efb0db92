import errno

import pytest

from githubfs.errors import (
    AuthFailureError,
    DecodeError,
    GitHubFSError,
    InternalError,
    NotFoundError,
    RemoteError,
    TransientNetworkError,
    UnsupportedEncodingError,
)


@pytest.mark.parametrize(
    "error_class,code",
    [
        (NotFoundError, errno.ENOENT),
        (TransientNetworkError, errno.EIO),
        (AuthFailureError, errno.EACCES),
        (RemoteError, errno.EIO),
        (DecodeError, errno.EIO),
        (UnsupportedEncodingError, errno.EIO),
    ],
)
def test_errno(error_class, code):
    e = error_class("something went wrong")

    assert isinstance(e, OSError)
    assert isinstance(e, GitHubFSError)
    assert e.errno == code
    assert e.strerror == "something went wrong"


def test_str():
    assert "missing thing" in str(NotFoundError("missing thing"))


def test_unsupported_encoding_is_decode_error():
    assert issubclass(UnsupportedEncodingError, DecodeError)


def test_internal_error_is_not_os_error():
    assert not issubclass(InternalError, OSError)
