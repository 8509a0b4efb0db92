"""
Module defining the errors that githubfs distinguishes between.

File system errors derive from OSError with the errno set, so that the FUSE layer can
return them to the kernel as-is. Each error class corresponds to a distinct errno (or
retry policy) to avoid collapsing network, credential and lookup failures into a single
generic I/O error.
"""

import errno
import os


class GitHubFSError(OSError):
    """Base class for errors that are reported to the kernel with an errno."""

    errno_code = errno.EIO

    def __init__(self, message: str) -> None:
        """Instantiate the error with a human-readable message."""
        super().__init__(self.errno_code, message)

    def __str__(self) -> str:
        return f"{self.strerror} ({os.strerror(self.errno_code)})"


class NotFoundError(GitHubFSError):
    """The path or inode does not exist remotely or in the inode table."""

    errno_code = errno.ENOENT


class TransientNetworkError(GitHubFSError):
    """A connection failure, timeout or server-side error that may succeed on retry."""

    errno_code = errno.EIO


class AuthFailureError(GitHubFSError):
    """The credentials were rejected. Retrying will not help."""

    errno_code = errno.EACCES


class RemoteError(GitHubFSError):
    """The API responded with a non-success status that has no more specific meaning."""

    errno_code = errno.EIO


class DecodeError(GitHubFSError):
    """The API responded with data that could not be decoded."""

    errno_code = errno.EIO


class UnsupportedEncodingError(DecodeError):
    """File contents were delivered in an encoding that isn't recognized."""


class InvalidConfigurationError(ValueError):
    """The requested configuration cannot be honored, e.g. a writable mount."""


class InternalError(RuntimeError):
    """An internal invariant was violated. This is a bug and must not be swallowed."""
