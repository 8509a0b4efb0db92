"""Module that sets up the file system and mounts it."""

import contextlib
import os

from githubfs.args import Arguments
from githubfs.config import Config
import githubfs.constants as constants
from githubfs.filesystem import FileSystemBridge, GitHubFileSystem
from githubfs.filesystem.fuse import FUSE, FuseConfig
from githubfs.logger import log
from githubfs.mount import parse_mount_options
from githubfs.provider import GitHubContentProvider


class MountOperations:
    """Class that encapsulates mounting the file system and serving it until unmount."""

    def __init__(self, args: Arguments, config: Config):
        """Initialize mount operations based on the command-line arguments."""
        self._args = args
        self._config = config

    def run(self) -> int:
        """Run the operations and clean up properly in case of errors."""
        with contextlib.ExitStack() as stack:
            return self._run(stack)

        # https://github.com/python/mypy/issues/7726
        assert False, "unreachable"

    def _run(self, stack: contextlib.ExitStack) -> int:
        """Validate the configuration, prepare the file system and mount it."""
        # Reject invalid mount options before anything else happens.
        options = parse_mount_options(self._args.options)

        mount_path = os.path.abspath(os.path.expanduser(self._args.mountpoint))
        self._ensure_mountpoint(mount_path)

        provider = self._create_provider()
        stack.callback(provider.close)

        bridge = FileSystemBridge(self._args.owner, provider, self._config.cache)

        # Fetch the root listing so problems are reported before mounting.
        bridge.init()

        def mount_callback() -> None:
            log.info(f"mounted {self._args.owner} at {mount_path}")

        fs = GitHubFileSystem(bridge, mount_callback)

        config = FuseConfig()
        config.entry_timeout = self._config.cache.entry_timeout
        config.attr_timeout = self._config.cache.attr_timeout
        config.options = [option.value for option in options]

        log.debug(f"mounting file system at {mount_path} with options {config.options}")

        instance = FUSE(fs, config)
        return instance.mount(constants.FILESYSTEM_NAME, mount_path)

    def _create_provider(self) -> GitHubContentProvider:
        api = self._config.api

        if not self._args.token:
            log.warning("no token specified, only public repositories are visible")

        return GitHubContentProvider(
            token=self._args.token,
            base_url=api.url,
            timeout=api.timeout,
            max_requests=api.max_requests,
            retries=api.retries,
            backoff=api.backoff,
            max_backoff=api.max_backoff,
            ref=self._args.ref or api.ref,
        )

    @staticmethod
    def _ensure_mountpoint(mount_path: str) -> None:
        """Create the mount point directory if it doesn't exist yet."""
        if not os.path.exists(mount_path):
            log.info(f"creating mount point {mount_path}")
            os.makedirs(mount_path)
