"""Module defining the command-line arguments and providing a parser for them."""

from __future__ import annotations

import argparse
import os
from typing import List, Optional

from githubfs.constants import DEFAULT_MOUNT_PATH, VERSION


class Arguments(argparse.Namespace):
    """Parsed command-line arguments."""

    owner: str
    mountpoint: str

    options: List[str]

    token: Optional[str]
    ref: Optional[str]

    config: str

    debug: bool

    @classmethod
    def parse(cls, args: Optional[List[str]] = None) -> Arguments:
        """
        Parse command-line arguments from the given list of strings.

        Defaults to sys.argv if none are specified.
        """
        return cls._get_parser().parse_args(args, namespace=cls())

    @classmethod
    def _get_parser(cls) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="Mount the GitHub repositories of a user as a read-only file "
            "system.",
            usage="githubfs [option...] owner [mountpoint]",
        )

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {VERSION}",
            help="show the program version",
        )

        # Primary arguments
        parser.add_argument(
            "owner", type=str, help="user or organization owning the repositories"
        )
        parser.add_argument(
            "mountpoint",
            type=str,
            nargs="?",
            default=DEFAULT_MOUNT_PATH,
            help=f"directory to mount at (default is {DEFAULT_MOUNT_PATH})",
        )

        # Mount options, validated later so that errors are reported consistently
        parser.add_argument(
            "-o",
            "--options",
            type=str,
            action="append",
            default=[],
            help="comma separated mount options (e.g. nodev,noatime)",
        )

        # Credentials
        parser.add_argument(
            "--token",
            type=str,
            default=os.environ.get("GITHUB_TOKEN"),
            help="GitHub API token (default is $GITHUB_TOKEN)",
        )

        # Git reference to mount instead of default branches
        parser.add_argument(
            "--ref", type=str, help="branch, tag or commit to mount for every repository"
        )

        # Path to (optional) config file
        parser.add_argument(
            "--config",
            type=str,
            help="path to config file (default is ~/.githubfs/config)",
            default="~/.githubfs/config",
        )

        # Enable debug output for development
        parser.add_argument(
            "--debug", action="store_true", help="enable debug information"
        )

        return parser
