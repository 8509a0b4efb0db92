"""Module that validates mount options and translates them for FUSE."""

from enum import Enum
from typing import Iterable, List

from githubfs.errors import InvalidConfigurationError


class MountOption(str, Enum):
    """Mount options that can be passed through to FUSE (see mount(8))."""

    DEV = "dev"
    NODEV = "nodev"
    SUID = "suid"
    NOSUID = "nosuid"
    EXEC = "exec"
    NOEXEC = "noexec"
    ATIME = "atime"
    NOATIME = "noatime"
    DIRSYNC = "dirsync"
    SYNC = "sync"
    ASYNC = "async"
    RO = "ro"


def parse_mount_options(options: Iterable[str]) -> List[MountOption]:
    """
    Parse mount options as specified on the command line.

    Each item may contain multiple comma separated options. The file system is always
    mounted read-only, so "ro" is added if it wasn't specified and "rw" is rejected
    outright rather than silently ignored.
    """
    parsed: List[MountOption] = []

    for item in options:
        for opt in item.split(","):
            opt = opt.strip()

            if not opt:
                continue
            elif opt == "rw":
                raise InvalidConfigurationError("githubfs must be mounted read-only")

            try:
                mount_option = MountOption(opt)
            except ValueError:
                raise InvalidConfigurationError(f"unknown mount option ({opt})")

            if mount_option not in parsed:
                parsed.append(mount_option)

    if MountOption.RO not in parsed:
        parsed.append(MountOption.RO)

    return parsed
