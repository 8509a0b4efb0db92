"""Module defining various global constants."""

# githubfs version
VERSION = "0.1.0"

# Special exit code for when githubfs itself fails.
GITHUBFS_ERROR_CODE = 254

# Name of the FUSE file system
FILESYSTEM_NAME = "githubfs"

# Mount path used when none is specified on the command line.
DEFAULT_MOUNT_PATH = "/mnt/githubfs"

# Inode of the mount root. Allocated inodes start right after it.
ROOT_INODE = 1

# GitHub REST API
GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = f"githubfs/{VERSION}"
