"""
Module implementing the command-line interface and invoking the main logic of githubfs.

githubfs lists the repositories of a GitHub user or organization and mounts them as
directories of a read-only file system. Directories and files are fetched from the
GitHub API as they are accessed.
"""

import logging
import signal
import sys
from typing import List, NoReturn, Optional

from githubfs.args import Arguments
from githubfs.config import Config
import githubfs.constants as constants
from githubfs.errors import AuthFailureError, InvalidConfigurationError
from githubfs.logger import log
import githubfs.operations as operations


def main(arguments: Optional[List[str]] = None) -> NoReturn:
    """
    Mount the file system with the given arguments.

    Defaults to parsing command-line arguments from sys.argv if none are specified.
    """
    # Parse command-line arguments.
    args = Arguments.parse(arguments)

    # Configure debug logging.
    if args.debug:
        log.setLevel(logging.DEBUG)
    else:
        log.setLevel(logging.INFO)

    config = Config.load(args.config)

    try:
        exit_code = operations.MountOperations(args, config).run()
    except KeyboardInterrupt:
        exit_code = 128 + signal.SIGINT
    except InvalidConfigurationError as e:
        log.error(f"invalid configuration: {e}")
        exit_code = constants.GITHUBFS_ERROR_CODE
    except AuthFailureError as e:
        log.error(f"credentials were rejected: {e}")
        exit_code = constants.GITHUBFS_ERROR_CODE
    except Exception as e:
        log.error(f"failed to mount file system: {e}")
        exit_code = constants.GITHUBFS_ERROR_CODE

    sys.exit(exit_code)
