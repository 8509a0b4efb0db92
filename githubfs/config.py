"""Module for configuration variables with defaults that are overridable by a file."""

from __future__ import annotations

from configparser import ConfigParser, SectionProxy
from dataclasses import dataclass, field
from typing import Optional

from githubfs.constants import GITHUB_API_URL
from githubfs.logger import log


@dataclass
class CacheConfig:
    """Configuration variables related to metadata and contents caching."""

    # Seconds before a cached directory listing is fetched again.
    directory_ttl: float = 45.0

    # Seconds the kernel may cache lookups and attributes by itself.
    entry_timeout: float = 1.0
    attr_timeout: float = 1.0

    # Seconds that fetched file contents are kept around for subsequent reads.
    content_window: float = 5.0
    max_contents: int = 64

    @staticmethod
    def load(section: SectionProxy) -> CacheConfig:
        """Load overridden variables from a section within a config file."""
        config = CacheConfig()

        config.directory_ttl = section.getfloat(
            "directory_ttl", fallback=config.directory_ttl
        )
        config.entry_timeout = section.getfloat(
            "entry_timeout", fallback=config.entry_timeout
        )
        config.attr_timeout = section.getfloat(
            "attr_timeout", fallback=config.attr_timeout
        )
        config.content_window = section.getfloat(
            "content_window", fallback=config.content_window
        )
        config.max_contents = section.getint("max_contents", fallback=config.max_contents)

        return config


@dataclass
class ApiConfig:
    """Configuration variables related to the GitHub API."""

    url: str = GITHUB_API_URL
    timeout: float = 10.0

    # Maximum number of requests in flight at the same time.
    max_requests: int = 8

    retries: int = 3
    backoff: float = 0.5
    max_backoff: float = 8.0

    # Branch, tag or commit to mount instead of each repository's default branch.
    ref: Optional[str] = None

    @staticmethod
    def load(section: SectionProxy) -> ApiConfig:
        """Load overridden variables from a section within a config file."""
        config = ApiConfig()

        config.url = section.get("url", fallback=config.url)
        config.timeout = section.getfloat("timeout", fallback=config.timeout)
        config.max_requests = section.getint(
            "max_requests", fallback=config.max_requests
        )
        config.retries = section.getint("retries", fallback=config.retries)
        config.backoff = section.getfloat("backoff", fallback=config.backoff)
        config.max_backoff = section.getfloat("max_backoff", fallback=config.max_backoff)
        config.ref = section.get("ref", fallback=config.ref)

        return config


@dataclass
class Config:
    """Configuration variables."""

    cache: CacheConfig = field(default_factory=CacheConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    @staticmethod
    def load(filename: str) -> Config:
        """Load overridden configuration variables from a config file."""
        parser = ConfigParser()

        config = Config()

        try:
            with open(filename, "r") as f:
                parser.read_string(f.read(), filename)

            if "cache" in parser:
                config.cache = CacheConfig.load(parser["cache"])

            if "api" in parser:
                config.api = ApiConfig.load(parser["api"])
        except FileNotFoundError:
            log.info(f"no config file at {filename}")
        except Exception as e:
            # An unreadable config file is not considered a fatal error since we can
            # fall back to defaults.
            log.error(f"failed to read config file {filename}: {e}")
        else:
            log.info(f"loaded config: {config}")

        return config
