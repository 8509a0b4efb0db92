"""
Content provider backed by the GitHub REST API.

Repositories of an owner are the collections and the repository contents API provides
directory listings and file contents:

* https://docs.github.com/en/rest/repos/repos#list-repositories-for-a-user
* https://docs.github.com/en/rest/repos/repos#list-repositories-for-the-authenticated-user
* https://docs.github.com/en/rest/repos/contents#get-repository-content

Every request is classified into one of the errors from githubfs.errors. Transient
failures (connection problems, timeouts, server errors and rate limiting) are retried
with exponential backoff before giving up. The number of requests that are in flight
at the same time is limited to stay within the API's rate limits, with additional
requests waiting for a free slot rather than failing.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from githubfs.constants import GITHUB_API_URL, GITHUB_API_VERSION, USER_AGENT
from githubfs.errors import (
    AuthFailureError,
    DecodeError,
    NotFoundError,
    RemoteError,
    TransientNetworkError,
)
from githubfs.logger import log, summarize
from .common import Collection, ContentProvider, RemoteEntry

JSON_MEDIA_TYPE = "application/vnd.github+json"
RAW_MEDIA_TYPE = "application/vnd.github.raw"


class GitHubContentProvider(ContentProvider):
    """
    Content provider for the repositories of a GitHub user or organization.

    A single provider can be used by multiple threads and will internally create a
    requests session per thread.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = 10.0,
        max_requests: int = 8,
        retries: int = 3,
        backoff: float = 0.5,
        max_backoff: float = 8.0,
        ref: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Instantiate a provider that authenticates with the (optional) token."""
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff
        self._max_backoff = max_backoff
        self._ref = ref
        self._sleep = sleep

        self._login: Optional[str] = None
        self._request_slots = threading.BoundedSemaphore(max_requests)

        self._session_pool: Dict[threading.Thread, requests.Session] = {}
        self._session_pool_lock = threading.Lock()

    #
    # Content provider interface
    #

    def list_collections(self, owner: str) -> List[Collection]:
        # The public listing of a user never includes private repositories, even when
        # authenticated as that user.
        if self._token and owner.lower() == self._authenticated_login().lower():
            url = "/user/repos"
            params: Dict[str, Any] = {"per_page": 100, "affiliation": "owner"}
        else:
            url = f"/users/{quote(owner)}/repos"
            params = {"per_page": 100, "type": "owner"}

        items = self._get_paginated(url, params)

        try:
            return [
                Collection(name=item["name"], identifier=item["full_name"])
                for item in items
            ]
        except (KeyError, TypeError) as e:
            raise DecodeError(f"malformed repository list for {owner}: {e}")

    def list_children(self, collection: str, path: str) -> List[RemoteEntry]:
        items = self._get_paginated(self._contents_url(collection, path), self._params())

        try:
            return [
                RemoteEntry(
                    name=item["name"],
                    path=item["path"],
                    kind="dir" if item["type"] == "dir" else "file",
                    size=item.get("size"),
                    content_locator=item.get("download_url"),
                )
                for item in items
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise DecodeError(f"malformed listing for {collection}:/{path}: {e}")

    def fetch_content(self, collection: str, path: str) -> Tuple[bytes, str]:
        url = self._contents_url(collection, path)
        body = self._json(self._request(url, self._params()))

        if not isinstance(body, dict) or body.get("type") not in ("file", "symlink"):
            raise DecodeError(f"expected file contents for {collection}:/{path}")

        encoding = body.get("encoding")
        content = body.get("content")

        # Files larger than 1 MB are listed without their contents and have to be
        # requested through the raw media type instead.
        if encoding == "none" or (content == "" and (body.get("size") or 0) > 0):
            response = self._request(url, self._params(), accept=RAW_MEDIA_TYPE)
            return response.content, "identity"

        if not isinstance(content, str) or not isinstance(encoding, str):
            raise DecodeError(f"missing contents for {collection}:/{path}")

        try:
            return content.encode("ascii"), encoding
        except UnicodeEncodeError as e:
            raise DecodeError(f"unexpected characters in {collection}:/{path}: {e}")

    def close(self) -> None:
        """Close the sessions of all threads."""
        with self._session_pool_lock:
            for session in self._session_pool.values():
                session.close()

            self._session_pool.clear()

    #
    # Requests
    #

    @property
    def session_count(self) -> int:
        """Return the number of sessions for this provider."""
        with self._session_pool_lock:
            return len(self._session_pool)

    def _session(self) -> requests.Session:
        """
        Return a session to be used for the current thread.

        Sessions keep connections alive, but are not guaranteed to be thread-safe, so
        every thread gets its own.
        """
        t = threading.current_thread()

        with self._session_pool_lock:
            if t not in self._session_pool:
                # Drop the sessions of threads that have finished since.
                for dead in [d for d in self._session_pool if not d.is_alive()]:
                    self._session_pool.pop(dead).close()

                session = requests.Session()
                session.headers.update(
                    {
                        "User-Agent": USER_AGENT,
                        "X-GitHub-Api-Version": GITHUB_API_VERSION,
                    }
                )

                if self._token:
                    session.headers["Authorization"] = f"Bearer {self._token}"

                self._session_pool[t] = session

            return self._session_pool[t]

    def _authenticated_login(self) -> str:
        """Return the login of the user that the token belongs to."""
        if self._login is None:
            body = self._json(self._request("/user"))

            if not isinstance(body, dict) or not isinstance(body.get("login"), str):
                raise DecodeError("malformed response for the authenticated user")

            self._login = body["login"]
            log.debug(f"authenticated as {self._login}")

        return self._login

    def _params(self) -> Optional[Dict[str, Any]]:
        return {"ref": self._ref} if self._ref else None

    @staticmethod
    def _contents_url(collection: str, path: str) -> str:
        url = f"/repos/{quote(collection)}/contents"

        if path:
            url += "/" + quote(path.strip("/"))

        return url

    def _get_paginated(self, url: str, params: Optional[Dict[str, Any]]) -> List[Any]:
        """Retrieve all pages of a list by following the Link headers."""
        items: List[Any] = []
        next_url: Optional[str] = url

        while next_url:
            response = self._request(next_url, params)
            page = self._json(response)

            if not isinstance(page, list):
                raise DecodeError(f"expected a list from {next_url}")

            items += page

            # The next link already includes the query parameters.
            next_url = response.links.get("next", {}).get("url")
            params = None

        return items

    def _request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        accept: str = JSON_MEDIA_TYPE,
    ) -> requests.Response:
        """Perform a GET request and retry transient failures with backoff."""
        attempt = 0

        while True:
            try:
                return self._request_once(url, params, accept)
            except TransientNetworkError as e:
                if attempt >= self._retries:
                    log.error(f"giving up on {url} after {attempt + 1} attempts: {e}")
                    raise

                delay = min(self._backoff * 2 ** attempt, self._max_backoff)
                log.warning(f"retrying {url} in {delay:.2f} s: {e}")

                self._sleep(delay)
                attempt += 1

    def _request_once(
        self, url: str, params: Optional[Dict[str, Any]], accept: str
    ) -> requests.Response:
        if url.startswith("/"):
            url = self._base_url + url

        session = self._session()

        with self._request_slots:
            t_call = time.time()

            try:
                response = session.get(
                    url, params=params, headers={"Accept": accept}, timeout=self._timeout
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                raise TransientNetworkError(f"request to {url} failed: {e}")
            except requests.RequestException as e:
                raise RemoteError(f"request to {url} failed: {e}")

            t_return = time.time()

        if log.isEnabledFor(logging.DEBUG):
            t_millis = round((t_return - t_call) * 1000)
            log.debug(f"github::GET {url} - {response.status_code} - {t_millis} ms")

        self._check_status(response)

        return response

    @staticmethod
    def _check_status(response: requests.Response) -> None:
        """Raise the error that corresponds to an unsuccessful response."""
        status = response.status_code

        if 200 <= status < 300:
            return

        message = (
            f"GitHub API request failed with status {status}: "
            f"{summarize(response.text)}"
        )

        if status == 404:
            log.debug(message)
            raise NotFoundError(message)

        log.error(message)

        rate_limited = response.headers.get("X-RateLimit-Remaining") == "0"

        if status == 429 or (status == 403 and rate_limited):
            raise TransientNetworkError(message)
        elif status in (401, 403):
            raise AuthFailureError(message)
        elif status >= 500:
            raise TransientNetworkError(message)
        else:
            raise RemoteError(message)

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"failed to parse JSON response from {response.url}: {e}")
