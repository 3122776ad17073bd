"""
Image Loader - read-through population of the image tiers.

Lookup order for a URI:
    1. memory tier (decoded, cheap)
    2. disk tier (raw bytes, decoded on read, promoted to memory)
    3. remote fetch (saved to disk, decoded, stored in memory)

The fetch callable is the only thing that talks to the network; the cache
never initiates a fetch on its own.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import requests

from .cache import WebApiCache
from .retry_helper import FetchError, RetryableFetchError, retry_with_backoff

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], bytes]

DEFAULT_TIMEOUT = 10.0


def http_fetcher(
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_retries: int = 2,
    initial_delay: float = 1.0,
) -> Fetcher:
    """
    Build a fetch callable that GETs a URL and returns the body.

    Timeouts, connection errors, 429 and 5xx responses are retried with
    backoff; other 4xx responses fail immediately.
    """
    session = session or requests.Session()

    @retry_with_backoff(max_retries=max_retries, initial_delay=initial_delay)
    def fetch(url: str) -> bytes:
        try:
            response = session.get(url, timeout=timeout)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            raise RetryableFetchError(f"{url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"{url}: {e}") from e

        if response.status_code == 429:
            raise RetryableFetchError(f"{url}: rate limited")
        if response.status_code >= 500:
            raise RetryableFetchError(f"{url}: server returned {response.status_code}")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise FetchError(f"{url}: {e}") from e
        return response.content

    return fetch


class ImageLoader:
    """Resolve image URIs through the cache, fetching on a full miss."""

    def __init__(self, cache: WebApiCache, fetch: Fetcher):
        self.cache = cache
        self.fetch = fetch

    def load(self, uri: str) -> Optional[Any]:
        """Return the decoded image for ``uri``, or None if unavailable."""
        image = self.cache.get_image(uri)
        if image is not None:
            return image

        image = self.cache.get_image_from_disk(uri)
        if image is not None:
            self.cache.set_image(uri, image)
            return image

        try:
            data = self.fetch(uri)
        except FetchError as e:
            logger.warning("Image fetch failed for %s: %s", uri, e)
            return None

        try:
            image = self.cache.decoder(data)
        except Exception as e:
            logger.warning("Fetched image for %s could not be decoded: %s", uri, e)
            image = None
        if image is None:
            # Do not persist bytes that would only decode to a miss later
            return None

        self.cache.save_image_to_disk(uri, data)
        self.cache.set_image(uri, image)
        return image

    def load_payload(self, bucket: str, key: str, url: str) -> Optional[bytes]:
        """Read-through for a generic bucket: disk first, then ``url``."""
        handle = self.cache.get(bucket, key)
        if handle is not None:
            with handle:
                return handle.read()

        try:
            data = self.fetch(url)
        except FetchError as e:
            logger.warning("Fetch failed for %s/%s: %s", bucket, key, e)
            return None
        self.cache.set(bucket, key, data)
        return data
