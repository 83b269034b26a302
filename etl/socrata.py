# WORKFLOW: Paginated Socrata API client for the data.ct.gov datasets.
# Used by: Pipeline fetch step for every dataset
# Functions:
# 1. fetch_socrata() - Cache check -> paginated GET -> combine -> cache
# 2. load_cached() - Read a dataset's cache regardless of age (--no-fetch)
#
# Fetch flow: fresh cache? -> return cached records
#             else GET $limit/$offset pages until a short page -> write cache -> return records

"""
Paginated Socrata API client for the data.ct.gov datasets.
"""

import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional

import httpx

from etl.cache import CacheError, check_cache_file, write_cache_file

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5000
DEFAULT_TIMEOUT = 60.0


class FetchError(RuntimeError):
    """Raised when a Socrata endpoint cannot be fetched or decoded."""


@dataclass(frozen=True)
class SocrataConfig:
    """Socrata endpoint settings for one dataset."""

    url: str
    cache_filename: str
    order_by: str = ""  # required for stable pagination
    batch_size: int = 0  # 0 uses DEFAULT_BATCH_SIZE

    @property
    def page_size(self) -> int:
        return self.batch_size or DEFAULT_BATCH_SIZE


def _decode_records(data: bytes, source: str) -> List[Dict[str, Any]]:
    records = json.loads(data)
    if not isinstance(records, list):
        raise ValueError(f"expected a JSON array from {source}, got {type(records).__name__}")
    return records


def load_cached(config: SocrataConfig, max_age: Optional[timedelta] = None) -> List[Dict[str, Any]]:
    """
    Load a dataset from its cache file.

    Args:
        config: Dataset endpoint configuration
        max_age: Maximum cache age; None accepts any age

    Returns:
        List of raw records

    Raises:
        CacheError: If the cache is missing, stale or not a JSON array
    """
    data = check_cache_file(config.cache_filename, max_age)
    try:
        return _decode_records(data, config.cache_filename)
    except ValueError as e:
        raise CacheError(f"Failed to parse cached data {config.cache_filename}: {e}") from e


def fetch_socrata(
    config: SocrataConfig,
    app_token: str = "",
    max_cache_age: Optional[timedelta] = None,
    client: Optional[httpx.Client] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[Dict[str, Any]]:
    """
    Fetch all records of a Socrata dataset, using the cache when fresh.

    Args:
        config: Dataset endpoint configuration
        app_token: Optional Socrata app token (raises rate limits)
        max_cache_age: Maximum cache age; None or zero accepts any age
        client: Optional httpx client (a new one is created and closed otherwise)
        timeout: Request timeout in seconds for a newly created client

    Returns:
        List of raw records

    Raises:
        FetchError: On invalid URL, transport failure, non-200 status or bad payload
    """
    try:
        cached = load_cached(config, max_cache_age)
        logger.info(f"Loaded {len(cached)} records from cache {config.cache_filename}")
        return cached
    except CacheError as e:
        logger.debug(f"Cache miss for {config.cache_filename}: {e}")

    try:
        url = httpx.URL(config.url)
    except httpx.InvalidURL as e:
        raise FetchError(f"Failed to parse URL {config.url!r}: {e}") from e
    if url.scheme not in ("http", "https"):
        raise FetchError(f"Failed to parse URL {config.url!r}: unsupported scheme")

    page_size = config.page_size
    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=timeout)

    records: List[Dict[str, Any]] = []
    offset = 0
    try:
        while True:
            params = {"$limit": str(page_size), "$offset": str(offset)}
            if config.order_by:
                params["$order"] = config.order_by
            if app_token:
                params["$$app_token"] = app_token

            try:
                response = client.get(url, params=params)
            except httpx.HTTPError as e:
                raise FetchError(f"HTTP request failed: {e}") from e

            if response.status_code != 200:
                raise FetchError(
                    f"HTTP {response.status_code} {response.reason_phrase} {response.text}"
                )

            try:
                batch = _decode_records(response.content, str(url))
            except ValueError as e:
                raise FetchError(f"Failed to unmarshal result: {e}") from e

            records.extend(batch)
            logger.debug(f"Fetched {len(batch)} records from {url} at offset {offset}")

            if len(batch) < page_size:
                break
            offset += page_size
    finally:
        if owns_client:
            client.close()

    logger.info(f"Fetched {len(records)} records from {url}")

    try:
        write_cache_file(config.cache_filename, json.dumps(records).encode("utf-8"))
    except OSError as e:
        logger.warning(f"Failed to write cache {config.cache_filename}: {e}")

    return records
