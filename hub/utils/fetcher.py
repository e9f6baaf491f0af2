"""Remote resource fetcher - retrieves meta/script/style text from a URL."""

import json
import logging
from typing import Any, Optional

import aiohttp

from hub.constants import FETCH_TIMEOUT
from hub.errors import RemoteFetchError

logger = logging.getLogger(__name__)


async def fetch_text(url: str, timeout: Optional[float] = None) -> str:
    """GET ``url`` and return its body as text.

    Args:
        url: Absolute http(s) URL
        timeout: Total timeout in seconds (defaults to FETCH_TIMEOUT)

    Raises:
        RemoteFetchError: network failure, timeout, non-2xx status or
            undecodable body. Never retried.
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout or FETCH_TIMEOUT)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url) as response:
                if response.status >= 300:
                    logger.error(f"[Fetcher] HTTP {response.status} from {url}")
                    raise RemoteFetchError(f"HTTP {response.status}")
                text = await response.text()
    except RemoteFetchError:
        raise
    except Exception as e:
        logger.error(f"[Fetcher] Request error for {url}: {e}")
        raise RemoteFetchError(str(e)) from e

    logger.debug(f"[Fetcher] Fetched {len(text)} chars from {url}")
    return text


async def fetch_json(url: str, timeout: Optional[float] = None) -> Any:
    """GET ``url`` and parse its body as JSON (content type is not checked)."""
    text = await fetch_text(url, timeout)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"[Fetcher] Invalid JSON from {url}: {e}")
        raise RemoteFetchError("Invalid JSON") from e
