"""
Low-level HTTP request library for the remote log store.
All remote operations are plain GET requests with query parameters, which
keeps browsers from sending a CORS preflight to the spreadsheet endpoint.
"""
import asyncio
import json
import logging

import aiohttp

from .const import REQUEST_ATTEMPTS, REQUEST_TIMEOUT
from .errors import NetworkError, RemoteError

_LOGGER = logging.getLogger(__name__)


async def check_availability(url: str, timeout: int = REQUEST_TIMEOUT) -> bool:
    """
    Check if the remote store is reachable.

    Any HTTP answer below 500 counts as reachable; the endpoint itself decides
    what to do with a request without a mode.
    """
    try:
        timeout_config = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=timeout_config) as session:
            async with session.get(url) as response:
                if response.status >= 500:
                    _LOGGER.debug("Remote store answered probe with status %s", response.status)
                    return False
                return True
    except (asyncio.TimeoutError, TimeoutError):
        _LOGGER.debug("Timeout while probing %s", url)
        return False
    except aiohttp.ClientError as e:
        _LOGGER.debug("Remote store not reachable: %s", e)
        return False


async def make_request(
    url: str,
    params: dict | None = None,
    timeout: int = REQUEST_TIMEOUT,
    max_attempts: int = REQUEST_ATTEMPTS,
):
    """
    Make a GET request with automatic retry on timeout.

    Args:
        url: Endpoint URL
        params: URL query parameters (optional)
        timeout: Base timeout in seconds (multiplied by attempt number for each retry)
        max_attempts: Maximum number of attempts

    Returns:
        Parsed JSON response

    Raises:
        NetworkError: If the request could not complete (timeouts on every
            attempt, DNS failure, refused connection, ...)
        RemoteError: For non-2xx responses and for ok:false bodies
    """
    for attempt in range(max_attempts):
        try:
            timeout_config = aiohttp.ClientTimeout(total=timeout * (attempt + 1))
            async with aiohttp.ClientSession(timeout=timeout_config) as session:
                _LOGGER.debug("GET %s params=%s (attempt %s)", url, params, attempt + 1)
                async with session.get(url, params=params) as response:
                    return await _process_response(response, url)

        except (asyncio.TimeoutError, TimeoutError) as e:
            if attempt < max_attempts - 1:
                continue
            _LOGGER.warning("Timeout on request to %s after %s attempts", url, max_attempts)
            raise NetworkError(f"Timeout after {max_attempts} attempts") from e

        except aiohttp.ClientError as e:
            # Connection level failures are not retried here; the offline queue retries later
            raise NetworkError(str(e) or type(e).__name__) from e

    raise NetworkError("No request attempts were made")


async def _process_response(response, url: str):
    """
    Process HTTP response and extract JSON data.

    Raises:
        RemoteError: non-2xx status, non-JSON or malformed body, or a JSON body reporting an error
    """
    content_type = response.headers.get("Content-Type", "")

    if not 200 <= response.status < 300:
        text = await response.text()
        _LOGGER.warning(
            "Remote store returned status %s from %s: %s", response.status, url, text[:200]
        )
        raise RemoteError(response.status, text)

    if "application/json" not in content_type:
        text = await response.text()
        _LOGGER.error(
            "Unexpected content type in successful response: %s from %s", content_type, url
        )
        raise RemoteError(response.status, f"Expected JSON but got {content_type}: {text[:200]}")

    try:
        body = await response.json()
    except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
        text = await response.text()
        _LOGGER.error("Malformed JSON in response from %s: %s", url, e)
        raise RemoteError(response.status, f"Malformed JSON: {text[:200]}") from e

    if isinstance(body, dict) and (
        body.get("ok") is False or ("error" in body and "ok" not in body)
    ):
        raise RemoteError(response.status, str(body.get("error") or body))
    return body

