"""Tiendanube API client utilities: one request, retried on 429."""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, NamedTuple, Optional

import httpx

from catalog_images.constants.tiendanube import TNDefaults, TNStatus
from catalog_images.core.exceptions import NetworkError, RateLimitExhausted, RequestFailed

__logger__ = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class RetryKind(str, Enum):
    SUCCEED = "succeed"
    RETRY_AFTER = "retry_after"
    FAIL_IMMEDIATELY = "fail_immediately"
    EXHAUSTED = "exhausted"


class RetryDecision(NamedTuple):
    kind: RetryKind
    delay: float = 0.0
    next_delay: float = 0.0


def next_action(
    attempt: int,
    status_code: int,
    delay: float,
    max_retries: int = TNDefaults.MAX_RETRIES,
    multiplier: float = TNDefaults.RETRY_MULTIPLIER
) -> RetryDecision:
    """
    Decide what to do after one response.

    Args:
        attempt: 1-based number of the attempt that produced ``status_code``
        status_code: HTTP status of that response
        delay: Current backoff delay in seconds
        max_retries: Total attempts allowed
        multiplier: Backoff growth factor

    Returns:
        RetryDecision; for RETRY_AFTER, ``delay`` is the wait before the next
        attempt and ``next_delay`` the one after that
    """
    if 200 <= status_code < 300:
        return RetryDecision(RetryKind.SUCCEED)
    if status_code != TNStatus.TOO_MANY_REQUESTS:
        return RetryDecision(RetryKind.FAIL_IMMEDIATELY)
    if attempt >= max_retries:
        return RetryDecision(RetryKind.EXHAUSTED)
    return RetryDecision(RetryKind.RETRY_AFTER, delay=delay, next_delay=delay * multiplier)


def parse_body(response: httpx.Response) -> Any:
    """Parsed JSON body, ``None`` when empty, ``{}`` when unparseable."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return {}


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    json: Optional[Any] = None,
    max_retries: int = TNDefaults.MAX_RETRIES,
    initial_delay: float = TNDefaults.RETRY_INITIAL_DELAY,
    sleep: Sleep = asyncio.sleep
) -> Any:
    """
    Execute a request against the Tiendanube API, backing off on 429.

    Only rate-limit responses are retried; any other error status fails on
    the spot.

    Args:
        client: Configured Tiendanube client
        method: HTTP method (GET, POST, PUT, DELETE)
        url: Path relative to the client's base URL
        json: Optional JSON body
        max_retries: Total attempts allowed
        initial_delay: First backoff delay in seconds, doubled after each 429
        sleep: Awaitable sleep, injectable for tests

    Returns:
        Parsed JSON body of the successful response (None if empty)

    Raises:
        RequestFailed: Non-429 error response
        RateLimitExhausted: Every attempt was rate limited
        NetworkError: Transport-level failure
    """
    delay = initial_delay
    attempt = 0
    while True:
        attempt += 1
        try:
            response = await client.request(method, url, json=json)
        except httpx.TransportError as e:
            raise NetworkError(url, str(e) or e.__class__.__name__) from e

        decision = next_action(attempt, response.status_code, delay, max_retries)
        if decision.kind is RetryKind.SUCCEED:
            return parse_body(response)

        if decision.kind is RetryKind.RETRY_AFTER:
            __logger__.warning(
                f"429 received on {method} {url}, retrying in {decision.delay:.1f}s "
                f"(attempt {attempt}/{max_retries})"
            )
            await sleep(decision.delay)
            delay = decision.next_delay
            continue

        if decision.kind is RetryKind.EXHAUSTED:
            __logger__.error(f"Failed after {attempt} attempts: {method} {url}")
            raise RateLimitExhausted(url, attempt)

        body = parse_body(response)
        __logger__.warning(f"Tiendanube {method} error on {url}: {response.status_code} - {body}")
        raise RequestFailed(response.status_code, body, url=url)
