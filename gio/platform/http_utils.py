import json
import logging
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from gio.errors import (
    DispatchError,
    InvalidCredentialError,
    NetworkConnectionError,
    RequestTimeoutError,
    ServerError,
    TooManyRequestsError,
)

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    NetworkConnectionError,
    RequestTimeoutError,
    TooManyRequestsError,
    ServerError,
)


def build_retrying(retry_count: int) -> AsyncRetrying:
    """
    Retry policy of a single API call: ``retry_count`` extra attempts on
    transient failures, then the last error is raised.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(retry_count + 1),
        wait=wait_exponential_jitter(initial=0.2, max=8.0, exp_base=3, jitter=0.3),
        reraise=True,
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def extract_detail(response: httpx.Response) -> Optional[str]:
    """
    Extract error detail from HTTP response.

    Args:
        response: The HTTP response to extract detail from

    Returns:
        The extracted detail message, or None if extraction fails
    """
    try:
        data = response.json()
        if isinstance(data, dict):
            return data.get("detail") or data.get("message")
        return None
    except (json.JSONDecodeError, ValueError, AttributeError):
        return None


def parse_response(response: httpx.Response) -> Any:
    """
    Return the JSON body of a successful response, raise the matching
    ``DispatchError`` otherwise.
    """
    if response.is_success:
        return _parse_successful_response(response)

    status = response.status_code
    if status in (401, 403):
        raise InvalidCredentialError(status_code=status, reason=extract_detail(response))
    if status == 429:
        logger.warning("Rate limit exceeded")
        raise TooManyRequestsError(reason=response.text or None)
    if response.is_server_error:
        detail = extract_detail(response)
        logger.warning("Server error %s: %s", status, detail)
        raise ServerError(status_code=status, reason=detail)

    raise DispatchError(
        message=response.reason_phrase or "Client error",
        status_code=status,
        reason=extract_detail(response) or response.text or None,
    )


def _parse_successful_response(response: httpx.Response) -> Any:
    """
    Parse successful JSON response, falling back to the raw text.

    A 2xx response never raises: accepted messages must not be sent again.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except json.JSONDecodeError as e:
        logger.debug("Non JSON body in successful response: %s", e)
        return response.text
