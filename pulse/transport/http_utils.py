import json
import logging
from email.utils import parsedate_to_datetime
from datetime import datetime, timezone
from typing import Optional

import httpx

from pulse.errors import Rejected

logger = logging.getLogger(__name__)


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
        return data.get("detail")
    except (json.JSONDecodeError, ValueError, AttributeError):
        return None


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    """
    Read the Retry-After header as seconds.

    Both forms are accepted: a number of seconds or an HTTP date.
    """
    value = response.headers.get("Retry-After")
    if not value:
        return None

    try:
        return max(0.0, float(value))
    except ValueError:
        pass

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None

    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def check_delivery_response(response: httpx.Response) -> None:
    """
    Raise Rejected for any non-2xx response.
    """
    if response.is_success:
        return

    detail = extract_detail(response)
    logger.debug(
        "Event rejected with status %s: %s", response.status_code, detail or "-"
    )
    raise Rejected(
        status=response.status_code, retry_after=parse_retry_after(response)
    )
