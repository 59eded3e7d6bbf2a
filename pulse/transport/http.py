"""
HTTP transport for the event store.

Sends one serialized event per request to the store endpoint of the
configured project, reusing a single pooled connection.
"""

import logging
import threading
from typing import Dict, Optional

import httpx

from pulse.config import Config
from pulse.errors import Unreachable
from pulse.meta import get_auth_header, get_meta_http_headers

from .base import Transport
from .http_utils import check_delivery_response

logger = logging.getLogger(__name__)


class HttpTransport(Transport):
    """
    Synchronous transport posting events over HTTPS.

    Args:
        config: The active client configuration.
        http_client: Optional pre-built client, mostly useful for tests.
    """

    def __init__(self, config: Config, http_client: Optional[httpx.Client] = None):
        self.url = config.store_url
        self._public_key = config.public_key
        self._timeout = config.request_timeout
        self._http_client = http_client
        self._lock = threading.Lock()
        self._headers = self._get_headers()

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "X-Sentry-Auth": get_auth_header(self._public_key),
        }
        headers.update(get_meta_http_headers())
        return headers

    def _get_client(self) -> httpx.Client:
        with self._lock:
            if self._http_client is None:
                self._http_client = httpx.Client(
                    headers=self._headers,
                    timeout=httpx.Timeout(self._timeout),
                )
                logger.debug("HTTP client created for %s", self.url)
            return self._http_client

    def send(self, body: bytes, timeout: float) -> None:
        client = self._get_client()

        try:
            response = client.post(
                self.url,
                content=body,
                headers=self._headers,
                timeout=httpx.Timeout(timeout),
            )
        except httpx.TimeoutException as e:
            raise Unreachable(f"timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise Unreachable(str(e) or e.__class__.__name__) from e

        check_delivery_response(response)

    def close(self) -> None:
        with self._lock:
            if self._http_client is not None:
                self._http_client.close()
                self._http_client = None
                logger.debug("HTTP client closed")
