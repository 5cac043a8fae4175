"""
HTTP transport - async request primitive over a requests.Session

Blocking requests calls run in a worker thread so the event loop stays free
while waiting on the provider.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import requests

from flight_search.core.exceptions import ApiError, HTTPStatusError, NetworkError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """What the pipeline needs from an HTTP layer"""

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        form: Optional[Dict[str, str]] = None
    ) -> Any:
        ...


class RequestsTransport:
    """
    Transport backed by requests

    Raises:
        HTTPStatusError: For any non-2xx response, with status and body
        NetworkError: For connection failures and timeouts
        ApiError: When a 2xx body is not valid JSON
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def _send(self, method, url, headers, query, json, form) -> requests.Response:
        return self._session.request(
            method,
            url,
            headers=headers,
            params=query,
            json=json,
            data=form,
            timeout=self.timeout
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        query: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        form: Optional[Dict[str, str]] = None
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        if query:
            query = {key: value for key, value in query.items() if value is not None}

        try:
            response = await asyncio.to_thread(
                self._send, method, url, headers, query, json, form
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise NetworkError(f"Request failed: {str(e)}", details=url)

        if not response.ok:
            logger.error(f"{method} {path} returned {response.status_code}")
            raise HTTPStatusError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError:
            raise ApiError(
                f"Invalid JSON in response from {path}",
                details=response.text[:500],
                status=response.status_code
            )

    def close(self) -> None:
        self._session.close()
