import json
import logging
from typing import Any, Optional

import httpx

from ..core.config import Settings
from ..core.exceptions import HttpError
from .waits import Action, RetryPolicy

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Async HTTP client for API calls made from steps.

    Requests and responses are logged through httpx event hooks. Non-2xx
    responses raise HttpError and transport failures propagate unchanged;
    the client only annotates errors through logging, it never swallows them.
    """

    def __init__(self, settings: Settings, base_url: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.api_url,
            timeout=settings.timeout / 1000,
            headers={'Content-Type': 'application/json'},
            event_hooks={
                'request': [self._log_request],
                'response': [self._log_response],
            },
            transport=transport,
        )

    async def _log_request(self, request: httpx.Request) -> None:
        logger.info(f"[API] {request.method} {request.url}")

    async def _log_response(self, response: httpx.Response) -> None:
        if response.is_success:
            logger.info(f"[API] Response: {response.status_code} {response.reason_phrase}")
            return

        # Body must be read inside the hook before it can be logged
        await response.aread()
        logger.error(f"[API] Error {response.status_code}: {_body(response)}")

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[API] Error: {e}")
            raise

        if not response.is_success:
            raise HttpError(
                f"{method} {url} failed with status {response.status_code}",
                status_code=response.status_code,
                body=_body(response),
            )
        return response

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request('GET', url, **kwargs)

    async def post(self, url: str, data: Any = None, **kwargs) -> httpx.Response:
        return await self.request('POST', url, json=data, **kwargs)

    async def put(self, url: str, data: Any = None, **kwargs) -> httpx.Response:
        return await self.request('PUT', url, json=data, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        return await self.request('DELETE', url, **kwargs)

    async def retry_request(self, fn: Action, max_attempts: int = 3, delay: int = 1000) -> Any:
        """Retry fn with a fixed delay (ms), re-raising the last failure"""
        return await RetryPolicy(max_attempts=max_attempts, delay=delay).run(fn, label="API Retry")

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text
