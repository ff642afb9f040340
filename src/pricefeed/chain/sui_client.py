"""Sui JSON-RPC client implementation via httpx async.

Only ``sui_getObject`` is needed: the pool's Move fields carry the current
sqrt price, so no event or transaction queries are made.
"""

import itertools

import httpx

from pricefeed.chain.client import ChainClient
from pricefeed.config import SuiSettings
from pricefeed.exceptions import PoolNotFoundError, TransientFetchError
from pricefeed.logging import get_logger

logger = get_logger(__name__)

# Object-level error codes returned inside "result" for missing objects.
_NOT_FOUND_CODES = {"notExists", "deleted", "dynamicFieldNotFound"}


class SuiClient(ChainClient):
    """Concrete Sui RPC client.

    Accepts an optional pre-built httpx.AsyncClient (tests pass one with a
    MockTransport); otherwise one is created on connect().
    """

    def __init__(
        self,
        settings: SuiSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._client = http_client
        self._request_ids = itertools.count(1)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("SuiClient not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.request_timeout)
        logger.info("sui_client_connected", rpc_url=self._settings.rpc_url)

    async def close(self) -> None:
        """Close the HTTP client. Must be called to avoid leaking connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("sui_client_closed")

    async def _call(self, method: str, params: list) -> dict:
        """Issue one JSON-RPC call and return its ``result`` member."""
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self.client.post(self._settings.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise TransientFetchError(f"{method} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransientFetchError(f"{method} failed: {e}") from e
        except ValueError as e:
            raise TransientFetchError(f"{method} returned invalid JSON: {e}") from e

        if body.get("error"):
            error = body["error"]
            raise TransientFetchError(
                f"{method} RPC error {error.get('code')}: {error.get('message')}"
            )
        return body.get("result") or {}

    async def get_object_state(self, address: str) -> dict:
        logger.debug("fetching_pool_object", address=address)
        result = await self._call(
            "sui_getObject",
            [address, {"showContent": True, "showType": True}],
        )

        error = result.get("error")
        if error:
            code = error.get("code")
            if code in _NOT_FOUND_CODES:
                raise PoolNotFoundError(f"Pool object {address} not found ({code})")
            raise TransientFetchError(f"Object error for {address}: {error}")

        content = (result.get("data") or {}).get("content")
        if not content or "fields" not in content:
            raise PoolNotFoundError(f"Pool object {address} not found or invalid")

        return content["fields"]
