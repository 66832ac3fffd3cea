"""
Ethereum JSON-RPC adapter for node integration.

Provides blockchain access via JSON-RPC 2.0 over HTTP.
"""

import itertools
from typing import Any, Dict, List, Optional

import httpx
import structlog

from txsigner.config import SignerConfig, get_config
from txsigner.node.interface import NodeInterface, NodeTimeout, TransportError

logger = structlog.get_logger(__name__)


def _to_quantity(value: Any) -> Any:
    """Encode an integer as a JSON-RPC quantity."""
    if isinstance(value, int):
        return hex(value)
    return value


def _from_quantity(value: Any, method: str) -> int:
    """Decode a JSON-RPC quantity into an integer."""
    if isinstance(value, str) and value.startswith(("0x", "0X")):
        try:
            return int(value, 16)
        except ValueError:
            pass
    raise TransportError(f"Malformed quantity in {method} response: {value!r}")


class JsonRpcAdapter(NodeInterface):
    """
    Ethereum JSON-RPC adapter.

    Implements the NodeInterface using standard ``eth_*`` methods.
    """

    def __init__(
        self,
        config: Optional[SignerConfig] = None,
        url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the JSON-RPC adapter.

        Args:
            config: Signer configuration. Uses global config if not provided.
            url: Endpoint URL overriding the configured one
            transport: Custom httpx transport (used by tests)
        """
        self.config = config or get_config()
        self.url = url or self.config.rpc_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)

    async def connect(self) -> None:
        """Establish connection (create HTTP client)."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            headers={"Content-Type": "application/json"},
            timeout=self.config.http_timeout_seconds,
            transport=self._transport,
        )
        logger.info("jsonrpc_connected", url=self.url)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("jsonrpc_disconnected")

    async def _request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Send a JSON-RPC request and return its result."""
        if not self._client:
            await self.connect()

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        try:
            response = await self._client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            logger.error("jsonrpc_request_timeout", method=method, error_type=type(e).__name__)
            raise NodeTimeout(f"JSON-RPC request {method} timed out: {type(e).__name__}") from e
        except httpx.HTTPError as e:
            logger.error("jsonrpc_request_error", method=method, error=str(e))
            raise TransportError(f"JSON-RPC request failed: {type(e).__name__}: {e}") from e

        if response.status_code != 200:
            logger.error(
                "jsonrpc_request_failed",
                method=method,
                status=response.status_code,
                error=response.text,
            )
            raise TransportError(f"JSON-RPC HTTP error {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError:
            raise TransportError(f"Malformed JSON-RPC response for {method}")

        if not isinstance(data, dict):
            raise TransportError(f"Malformed JSON-RPC response for {method}")

        error = data.get("error")
        if error:
            message = error.get("message", "Unknown error") if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            logger.error("jsonrpc_error", method=method, code=code, error=message)
            raise TransportError(f"{method} failed: {message}", code=code)

        if "result" not in data:
            raise TransportError(f"JSON-RPC response for {method} has no result")

        return data["result"]

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        """Get the account nonce."""
        result = await self._request("eth_getTransactionCount", [address, block])
        return _from_quantity(result, "eth_getTransactionCount")

    async def get_gas_price(self) -> int:
        """Get the current gas price."""
        result = await self._request("eth_gasPrice")
        return _from_quantity(result, "eth_gasPrice")

    async def estimate_gas(self, call: Dict[str, Any]) -> int:
        """Estimate gas for a call object."""
        params = {key: _to_quantity(value) for key, value in call.items() if value is not None}
        if isinstance(params.get("data"), (bytes, bytearray)):
            params["data"] = "0x" + params["data"].hex()

        result = await self._request("eth_estimateGas", [params])
        return _from_quantity(result, "eth_estimateGas")

    async def get_chain_id(self) -> int:
        """Get the chain ID."""
        result = await self._request("eth_chainId")
        return _from_quantity(result, "eth_chainId")
