"""
Field Resolver - resolves the network-dependent transaction fields.

Queries nonce, gas price and gas limit concurrently, each under its own
deadline, and returns them as a single snapshot.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Type

import structlog

from txsigner.config import SignerConfig, get_config
from txsigner.node.interface import NodeInterface, NodeTimeout
from txsigner.tx.types import ResolvedFields

logger = structlog.get_logger(__name__)


class FieldResolutionTimeout(TimeoutError):
    """Raised when a field query exceeds its deadline."""

    operation: str = "field"

    def __init__(self, timeout: float):
        super().__init__(f"Timed out after {timeout}s waiting for {self.operation}")
        self.timeout = timeout


class NonceTimeout(FieldResolutionTimeout):
    operation = "nonce"


class GasPriceTimeout(FieldResolutionTimeout):
    operation = "gas_price"


class GasLimitTimeout(FieldResolutionTimeout):
    operation = "gas_limit"


class FieldResolver:
    """
    Resolves nonce, gas price and gas limit for a transaction.

    The three queries are issued together and share no state. The first
    failure (timeout or transport error) fails the whole resolution; the
    remaining queries are not awaited any further and nothing is retried.
    """

    def __init__(
        self,
        node: NodeInterface,
        timeout: Optional[float] = None,
        config: Optional[SignerConfig] = None,
    ):
        """
        Initialize the field resolver.

        Args:
            node: Node interface used for the queries
            timeout: Per-query deadline in seconds (from config if not provided)
            config: Signer configuration
        """
        self.node = node
        self.config = config or get_config()
        self.timeout = timeout if timeout is not None else self.config.request_timeout_seconds

    async def _with_deadline(
        self,
        awaitable: Awaitable[Any],
        timeout_error: Type[FieldResolutionTimeout],
    ) -> Any:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except (asyncio.TimeoutError, NodeTimeout):
            # A node-side client timeout counts against the same field deadline
            raise timeout_error(self.timeout) from None

    async def resolve(
        self,
        address: str,
        gas_limit: Optional[int] = None,
        estimate: Optional[Callable[[], Awaitable[int]]] = None,
    ) -> ResolvedFields:
        """
        Resolve the network-dependent fields for a sender.

        Args:
            address: Sender address (nonce owner)
            gas_limit: Explicit gas limit; skips gas estimation when given
            estimate: Zero-argument callable producing the gas estimate

        Returns:
            Resolved nonce, gas price and gas limit

        Raises:
            NonceTimeout, GasPriceTimeout, GasLimitTimeout: On query deadline expiry
            TransportError: If a query fails
        """
        if gas_limit is None and estimate is None:
            raise ValueError("Either gas_limit or an estimate callable is required")

        calls: List[Awaitable[Any]] = [
            self._with_deadline(self.node.get_transaction_count(address), NonceTimeout),
            self._with_deadline(self.node.get_gas_price(), GasPriceTimeout),
        ]
        if gas_limit is None:
            calls.append(self._with_deadline(estimate(), GasLimitTimeout))

        try:
            results = await asyncio.gather(*calls)
        except Exception as e:
            logger.warning(
                "field_resolution_failed",
                address=address[:10] + "...",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        nonce, gas_price = results[0], results[1]
        resolved = ResolvedFields(
            nonce=nonce,
            gas_price=gas_price,
            gas_limit=results[2] if gas_limit is None else gas_limit,
        )

        logger.debug(
            "fields_resolved",
            address=address[:10] + "...",
            nonce=resolved.nonce,
            gas_price=resolved.gas_price,
            gas_limit=resolved.gas_limit,
            estimated=gas_limit is None,
        )
        return resolved

    async def resolve_for_transfer(
        self,
        sender: str,
        to: str,
        value: int,
        data: bytes = b"",
        gas_limit: Optional[int] = None,
    ) -> ResolvedFields:
        """Resolve fields for a plain transfer, estimating gas from the call itself."""
        call = {"from": sender, "to": to, "value": value, "data": data}
        return await self.resolve(
            sender,
            gas_limit=gas_limit,
            estimate=lambda: self.node.estimate_gas(call),
        )

    async def resolve_for_contract(
        self,
        sender: str,
        method: Any,
        args: Sequence[Any],
        value: int = 0,
        gas_limit: Optional[int] = None,
    ) -> ResolvedFields:
        """Resolve fields for a contract call, estimating gas through the contract method."""
        return await self.resolve(
            sender,
            gas_limit=gas_limit,
            estimate=lambda: method.estimate_gas(sender, args, value),
        )
