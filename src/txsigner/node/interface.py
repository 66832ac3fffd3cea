"""
Abstract interface for Ethereum node integration.

Defines the contract for blockchain access that all node adapters must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class NodeInterface(ABC):
    """
    Abstract interface for Ethereum node access.

    This interface defines the network queries needed to prepare a transaction:
    - Account nonce (transaction count)
    - Gas price
    - Gas estimation
    - Chain ID

    Adapters must not retry failed calls; retry policy belongs to the caller.
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the node.

        Raises:
            TransportError: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the node."""
        pass

    @abstractmethod
    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        """
        Get the number of transactions sent from an address.

        Args:
            address: Hex encoded account address
            block: Block tag to query at

        Returns:
            The account nonce
        """
        pass

    @abstractmethod
    async def get_gas_price(self) -> int:
        """
        Get the current gas price.

        Returns:
            Gas price in wei
        """
        pass

    @abstractmethod
    async def estimate_gas(self, call: Dict[str, Any]) -> int:
        """
        Estimate the gas needed to execute a call.

        Args:
            call: Call object (from, to, value, data)

        Returns:
            Estimated gas units
        """
        pass

    @abstractmethod
    async def get_chain_id(self) -> int:
        """
        Get the chain ID of the connected network.

        Returns:
            Chain ID
        """
        pass

    async def __aenter__(self) -> "NodeInterface":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()


class TransportError(Exception):
    """Raised when a node call fails for a reason other than a timeout."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class NodeTimeout(TimeoutError):
    """Raised when the node does not answer a call in time."""
    pass
