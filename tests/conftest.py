"""
Pytest configuration and shared fixtures for the test suite.
"""

import asyncio
from collections import Counter
from typing import Any, Dict, List

import pytest

from txsigner.api import TransactionService
from txsigner.config import SignerConfig
from txsigner.node.interface import NodeInterface
from txsigner.tx.builder import RawTransactionBuilder
from txsigner.tx.resolver import FieldResolver


# ============================================================================
# Test Data
# ============================================================================

SENDER = "0x" + "a" * 39 + "1"
RECIPIENT = "0x" + "b" * 39 + "2"
TOKEN_RECIPIENT = "0x" + "c" * 39 + "3"
CONTRACT = "0x" + "d" * 39 + "4"

# Key and address from the EIP-155 example transaction
EIP155_PRIVATE_KEY = "0x" + "46" * 32
EIP155_ADDRESS = "0x9d8A62f656a8d1615C1294fd71e9CFb3E4855A4F"

# Key and address from the eth-account documentation
DOC_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
DOC_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> SignerConfig:
    """Create a test configuration."""
    return SignerConfig(
        rpc_url="http://node.test:8545",
        request_timeout_seconds=1.0,
        http_timeout_seconds=5.0,
        chain_id=None,
        log_level="DEBUG",
    )


# ============================================================================
# Mock Node Interface
# ============================================================================

class MockNode(NodeInterface):
    """Mock node interface for testing."""

    def __init__(
        self,
        nonce: int = 5,
        gas_price: int = 20,
        gas_estimate: int = 21000,
        chain_id: int = 1,
    ):
        self.nonce = nonce
        self.gas_price = gas_price
        self.gas_estimate = gas_estimate
        self.chain_id = chain_id
        self.delays: Dict[str, float] = {}
        self.errors: Dict[str, Exception] = {}
        self.calls: Counter = Counter()
        self.estimate_requests: List[Dict[str, Any]] = []
        self._connected = False

    async def _answer(self, operation: str, value: Any) -> Any:
        self.calls[operation] += 1
        if operation in self.delays:
            await asyncio.sleep(self.delays[operation])
        if operation in self.errors:
            raise self.errors[operation]
        return value

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return await self._answer("nonce", self.nonce)

    async def get_gas_price(self) -> int:
        return await self._answer("gas_price", self.gas_price)

    async def estimate_gas(self, call: Dict[str, Any]) -> int:
        self.estimate_requests.append(call)
        return await self._answer("gas_limit", self.gas_estimate)

    async def get_chain_id(self) -> int:
        return await self._answer("chain_id", self.chain_id)


@pytest.fixture
def mock_node() -> MockNode:
    """Create a mock node interface."""
    return MockNode()


# ============================================================================
# Component Fixtures
# ============================================================================

@pytest.fixture
def resolver(mock_node, test_config) -> FieldResolver:
    """Create a field resolver on the mock node."""
    return FieldResolver(mock_node, config=test_config)


@pytest.fixture
def builder(resolver) -> RawTransactionBuilder:
    """Create a transaction builder without a chain ID."""
    return RawTransactionBuilder(resolver)


@pytest.fixture
def service(mock_node, test_config) -> TransactionService:
    """Create a transaction service on the mock node."""
    return TransactionService(mock_node, test_config)
