"""
Test suite for raw transaction construction.

Tests assembly of transfers and contract calls and fixed-width checks.
"""

import pytest

from txsigner.contract.abi import ContractMethod, EncodingError
from txsigner.contract.erc20 import erc20
from txsigner.node.interface import TransportError
from txsigner.tx.builder import NonPayableValueError, RawTransactionBuilder
from txsigner.tx.resolver import FieldResolver, GasLimitTimeout, NonceTimeout
from txsigner.tx.types import (
    RawTransaction,
    ResolvedFields,
    TransactionBuildError,
    TransactionOverflowError,
    to_uint,
)

from conftest import CONTRACT, RECIPIENT, SENDER, TOKEN_RECIPIENT


FIELDS = ResolvedFields(nonce=5, gas_price=20, gas_limit=21000)


# ============================================================================
# Test Assembly
# ============================================================================

class TestAssemble:
    """Tests for the pure assembly step."""

    def test_assemble_transfer(self):
        record = RawTransactionBuilder.assemble(RECIPIENT, 1000, b"", FIELDS)

        assert record.to.lower() == RECIPIENT
        assert record.value == 1000
        assert record.data == b""
        assert record.nonce == 5
        assert record.gas_price == 20
        assert record.gas_limit == 21000
        assert record.chain_id is None

    def test_assemble_normalizes_hex_quantities(self):
        fields = ResolvedFields(nonce="0x5", gas_price="0x14", gas_limit="0x5208")

        record = RawTransactionBuilder.assemble(RECIPIENT, "0x3e8", b"", fields)

        assert (record.value, record.nonce, record.gas_price, record.gas_limit) == (
            1000, 5, 20, 21000
        )

    def test_record_is_immutable(self):
        record = RawTransactionBuilder.assemble(RECIPIENT, 1000, b"", FIELDS)

        with pytest.raises(AttributeError):
            record.nonce = 6

    def test_value_overflow(self):
        with pytest.raises(TransactionOverflowError) as exc_info:
            RawTransactionBuilder.assemble(RECIPIENT, 2**256, b"", FIELDS)

        assert exc_info.value.field_name == "value"
        assert isinstance(exc_info.value, OverflowError)

    def test_nonce_overflow(self):
        fields = ResolvedFields(nonce=2**64, gas_price=20, gas_limit=21000)

        with pytest.raises(TransactionOverflowError):
            RawTransactionBuilder.assemble(RECIPIENT, 0, b"", fields)

    def test_negative_value_is_rejected(self):
        with pytest.raises(TransactionOverflowError):
            RawTransactionBuilder.assemble(RECIPIENT, -1, b"", FIELDS)

    def test_largest_values_are_kept_exactly(self):
        fields = ResolvedFields(nonce=2**64 - 1, gas_price=2**256 - 1, gas_limit=2**64 - 1)

        record = RawTransactionBuilder.assemble(RECIPIENT, 2**256 - 1, b"", fields)

        assert record.value == 2**256 - 1
        assert record.nonce == 2**64 - 1

    def test_invalid_recipient(self):
        with pytest.raises(TransactionBuildError):
            RawTransactionBuilder.assemble("0x1234", 0, b"", FIELDS)


class TestToUint:
    """Tests for quantity normalization."""

    def test_accepts_int_hex_and_decimal(self):
        assert to_uint(10, 8, "x") == 10
        assert to_uint("0x0a", 8, "x") == 10
        assert to_uint("10", 8, "x") == 10

    def test_rejects_garbage(self):
        with pytest.raises(TransactionBuildError):
            to_uint("ten", 8, "x")

    def test_rejects_bool(self):
        with pytest.raises(TransactionBuildError):
            to_uint(True, 8, "x")

    def test_width_boundary(self):
        assert to_uint(255, 8, "x") == 255
        with pytest.raises(TransactionOverflowError):
            to_uint(256, 8, "x")


# ============================================================================
# Test Transfers
# ============================================================================

class TestBuildTransfer:
    """Tests for building plain transfers."""

    @pytest.mark.asyncio
    async def test_transfer_scenario(self, builder):
        """Resolved fields and intent end up in the record."""
        record = await builder.build_transfer(SENDER, RECIPIENT, 1000)

        assert record == RawTransaction(
            to=RECIPIENT,
            value=1000,
            data=b"",
            nonce=5,
            gas_price=20,
            gas_limit=21000,
        )

    @pytest.mark.asyncio
    async def test_transfer_with_explicit_gas_limit(self, builder, mock_node):
        record = await builder.build_transfer(SENDER, RECIPIENT, 1000, gas_limit=30000)

        assert record.gas_limit == 30000
        assert mock_node.calls["gas_limit"] == 0

    @pytest.mark.asyncio
    async def test_transfer_stamps_chain_id(self, resolver):
        builder = RawTransactionBuilder(resolver, chain_id=1)

        record = await builder.build_transfer(SENDER, RECIPIENT, 1000)

        assert record.chain_id == 1

    @pytest.mark.asyncio
    async def test_overflowing_value_fails_before_network(self, builder, mock_node):
        with pytest.raises(TransactionOverflowError):
            await builder.build_transfer(SENDER, RECIPIENT, 2**256)

        assert sum(mock_node.calls.values()) == 0

    @pytest.mark.asyncio
    async def test_overflowing_estimate_fails(self, builder, mock_node):
        mock_node.gas_estimate = 2**64

        with pytest.raises(TransactionOverflowError):
            await builder.build_transfer(SENDER, RECIPIENT, 1)

    @pytest.mark.asyncio
    async def test_resolution_failure_produces_no_record(self, builder, mock_node):
        mock_node.errors = {"nonce": TransportError("down")}

        with pytest.raises(TransportError):
            await builder.build_transfer(SENDER, RECIPIENT, 1000)

    @pytest.mark.asyncio
    async def test_nonce_timeout_propagates(self, builder, mock_node):
        mock_node.delays = {"nonce": 5}
        builder.resolver.timeout = 0.05

        with pytest.raises(NonceTimeout):
            await builder.build_transfer(SENDER, RECIPIENT, 1000)


# ============================================================================
# Test Contract Calls
# ============================================================================

class TestBuildContractCall:
    """Tests for building contract invocations."""

    @pytest.mark.asyncio
    async def test_erc20_transfer_scenario(self, builder, mock_node):
        """Call data comes from the ABI encoder and the record targets the contract."""
        method = erc20(CONTRACT, mock_node).method("transfer")

        record = await builder.build_contract_call(
            SENDER, CONTRACT, method, [TOKEN_RECIPIENT, 500]
        )

        assert record.to.lower() == CONTRACT
        assert record.to.lower() != TOKEN_RECIPIENT
        assert record.value == 0
        assert record.data == method.encode_call([TOKEN_RECIPIENT, 500])
        assert record.data[:4].hex() == "a9059cbb"
        assert (record.nonce, record.gas_price, record.gas_limit) == (5, 20, 21000)

    @pytest.mark.asyncio
    async def test_contract_gas_estimate_targets_contract(self, builder, mock_node):
        method = ContractMethod.from_signature("transfer(address,uint256)", CONTRACT, mock_node)

        record = await builder.build_contract_call(
            SENDER, CONTRACT, method, [TOKEN_RECIPIENT, 500]
        )

        (call,) = mock_node.estimate_requests
        assert call["to"].lower() == CONTRACT
        assert call["data"] == record.data

    @pytest.mark.asyncio
    async def test_encoding_error_before_network(self, builder, mock_node):
        method = ContractMethod.from_signature("transfer(address,uint256)", CONTRACT, mock_node)

        with pytest.raises(EncodingError):
            await builder.build_contract_call(SENDER, CONTRACT, method, [TOKEN_RECIPIENT])

        assert sum(mock_node.calls.values()) == 0

    @pytest.mark.asyncio
    async def test_value_on_non_payable_method(self, builder, mock_node):
        method = erc20(CONTRACT, mock_node).method("transfer")

        with pytest.raises(NonPayableValueError):
            await builder.build_contract_call(
                SENDER, CONTRACT, method, [TOKEN_RECIPIENT, 500], value=1
            )

        assert sum(mock_node.calls.values()) == 0

    @pytest.mark.asyncio
    async def test_value_on_payable_method(self, builder, mock_node):
        method = ContractMethod.from_signature("deposit()", CONTRACT, mock_node, payable=True)

        record = await builder.build_contract_call(SENDER, CONTRACT, method, [], value=10**18)

        assert record.value == 10**18
        assert record.data.hex() == "d0e30db0"
        assert mock_node.estimate_requests[0]["value"] == 10**18

    @pytest.mark.asyncio
    async def test_contract_call_with_explicit_gas_limit(self, builder, mock_node):
        method = erc20(CONTRACT, mock_node).method("approve")

        record = await builder.build_contract_call(
            SENDER, CONTRACT, method, [TOKEN_RECIPIENT, 1], gas_limit=60000
        )

        assert record.gas_limit == 60000
        assert mock_node.calls["gas_limit"] == 0

    @pytest.mark.asyncio
    async def test_gas_estimate_timeout(self, mock_node, test_config):
        """A slow contract gas estimate fails the build with the gas limit kind."""
        mock_node.delays = {"gas_limit": 5}
        builder = RawTransactionBuilder(FieldResolver(mock_node, timeout=0.05, config=test_config))
        method = erc20(CONTRACT, mock_node).method("transfer")

        with pytest.raises(GasLimitTimeout) as exc_info:
            await builder.build_contract_call(SENDER, CONTRACT, method, [TOKEN_RECIPIENT, 500])

        assert exc_info.value.operation == "gas_limit"
        assert mock_node.calls["gas_limit"] == 1

    @pytest.mark.asyncio
    async def test_nonce_timeout(self, mock_node, test_config):
        mock_node.delays = {"nonce": 5}
        builder = RawTransactionBuilder(FieldResolver(mock_node, timeout=0.05, config=test_config))
        method = erc20(CONTRACT, mock_node).method("transfer")

        with pytest.raises(NonceTimeout):
            await builder.build_contract_call(SENDER, CONTRACT, method, [TOKEN_RECIPIENT, 500])

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, builder, mock_node):
        mock_node.errors = {"nonce": TransportError("connection refused")}
        method = erc20(CONTRACT, mock_node).method("transfer")

        with pytest.raises(TransportError, match="connection refused"):
            await builder.build_contract_call(SENDER, CONTRACT, method, [TOKEN_RECIPIENT, 500])
