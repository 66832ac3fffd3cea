"""
Transaction Builder - constructs raw transactions.

Combines caller intent (recipient, value, payload) with the fields resolved
from the network into a canonical raw transaction record.
"""

from typing import Any, Optional, Sequence, Union

import structlog

from txsigner.contract.abi import ContractMethod
from txsigner.tx.resolver import FieldResolver
from txsigner.tx.types import (
    UINT64_BITS,
    UINT256_BITS,
    RawTransaction,
    ResolvedFields,
    TransactionBuildError,
    to_uint,
)

logger = structlog.get_logger(__name__)

Quantity = Union[int, str]


class NonPayableValueError(TransactionBuildError):
    """Raised when ether is attached to a call of a non-payable method."""
    pass


class RawTransactionBuilder:
    """
    Builds raw transactions.

    Network access is delegated to the field resolver and ABI encoding to the
    contract method; assembly itself is a pure step.
    """

    def __init__(
        self,
        resolver: FieldResolver,
        chain_id: Optional[int] = None,
    ):
        """
        Initialize the transaction builder.

        Args:
            resolver: Field resolver for nonce, gas price and gas limit
            chain_id: Chain ID stamped on built records (EIP-155 signing)
        """
        self.resolver = resolver
        self.chain_id = chain_id

    @staticmethod
    def assemble(
        to: str,
        value: Quantity,
        data: bytes,
        fields: ResolvedFields,
        chain_id: Optional[int] = None,
    ) -> RawTransaction:
        """
        Assemble a raw transaction from intent and resolved fields.

        Raises:
            TransactionOverflowError: If a numeric field exceeds its bit width
        """
        return RawTransaction(
            to=to,
            value=to_uint(value, UINT256_BITS, "value"),
            data=data,
            nonce=to_uint(fields.nonce, UINT64_BITS, "nonce"),
            gas_price=to_uint(fields.gas_price, UINT256_BITS, "gas_price"),
            gas_limit=to_uint(fields.gas_limit, UINT64_BITS, "gas_limit"),
            chain_id=chain_id,
        )

    async def build_transfer(
        self,
        sender: str,
        to: str,
        value: Quantity,
        data: bytes = b"",
        gas_limit: Optional[Quantity] = None,
    ) -> RawTransaction:
        """
        Build a plain transfer.

        Args:
            sender: Sender address
            to: Recipient address
            value: Amount in wei
            data: Optional payload
            gas_limit: Explicit gas limit (estimated if not provided)

        Returns:
            Raw transaction
        """
        value = to_uint(value, UINT256_BITS, "value")
        if gas_limit is not None:
            gas_limit = to_uint(gas_limit, UINT64_BITS, "gas_limit")

        fields = await self.resolver.resolve_for_transfer(
            sender, to, value, data, gas_limit=gas_limit
        )
        record = self.assemble(to, value, data, fields, self.chain_id)

        logger.info(
            "raw_transaction_built",
            kind="transfer",
            to=record.to[:10] + "...",
            nonce=record.nonce,
            gas_limit=record.gas_limit,
        )
        return record

    async def build_contract_call(
        self,
        sender: str,
        contract_address: str,
        method: ContractMethod,
        args: Sequence[Any],
        value: Quantity = 0,
        gas_limit: Optional[Quantity] = None,
    ) -> RawTransaction:
        """
        Build a contract invocation.

        The call data is encoded before any network query is made, so
        encoding errors never cost a round trip.

        Args:
            sender: Sender address
            contract_address: Address of the called contract
            method: Contract method to invoke
            args: Method arguments
            value: Ether attached to the call (payable methods only)
            gas_limit: Explicit gas limit (estimated if not provided)

        Returns:
            Raw transaction addressed to the contract

        Raises:
            EncodingError: If the call cannot be encoded
            NonPayableValueError: If value is attached to a non-payable method
        """
        value = to_uint(value, UINT256_BITS, "value")
        if value and not method.payable:
            raise NonPayableValueError(
                f"{method.signature} is not payable; value must be 0, got {value}"
            )
        if gas_limit is not None:
            gas_limit = to_uint(gas_limit, UINT64_BITS, "gas_limit")

        data = method.encode_call(args)

        fields = await self.resolver.resolve_for_contract(
            sender, method, args, value=value, gas_limit=gas_limit
        )
        record = self.assemble(contract_address, value, data, fields, self.chain_id)

        logger.info(
            "raw_transaction_built",
            kind="contract_call",
            method=method.signature,
            to=record.to[:10] + "...",
            nonce=record.nonce,
            gas_limit=record.gas_limit,
        )
        return record
