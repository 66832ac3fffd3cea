"""
Caller-facing API.

Wires the field resolver, transaction builder and signer together and
returns signed transactions ready for broadcast.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from txsigner.config import SignerConfig, get_config
from txsigner.contract.abi import Contract, ContractMethod
from txsigner.node.interface import NodeInterface
from txsigner.node.jsonrpc import JsonRpcAdapter
from txsigner.tx.builder import RawTransactionBuilder
from txsigner.tx.resolver import FieldResolver
from txsigner.tx.signer import PrivateKey, TransactionSigner, signer_address
from txsigner.validation import ContractCallProps, TransferProps

logger = structlog.get_logger(__name__)

MethodRef = Union[ContractMethod, str]


class TransactionService:
    """
    Builds and signs transactions against one node.

    Usage:
        ```python
        async with JsonRpcAdapter(config) as node:
            service = TransactionService(node, config)
            signed_hex = await service.build_and_sign_transfer(key, to, 1000)
        ```
    """

    def __init__(
        self,
        node: NodeInterface,
        config: Optional[SignerConfig] = None,
        signer: Optional[TransactionSigner] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the transaction service.

        Args:
            node: Node interface for field resolution and gas estimation
            config: Signer configuration
            signer: Custom transaction signer
            timeout: Per-query deadline overriding the configured one
        """
        self.config = config or get_config()
        self.node = node
        self.resolver = FieldResolver(node, timeout=timeout, config=self.config)
        self.builder = RawTransactionBuilder(self.resolver, chain_id=self.config.chain_id)
        self.signer = signer or TransactionSigner()

    def contract(self, address: str, abi: List[Dict[str, Any]]) -> Contract:
        """Bind a contract ABI to this service's node."""
        return Contract(address, abi, self.node)

    def _method(self, contract_address: str, method: MethodRef) -> ContractMethod:
        if isinstance(method, ContractMethod):
            return method
        return ContractMethod.from_signature(method, contract_address, self.node)

    async def build_and_sign_transfer(
        self,
        private_key: PrivateKey,
        to: str,
        value: int,
        data: bytes = b"",
        gas_limit: Optional[int] = None,
    ) -> str:
        """
        Build and sign a plain transfer.

        Returns:
            ``0x`` prefixed signed transaction
        """
        sender = signer_address(private_key)
        record = await self.builder.build_transfer(sender, to, value, data, gas_limit=gas_limit)
        signed = self.signer.sign(record, private_key)

        logger.info("transfer_signed", sender=sender[:10] + "...", tx_hash=signed.hash)
        return signed.hex

    async def build_and_sign_contract_call(
        self,
        private_key: PrivateKey,
        contract_address: str,
        method: MethodRef,
        args: Sequence[Any],
        value: int = 0,
        gas_limit: Optional[int] = None,
    ) -> str:
        """
        Build and sign a contract invocation.

        Args:
            private_key: Sender's private key
            contract_address: Called contract
            method: Contract method, or its text signature
            args: Method arguments
            value: Ether attached to a payable call
            gas_limit: Explicit gas limit (estimated if not provided)

        Returns:
            ``0x`` prefixed signed transaction
        """
        contract_method = self._method(contract_address, method)
        sender = signer_address(private_key)
        record = await self.builder.build_contract_call(
            sender,
            contract_address,
            contract_method,
            args,
            value=value,
            gas_limit=gas_limit,
        )
        signed = self.signer.sign(record, private_key)

        logger.info(
            "contract_call_signed",
            sender=sender[:10] + "...",
            method=contract_method.signature,
            tx_hash=signed.hash,
        )
        return signed.hex

    async def estimate_contract_gas(
        self,
        sender: str,
        contract_address: str,
        method: MethodRef,
        args: Sequence[Any],
        value: int = 0,
    ) -> int:
        """Estimate gas for a contract invocation."""
        return await self._method(contract_address, method).estimate_gas(sender, args, value)


async def build_and_sign_transfer(
    private_key: PrivateKey,
    to: str,
    value: Union[int, str],
    data: Union[bytes, str] = b"",
    gas_limit: Optional[Union[int, str]] = None,
    config: Optional[SignerConfig] = None,
) -> str:
    """
    Validate transfer properties, then build and sign against the configured node.
    """
    props = TransferProps(to=to, value=value, data=data, gas_limit=gas_limit)
    config = config or get_config()

    async with JsonRpcAdapter(config) as node:
        service = TransactionService(node, config)
        return await service.build_and_sign_transfer(
            private_key, props.to, props.value, props.data, gas_limit=props.gas_limit
        )


async def build_and_sign_contract_call(
    private_key: PrivateKey,
    contract_address: str,
    method: str,
    args: Sequence[Any],
    value: Union[int, str] = 0,
    gas_limit: Optional[Union[int, str]] = None,
    abi: Optional[List[Dict[str, Any]]] = None,
    config: Optional[SignerConfig] = None,
) -> str:
    """
    Validate call properties, then build and sign against the configured node.

    ``method`` is a name from ``abi`` when an ABI is given, otherwise a text
    signature such as ``transfer(address,uint256)``.
    """
    props = ContractCallProps(
        contract_address=contract_address,
        method=method,
        args=list(args),
        value=value,
        gas_limit=gas_limit,
    )
    config = config or get_config()

    async with JsonRpcAdapter(config) as node:
        service = TransactionService(node, config)
        method_ref: MethodRef = props.method
        if abi is not None:
            method_ref = service.contract(props.contract_address, abi).method(props.method)
        return await service.build_and_sign_contract_call(
            private_key,
            props.contract_address,
            method_ref,
            props.args,
            value=props.value,
            gas_limit=props.gas_limit,
        )
