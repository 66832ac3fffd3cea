"""
EVM Transaction Signer

Prepares and signs transactions for account-based, nonce-ordered ledgers.
Missing fields (nonce, gas price, gas limit) are resolved from the network
concurrently, the raw transaction is assembled, and the signed wire form is
returned ready for broadcast.
"""

__version__ = "0.1.0"

from txsigner.api import TransactionService, build_and_sign_contract_call, build_and_sign_transfer
from txsigner.contract.abi import Contract, ContractMethod, EncodingError
from txsigner.node.interface import NodeInterface, NodeTimeout, TransportError
from txsigner.tx.builder import NonPayableValueError, RawTransactionBuilder
from txsigner.tx.resolver import (
    FieldResolutionTimeout,
    FieldResolver,
    GasLimitTimeout,
    GasPriceTimeout,
    NonceTimeout,
)
from txsigner.tx.signer import SigningError, TransactionSigner
from txsigner.tx.types import (
    RawTransaction,
    SignedTransaction,
    TransactionBuildError,
    TransactionOverflowError,
)

__all__ = [
    "TransactionService",
    "build_and_sign_transfer",
    "build_and_sign_contract_call",
    "Contract",
    "ContractMethod",
    "EncodingError",
    "NodeInterface",
    "TransportError",
    "NodeTimeout",
    "RawTransactionBuilder",
    "NonPayableValueError",
    "FieldResolver",
    "FieldResolutionTimeout",
    "NonceTimeout",
    "GasPriceTimeout",
    "GasLimitTimeout",
    "TransactionSigner",
    "SigningError",
    "RawTransaction",
    "SignedTransaction",
    "TransactionBuildError",
    "TransactionOverflowError",
]
