"""
Transaction module.

Handles field resolution, transaction construction and signing.
"""

from txsigner.tx.builder import NonPayableValueError, RawTransactionBuilder
from txsigner.tx.resolver import (
    FieldResolutionTimeout,
    FieldResolver,
    GasLimitTimeout,
    GasPriceTimeout,
    NonceTimeout,
)
from txsigner.tx.signer import (
    DecodedTransaction,
    SigningError,
    TransactionDecodeError,
    TransactionSigner,
    decode_signed_transaction,
    signer_address,
)
from txsigner.tx.types import (
    RawTransaction,
    ResolvedFields,
    SignedTransaction,
    TransactionBuildError,
    TransactionOverflowError,
)

__all__ = [
    "RawTransactionBuilder",
    "NonPayableValueError",
    "FieldResolver",
    "FieldResolutionTimeout",
    "NonceTimeout",
    "GasPriceTimeout",
    "GasLimitTimeout",
    "TransactionSigner",
    "SigningError",
    "DecodedTransaction",
    "TransactionDecodeError",
    "decode_signed_transaction",
    "signer_address",
    "RawTransaction",
    "ResolvedFields",
    "SignedTransaction",
    "TransactionBuildError",
    "TransactionOverflowError",
]
