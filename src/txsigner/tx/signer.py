"""
Transaction Signer - handles transaction signing.

Signs raw transaction records with a caller supplied private key and
serializes them into the legacy RLP wire format.
"""

from dataclasses import dataclass
from typing import Optional, Union

import rlp
import structlog
from eth_account import Account
from eth_utils import to_checksum_address
from rlp.exceptions import RLPException
from rlp.sedes import Binary, big_endian_int, binary

from txsigner.tx.types import RawTransaction, SignedTransaction

logger = structlog.get_logger(__name__)

# Order of the secp256k1 group
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

PrivateKey = Union[bytes, str]


class SigningError(Exception):
    """Raised when a transaction cannot be signed."""
    pass


class TransactionDecodeError(ValueError):
    """Raised when a serialized transaction cannot be parsed."""
    pass


class _SignedLegacyTransaction(rlp.Serializable):
    fields = [
        ("nonce", big_endian_int),
        ("gas_price", big_endian_int),
        ("gas_limit", big_endian_int),
        ("to", Binary.fixed_length(20, allow_empty=True)),
        ("value", big_endian_int),
        ("data", binary),
        ("v", big_endian_int),
        ("r", big_endian_int),
        ("s", big_endian_int),
    ]


@dataclass(frozen=True)
class DecodedTransaction:
    """A parsed signed transaction."""
    transaction: RawTransaction
    v: int
    r: int
    s: int
    sender: str


def normalize_private_key(private_key: PrivateKey) -> bytes:
    """
    Convert a private key to its 32 raw bytes.

    Accepts raw bytes or 64 hex characters, with or without ``0x``.

    Raises:
        SigningError: If the key has the wrong length or is not a valid scalar
    """
    if isinstance(private_key, str):
        text = private_key.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        if len(text) != 64:
            raise SigningError("Private key must be 64 hex characters")
        try:
            key = bytes.fromhex(text)
        except ValueError:
            raise SigningError("Private key is not valid hex") from None
    elif isinstance(private_key, (bytes, bytearray)):
        key = bytes(private_key)
    else:
        raise SigningError(f"Unsupported private key type: {type(private_key).__name__}")

    if len(key) != 32:
        raise SigningError("Private key must be 32 bytes")
    if not 0 < int.from_bytes(key, "big") < SECP256K1_N:
        raise SigningError("Private key is not a valid secp256k1 scalar")

    return key


def signer_address(private_key: PrivateKey) -> str:
    """Derive the checksummed account address of a private key."""
    key = normalize_private_key(private_key)
    try:
        return Account.from_key(key).address
    except Exception as e:
        raise SigningError(f"Cannot derive address: {e}") from e


class TransactionSigner:
    """
    Signs raw transactions.

    The signer holds no key material. Each call receives the key, signs with
    RFC 6979 deterministic secp256k1 ECDSA and returns the wire form, so the
    same record and key always produce identical bytes. Records without a
    chain ID are signed as unprotected legacy transactions (v = 27/28),
    otherwise with EIP-155 replay protection.
    """

    def sign(self, record: RawTransaction, private_key: PrivateKey) -> SignedTransaction:
        """
        Sign a transaction.

        Args:
            record: The raw transaction to sign
            private_key: 32 byte key, raw or hex encoded

        Returns:
            Signed transaction

        Raises:
            SigningError: If the key is malformed or signing fails
        """
        key = normalize_private_key(private_key)

        try:
            signed = Account.sign_transaction(record.to_signing_dict(), key)
        except Exception as e:
            raise SigningError(f"Failed to sign transaction: {e}") from e

        signed_tx = SignedTransaction(
            raw=bytes(signed.raw_transaction),
            v=signed.v,
            r=signed.r,
            s=signed.s,
        )

        logger.debug(
            "transaction_signed",
            tx_hash=signed_tx.hash[:18] + "...",
            nonce=record.nonce,
        )

        return signed_tx


def decode_signed_transaction(raw: Union[bytes, str]) -> DecodedTransaction:
    """
    Parse a signed legacy transaction.

    Args:
        raw: Serialized transaction, as bytes or ``0x`` hex text

    Returns:
        The transaction fields, signature and recovered sender

    Raises:
        TransactionDecodeError: If the input is not a signed legacy transfer or call
    """
    if isinstance(raw, str):
        text = raw[2:] if raw[:2].lower() == "0x" else raw
        try:
            raw = bytes.fromhex(text)
        except ValueError:
            raise TransactionDecodeError("Signed transaction is not valid hex") from None

    try:
        tx = rlp.decode(raw, _SignedLegacyTransaction)
    except RLPException as e:
        raise TransactionDecodeError(f"Not a signed legacy transaction: {e}") from e

    if not tx.to:
        raise TransactionDecodeError("Contract creation transactions are not supported")

    chain_id: Optional[int] = None
    if tx.v >= 35:
        chain_id = (tx.v - 35) // 2

    transaction = RawTransaction(
        to=to_checksum_address(tx.to),
        value=tx.value,
        data=tx.data,
        nonce=tx.nonce,
        gas_price=tx.gas_price,
        gas_limit=tx.gas_limit,
        chain_id=chain_id,
    )

    try:
        sender = Account.recover_transaction(raw)
    except Exception as e:
        raise TransactionDecodeError(f"Cannot recover sender: {e}") from e

    return DecodedTransaction(
        transaction=transaction,
        v=tx.v,
        r=tx.r,
        s=tx.s,
        sender=sender,
    )
