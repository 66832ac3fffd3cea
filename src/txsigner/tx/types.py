"""
Transaction data types.

Defines the raw transaction record, the resolved network fields and the
signed wire form.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from eth_utils import is_address, keccak, to_checksum_address

UINT256_BITS = 256
UINT64_BITS = 64


class TransactionBuildError(Exception):
    """Raised when transaction construction fails."""
    pass


class TransactionOverflowError(TransactionBuildError, OverflowError):
    """Raised when a numeric field does not fit the protocol's fixed-width encoding."""

    def __init__(self, field_name: str, value: Any, bits: int):
        super().__init__(f"{field_name}={value!r} does not fit in uint{bits}")
        self.field_name = field_name
        self.value = value
        self.bits = bits


def to_uint(value: Union[int, str], bits: int, field_name: str) -> int:
    """
    Normalize a quantity to an unsigned integer of the given bit width.

    Accepts integers, ``0x`` prefixed hex text and decimal text. Values
    outside ``[0, 2**bits)`` are rejected, never truncated.

    Raises:
        TransactionOverflowError: If the value is negative or too wide
        TransactionBuildError: If the value is not a quantity at all
    """
    if isinstance(value, bool):
        raise TransactionBuildError(f"{field_name} must be an integer, got bool")

    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError:
            raise TransactionBuildError(f"{field_name} is not a valid quantity: {value!r}")
    else:
        raise TransactionBuildError(
            f"{field_name} must be an integer, got {type(value).__name__}"
        )

    if number < 0 or number >= 1 << bits:
        raise TransactionOverflowError(field_name, value, bits)

    return number


@dataclass(frozen=True)
class ResolvedFields:
    """Network-dependent fields resolved together as one snapshot."""
    nonce: int
    gas_price: int
    gas_limit: int


@dataclass(frozen=True)
class RawTransaction:
    """
    Canonical unsigned transaction record.

    All fields are required; numeric fields are checked against their
    protocol widths on construction.
    """
    to: str
    value: int
    data: bytes
    nonce: int
    gas_price: int
    gas_limit: int
    chain_id: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.to, str) or not is_address(self.to):
            raise TransactionBuildError(f"Invalid recipient address: {self.to!r}")
        object.__setattr__(self, "to", to_checksum_address(self.to))

        if not isinstance(self.data, (bytes, bytearray)):
            raise TransactionBuildError("data must be bytes")
        object.__setattr__(self, "data", bytes(self.data))

        object.__setattr__(self, "value", to_uint(self.value, UINT256_BITS, "value"))
        object.__setattr__(self, "gas_price", to_uint(self.gas_price, UINT256_BITS, "gas_price"))
        object.__setattr__(self, "nonce", to_uint(self.nonce, UINT64_BITS, "nonce"))
        object.__setattr__(self, "gas_limit", to_uint(self.gas_limit, UINT64_BITS, "gas_limit"))
        if self.chain_id is not None:
            object.__setattr__(self, "chain_id", to_uint(self.chain_id, UINT256_BITS, "chain_id"))

    def to_signing_dict(self) -> Dict[str, Any]:
        """Render the record as the field mapping used by eth-account."""
        tx = {
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "nonce": self.nonce,
            "gasPrice": self.gas_price,
            "gas": self.gas_limit,
        }
        if self.chain_id is not None:
            tx["chainId"] = self.chain_id
        return tx


@dataclass(frozen=True)
class SignedTransaction:
    """Signed transaction in its serialized wire form."""
    raw: bytes
    v: int
    r: int
    s: int
    hash: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash", "0x" + keccak(self.raw).hex())

    @property
    def hex(self) -> str:
        """Lowercase ``0x`` prefixed hex encoding, ready for ``eth_sendRawTransaction``."""
        return "0x" + self.raw.hex()

    def __str__(self) -> str:
        return self.hex
