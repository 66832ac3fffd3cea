"""
Input validation for caller supplied transaction properties.

Normalizes addresses, quantities and payloads before they reach the
transaction builder. Private keys are deliberately not part of these models.
"""

from typing import Any, List, Optional

from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _address(value: Any) -> str:
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"invalid address: {value!r}")
    return to_checksum_address(value)


def _quantity(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("quantity must be an integer")
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError:
            raise ValueError(f"invalid quantity: {value!r}")
    return value


def _payload(value: Any) -> Any:
    if value is None:
        return b""
    if isinstance(value, str):
        text = value[2:] if value[:2].lower() == "0x" else value
        try:
            return bytes.fromhex(text)
        except ValueError:
            raise ValueError("data must be hex encoded")
    return value


class TransferProps(BaseModel):
    """Properties of a plain transfer."""

    model_config = ConfigDict(frozen=True)

    to: str
    value: int = Field(ge=0)
    data: bytes = b""
    gas_limit: Optional[int] = Field(default=None, gt=0)

    @field_validator("to", mode="before")
    @classmethod
    def check_address(cls, v: Any) -> str:
        return _address(v)

    @field_validator("value", "gas_limit", mode="before")
    @classmethod
    def parse_quantity(cls, v: Any) -> Any:
        return None if v is None else _quantity(v)

    @field_validator("data", mode="before")
    @classmethod
    def parse_payload(cls, v: Any) -> Any:
        return _payload(v)


class ContractCallProps(BaseModel):
    """Properties of a contract invocation."""

    model_config = ConfigDict(frozen=True)

    contract_address: str
    method: str = Field(min_length=1)
    args: List[Any] = Field(default_factory=list)
    value: int = Field(default=0, ge=0)
    gas_limit: Optional[int] = Field(default=None, gt=0)

    @field_validator("contract_address", mode="before")
    @classmethod
    def check_address(cls, v: Any) -> str:
        return _address(v)

    @field_validator("value", "gas_limit", mode="before")
    @classmethod
    def parse_quantity(cls, v: Any) -> Any:
        return None if v is None else _quantity(v)
