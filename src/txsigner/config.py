"""
Configuration management for the transaction signer.

Supports configuration via environment variables and .env files.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SignerConfig(BaseSettings):
    """
    Configuration settings for transaction preparation and signing.

    All settings can be configured via environment variables with the TXSIGNER_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="TXSIGNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Node settings
    rpc_url: str = Field(
        default="http://localhost:8545",
        description="Ethereum JSON-RPC endpoint"
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout of the underlying HTTP client"
    )

    # Field resolution settings
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Deadline for each nonce / gas price / gas limit query"
    )

    # Signing settings
    chain_id: Optional[int] = Field(
        default=None,
        ge=1,
        description="Chain ID for EIP-155 replay protection (unprotected legacy signing if unset)"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )


# Global config instance
_config: Optional[SignerConfig] = None


def get_config() -> SignerConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = SignerConfig()
    return _config


def set_config(config: SignerConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
