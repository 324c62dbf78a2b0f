"""Application configuration and settings."""

import os
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dappvotes.constants import (
    DEFAULT_CONTRACT_ADDRESS,
    DEFAULT_RPC_URL,
    ExecutionMode,
)


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="DAPPVOTES_",
    )

    # Application
    app_name: str = "DappVotes"
    app_version: str = "1.0.0"
    environment: Literal["development", "production"] = "production"
    execution_mode: ExecutionMode = ExecutionMode.SERVER

    # Chain
    rpc_url: str = Field(
        default=DEFAULT_RPC_URL,
        description="JSON-RPC endpoint (NEXT_APP_RPC_URL is honored as well)",
    )
    wallet_url: str = Field(
        default="",
        description="EIP-1193 style wallet endpoint answering eth_accounts",
    )
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    contract_abi_path: str = Field(
        default="",
        description="Hardhat artifact or bare ABI file; bundled ABI when empty",
    )
    request_timeout: float = 30.0

    # Cache
    cache_backend: Literal["redis", "memory"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    cache_freshness_ms: int = 30_000

    # Throttle / retry / settle
    throttle_interval_ms: int = 2_000
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=1_000, ge=0)
    settle_delay_ms: int = Field(default=2_000, ge=0)

    @field_validator("rpc_url")
    @classmethod
    def set_rpc_url(cls, v: str) -> str:
        """Use NEXT_APP_RPC_URL when the prefixed variable is not set."""
        if v == DEFAULT_RPC_URL:
            return os.getenv("NEXT_APP_RPC_URL", v) or v
        return v

    @property
    def is_interactive(self) -> bool:
        """True when a wallet may be consulted."""
        return self.execution_mode == ExecutionMode.INTERACTIVE

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached client settings."""
    return Settings()
