"""
SuiBets configuration

- Settings: environment-driven configuration (Pydantic)
- ChainConfig: explicit contract/network addresses handed to the chain-facing services
"""

from __future__ import annotations
from dataclasses import dataclass
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Dict, Any

from config.system_constants import (
    DEFAULT_BETTING_PACKAGE_ID,
    DEFAULT_BETTING_PLATFORM_ID,
    SUI_CLOCK_OBJECT_ID,
    SUI_COIN_TYPE,
    SBETS_COIN_TYPE,
    SUI_FULLNODE_URLS,
)


# =========================
# Environment-driven settings
# =========================
class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- SUI NETWORK ---
    SUI_NETWORK: str = "mainnet"  # "mainnet" | "testnet" | "devnet"
    SUI_RPC_URL: str = ""  # Falls back to the public fullnode for SUI_NETWORK
    SUI_RPC_TIMEOUT_SECONDS: float = 30.0
    SUI_CONFIRMATION_TIMEOUT_SECONDS: float = 15.0
    SUI_POLL_INTERVAL_SECONDS: float = 1.0

    # --- BETTING CONTRACT ---
    BETTING_PACKAGE_ID: str = DEFAULT_BETTING_PACKAGE_ID
    BETTING_PLATFORM_ID: str = DEFAULT_BETTING_PLATFORM_ID
    SUI_CLOCK_OBJECT_ID: str = SUI_CLOCK_OBJECT_ID
    SUI_COIN_TYPE: str = SUI_COIN_TYPE
    SBETS_COIN_TYPE: str = SBETS_COIN_TYPE

    # --- WALLET BRIDGE (signing capability) ---
    WALLET_BRIDGE_URL: str = "http://localhost:3001"
    WALLET_BRIDGE_TIMEOUT_SECONDS: float = 120.0  # user has to approve in the wallet

    # --- DATABASE (off-chain mirror) ---
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_SERVICE_KEY: str = ""

    # --- MIRROR POLICY ---
    VERIFY_MIRROR_AGAINST_CHAIN: bool = True

    # --- ENV / LOGGING ---
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"  # "plain" | "rich"

    # --- API SERVER ---
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "allow"  # allow unknown keys in .env for forward compatibility

    @field_validator("SUI_NETWORK")
    @classmethod
    def _known_network(cls, value: str) -> str:
        value = value.lower()
        if value not in SUI_FULLNODE_URLS:
            raise ValueError(f"SUI_NETWORK must be one of {sorted(SUI_FULLNODE_URLS)}, got {value!r}")
        return value

    @property
    def rpc_url(self) -> str:
        """RPC endpoint, defaulting to the public fullnode of the configured network."""
        return self.SUI_RPC_URL or SUI_FULLNODE_URLS[self.SUI_NETWORK]

    @property
    def supabase_key(self) -> str:
        """Service key wins over the anon key when both are set."""
        return self.SUPABASE_SERVICE_KEY or self.SUPABASE_KEY

    def validate_chain_config(self) -> Dict[str, Any]:
        """
        Validate contract configuration and return validation results.

        Returns:
            Dictionary with validation results including:
            - valid: Whether configuration is valid
            - errors: List of error messages
            - warnings: List of warning messages
        """
        errors = []
        warnings = []

        for name in ("BETTING_PACKAGE_ID", "BETTING_PLATFORM_ID", "SUI_CLOCK_OBJECT_ID"):
            value = getattr(self, name)
            if not value.startswith("0x"):
                errors.append(f"{name} must be a 0x-prefixed object id, got {value!r}")

        if self.BETTING_PACKAGE_ID == DEFAULT_BETTING_PACKAGE_ID and self.SUI_NETWORK != "mainnet":
            warnings.append(f"Using the mainnet betting package on {self.SUI_NETWORK}")

        if not self.SUPABASE_URL or not self.supabase_key:
            warnings.append("SUPABASE_URL / SUPABASE_KEY not set - bet mirror writes will fail")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "warnings": warnings,
        }


@dataclass(frozen=True)
class ChainConfig:
    """Contract addresses and network the builder, confirmer and reconciler work against."""
    package_id: str
    platform_object_id: str
    clock_object_id: str = SUI_CLOCK_OBJECT_ID
    network: str = "mainnet"
    sui_coin_type: str = SUI_COIN_TYPE
    sbets_coin_type: str = SBETS_COIN_TYPE

    @classmethod
    def from_settings(cls, s: Settings) -> "ChainConfig":
        return cls(
            package_id=s.BETTING_PACKAGE_ID,
            platform_object_id=s.BETTING_PLATFORM_ID,
            clock_object_id=s.SUI_CLOCK_OBJECT_ID,
            network=s.SUI_NETWORK,
            sui_coin_type=s.SUI_COIN_TYPE,
            sbets_coin_type=s.SBETS_COIN_TYPE,
        )

    @property
    def bet_object_type(self) -> str:
        """Fully-qualified Move type of the Bet object created by place_bet."""
        return f"{self.package_id}::betting::Bet"

    def move_target(self, function: str) -> str:
        return f"{self.package_id}::betting::{function}"


# Global settings instance
settings = Settings()


__all__ = ["Settings", "ChainConfig", "settings"]
