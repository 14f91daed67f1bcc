"""Application settings and configuration.

This module defines all configuration options for the randomness oracle.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files. The
    signer key is optional: without it the service starts but reports itself
    as unavailable.
    """

    # Application metadata
    app_name: str = Field(default="Randomness Oracle", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Signing key (hex encoded secp256k1 private key)
    signer_private_key: str | None = Field(
        default=None,
        alias="BLACKJACK_RANDOMNESS_SIGNER_KEY",
    )

    # Chain access
    rpc_url: str = Field(default="https://mainnet.base.org", alias="BASE_RPC_URL")
    contract_address: str = Field(
        default="0x3f1F8F0C4BE4bCeB45E6597AFe0dE861B8c3278c",
        alias="LAND_CONTRACT_ADDRESS",
    )
    nonce_function_name: str = Field(
        default="blackjackGetNonce",
        alias="NONCE_FUNCTION_NAME",
    )
    chain_read_timeout_seconds: float = Field(
        default=5.0,
        alias="CHAIN_READ_TIMEOUT_SECONDS",
    )

    # Per-requester throttling
    rate_limit_max_requests: int = Field(default=30, alias="RATE_LIMIT_MAX_REQUESTS")
    rate_limit_window_seconds: float = Field(
        default=60.0,
        alias="RATE_LIMIT_WINDOW_SECONDS",
    )

    # Randomness cache lifetimes
    cache_retention_seconds: float = Field(
        default=300.0,
        alias="RANDOMNESS_CACHE_RETENTION_SECONDS",
    )
    signature_validity_seconds: int = Field(
        default=60,
        alias="SIGNATURE_VALIDITY_SECONDS",
    )
    cache_sweep_interval_seconds: float = Field(
        default=30.0,
        alias="CACHE_SWEEP_INTERVAL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def signer_configured(self) -> bool:
        """Return True when a signer key has been provided.

        Returns:
            Whether `BLACKJACK_RANDOMNESS_SIGNER_KEY` is set to a non-blank value
        """
        return bool(self.signer_private_key and self.signer_private_key.strip())


settings = Settings()
