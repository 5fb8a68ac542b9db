"""Application settings.

Pydantic-based configuration loaded from environment variables and an
optional ``.env`` file.

Environment Variables:
- LNRELAY_LND_REST_URL: Base URL of the LND REST gateway (default: https://localhost:8080)
- LNRELAY_LND_MACAROON: Hex encoded macaroon used for every LND request
- LNRELAY_LND_TLS_CERT_PATH: CA bundle / node certificate for TLS verification
- LNRELAY_MEMO_TEMPLATE: Memo template, ``$amt`` is replaced by the amount
- LNRELAY_LISTENER_QUEUE_SIZE: Buffered events per listener before dropping
- LNRELAY_LOG_LEVEL / LNRELAY_LOG_JSON: Logging output
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """lnrelay settings.

    All settings can be overridden via environment variables with prefix
    ``LNRELAY_``.

    Example:
        >>> settings = Settings(lnd_macaroon="0201")
        >>> settings.memo_template
        'Candy for $amt sat'
    """

    model_config = SettingsConfigDict(
        env_prefix="LNRELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LND connection
    lnd_rest_url: str = Field(
        default="https://localhost:8080",
        description="Base URL of the LND REST gateway",
    )
    lnd_macaroon: str = Field(
        default="",
        repr=False,
        description="Hex encoded invoice macaroon",
    )
    lnd_tls_cert_path: Path | None = Field(
        default=None,
        description="Certificate used to verify the node's TLS endpoint",
    )
    lnd_verify_tls: bool = Field(
        default=True,
        description="Verify the node's TLS certificate (disable for local regtest only)",
    )
    lnd_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for unary LND requests",
    )

    # Payment requests
    memo_template: str = Field(
        default="Candy for $amt sat",
        description="Template for payment request memos",
    )
    invoice_expiry_seconds: int = Field(
        default=3600,
        ge=60,
        le=7 * 24 * 3600,
        description="Expiry of newly created payment requests",
    )

    # Broadcaster
    listener_queue_size: int = Field(
        default=1000,
        ge=1,
        le=100_000,
        description="Maximum buffered events per listener (oldest dropped if exceeded)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")
    debug: bool = Field(default=False, description="Development console output")

    @field_validator("lnd_macaroon")
    @classmethod
    def _validate_macaroon(cls, value: str) -> str:
        value = value.strip()
        if value:
            try:
                bytes.fromhex(value)
            except ValueError as e:
                raise ValueError("lnd_macaroon must be hex encoded") from e
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @property
    def tls_verify(self) -> bool | str:
        """Value for httpx's ``verify`` argument."""
        if not self.lnd_verify_tls:
            return False
        if self.lnd_tls_cert_path is not None:
            return str(self.lnd_tls_cert_path)
        return True


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the process-wide settings."""
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """Re-read settings from the environment."""
    global _settings

    _settings = Settings()
    return _settings
