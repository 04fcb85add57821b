from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.enums import TransportMode

DEFAULT_FROM_ADDRESS = '"BootFeet 2K26" <noreply@bootfeet.com>'

IMPLICIT_TLS_PORT = 465


class SmtpConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SMTP_", populate_by_name=True)

    host: str | None = None
    port: int = 587
    user: str | None = None
    password: str | None = Field(default=None, alias="SMTP_PASS")
    validate_certs: bool = False
    connection_timeout: float = 30.0
    greeting_timeout: float = 30.0
    socket_timeout: float = 60.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def transport_mode(self) -> TransportMode:
        """Live only when host, user and password are all configured."""
        if self.host and self.user and self.password:
            return TransportMode.LIVE
        return TransportMode.LOGGED

    @computed_field  # type: ignore[prop-decorator]
    @property
    def implicit_tls(self) -> bool:
        return self.port == IMPLICIT_TLS_PORT


class DeliveryConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DELIVERY_", populate_by_name=True)

    log_level: str = "INFO"
    from_address: str = Field(default=DEFAULT_FROM_ADDRESS, alias="SMTP_FROM")
    max_attempts: int = Field(default=3, ge=1)
    backoff_base_seconds: float = Field(default=1.0, ge=0)
    oversight_enabled: bool = True
    # Only read by the in-memory directory; the SQL backend uses the users table.
    oversight_email: str | None = None
    audit_backend: Literal["sql", "memory"] = "sql"
    background_concurrency: int = Field(default=8, ge=1)


class GatewayConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MAIL_GATEWAY_")

    host: str = "0.0.0.0"
    port: int = 8000
    request_timeout_seconds: float = 120.0
