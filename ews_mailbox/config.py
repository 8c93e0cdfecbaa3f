"""Configuration management using pydantic-settings."""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Connection and runtime settings, read from the environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Exchange connection
    ews_email: str = Field(..., description="Primary SMTP address of the connecting account")
    ews_username: Optional[str] = Field(None, description="Logon name, defaults to ews_email")
    ews_password: Optional[str] = Field(None, description="Password for basic/NTLM auth")
    ews_server_url: Optional[str] = Field(None, description="EWS endpoint or server hostname")
    ews_autodiscover: bool = Field(True, description="Use autodiscover to locate the endpoint")
    ews_auth_type: Literal["basic", "ntlm", "oauth2"] = "ntlm"
    ews_verify_ssl: bool = Field(True, description="Verify the server's TLS certificate")

    # OAuth2 (Office 365 app registration)
    ews_client_id: Optional[str] = None
    ews_client_secret: Optional[str] = None
    ews_tenant_id: Optional[str] = None

    # Access to other mailboxes
    ews_impersonation_enabled: bool = False
    ews_impersonation_type: Literal["impersonation", "delegate"] = "impersonation"

    # Runtime
    timezone: str = "UTC"
    request_timeout: int = Field(120, gt=0)
    connection_pool_size: int = Field(4, gt=0)
    page_size: int = Field(100, gt=0, le=1000)

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def username(self) -> str:
        return self.ews_username or self.ews_email


def load_settings(**overrides) -> Settings:
    """Load settings, letting explicit command parameters win over the environment."""
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return Settings(**overrides)
