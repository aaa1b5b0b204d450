"""Configuration settings for the REST API client.

Settings are loaded from environment variables prefixed with
``REST_API_CLIENT_`` and from an optional ``.env`` file. They only feed
the convenience constructor :meth:`ApiClient.from_settings`; a client
built around a caller-supplied transport ignores them.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    :param base_url: Base URL that relative request URLs resolve against
    :type base_url: Optional[str]
    :param connect_timeout: Connection timeout in seconds
    :type connect_timeout: float
    :param read_timeout: Read timeout in seconds
    :type read_timeout: float
    :param write_timeout: Write timeout in seconds
    :type write_timeout: float
    :param pool_timeout: Pool acquisition timeout in seconds
    :type pool_timeout: float
    :param max_connections: Maximum total number of connections
    :type max_connections: int
    :param max_keepalive_connections: Maximum number of keepalive connections
    :type max_keepalive_connections: int
    :param keepalive_expiry: Keepalive connection expiry in seconds
    :type keepalive_expiry: float
    :param follow_redirects: Whether the transport follows redirects
    :type follow_redirects: bool
    :param retry_max_attempts: Retries after the first attempt
    :type retry_max_attempts: int
    :param retry_base_delay: Base of the exponential backoff in seconds
    :type retry_base_delay: float
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="REST_API_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: Optional[str] = Field(None, description="Base URL for relative requests")

    # Transport
    connect_timeout: float = Field(5.0, gt=0, description="Connect timeout (s)")
    read_timeout: float = Field(30.0, gt=0, description="Read timeout (s)")
    write_timeout: float = Field(10.0, gt=0, description="Write timeout (s)")
    pool_timeout: float = Field(5.0, gt=0, description="Pool timeout (s)")
    max_connections: int = Field(20, ge=1, description="Max connections")
    max_keepalive_connections: int = Field(
        10, ge=0, description="Max keepalive connections"
    )
    keepalive_expiry: float = Field(30.0, ge=0, description="Keepalive expiry (s)")
    follow_redirects: bool = Field(True, description="Follow redirects")

    # Retry
    retry_max_attempts: int = Field(3, ge=0, description="Retries after first attempt")
    retry_base_delay: float = Field(2.0, gt=0, description="Backoff base (s)")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()
