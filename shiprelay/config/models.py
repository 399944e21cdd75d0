"""
Pydantic-based configuration models for the ShipRelay server.

Every setting can be supplied through environment variables (or a `.env`
file) using the prefix of its group, e.g. `SERVER_PORT=9000` or
`RELAY_HEARTBEAT_INTERVAL=15`.
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class ServerConfig(BaseSettings):
    """Server network configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    reload: bool = Field(default=False, description="Enable uvicorn auto-reload")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1024 <= v <= 65535:
            logger.error("Invalid server port", port=v, valid_range="1024-65535")
            raise ValueError("Port must be between 1024 and 65535")
        return v

    model_config = {"env_prefix": "SERVER_", "case_sensitive": False, "extra": "ignore"}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    environment: str = Field(default="local", description="Logging environment")
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="colored", description="Log format")
    disable_logging: bool = Field(default=False, description="Disable all logging")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate logging environment."""
        valid_environments = ["local", "unit_test", "e2e_test", "production"]
        if v not in valid_environments:
            logger.error("Invalid logging environment", environment=v, valid_environments=valid_environments)
            raise ValueError(f"Environment must be one of {valid_environments}, got '{v}'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got '{v}'")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "human", "colored"]
        if v not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}, got '{v}'")
        return v

    model_config = {"env_prefix": "LOGGING_", "case_sensitive": False, "extra": "ignore"}


class RelayConfig(BaseSettings):
    """Room pairing and liveness configuration."""

    protocol_version: int = Field(default=1, description="Protocol version sent in HOSTED/JOINED acknowledgments")
    heartbeat_interval: float = Field(default=30.0, description="Seconds between liveness probe cycles")
    room_code_min: int = Field(default=1000, description="Smallest room code that may be issued")
    room_code_max: int = Field(default=9999, description="Largest room code that may be issued")
    max_code_attempts: int = Field(default=100, description="Random draws tried before a live room code is reused")

    @field_validator("heartbeat_interval")
    @classmethod
    def validate_heartbeat_interval(cls, v: float) -> float:
        """Validate the probe period is positive."""
        if v <= 0:
            raise ValueError("heartbeat_interval must be greater than zero")
        return v

    @field_validator("room_code_min", "room_code_max", "max_code_attempts", "protocol_version")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate integer settings are at least 1."""
        if v < 1:
            raise ValueError("Value must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_code_range(self) -> "RelayConfig":
        """Room codes must share one digit count so every code has the same width."""
        if self.room_code_min > self.room_code_max:
            raise ValueError("room_code_min must not exceed room_code_max")
        if len(str(self.room_code_min)) != len(str(self.room_code_max)):
            raise ValueError("room_code_min and room_code_max must have the same number of digits")
        return self

    model_config = {"env_prefix": "RELAY_", "case_sensitive": False, "extra": "ignore"}


class AppConfig(BaseSettings):
    """
    Composite application configuration.

    Aggregates all other configs. Access via the get_config() singleton function.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False, "extra": "ignore"}
