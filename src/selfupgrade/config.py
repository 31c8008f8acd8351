"""Configuration management for selfupgrade."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``SELFUPGRADE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SELFUPGRADE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Toolchain
    installer_command: list[str] = Field(
        default_factory=lambda: ["go", "install"],
        description="Command that installs a target, the target is appended",
    )
    version_command: list[str] = Field(
        default_factory=lambda: ["go", "version", "-m"],
        description="Command that prints build info, the binary path is appended",
    )

    # Upgrade policy
    version_tag: str = Field(default="latest", description="Version tag to install")
    development_version: str = Field(
        default="(devel)", description="Version reported by local development builds"
    )
    install_timeout: float | None = Field(
        default=None, gt=0, description="Seconds before the install is cancelled"
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
