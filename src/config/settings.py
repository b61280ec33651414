"""Configuration settings for email-reader."""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AzureSettings(BaseSettings):
    """Azure AD configuration settings."""

    client_id: str = Field(
        default="",
        validation_alias=AliasChoices("client_id", "azure_client_id"),
        description="Azure AD application (client) ID",
    )
    tenant_id: str = Field(
        default="",
        validation_alias=AliasChoices("tenant_id", "azure_tenant_id"),
        description="Azure AD tenant ID",
    )
    scopes: List[str] = Field(
        default_factory=lambda: ["User.Read", "Mail.Read"],
        description="Microsoft Graph API scopes",
    )
    authority_host: str = Field(
        default="login.microsoftonline.com",
        description="Azure AD authority host",
    )

    model_config = SettingsConfigDict(env_prefix="AZURE_", populate_by_name=True)

    def missing_variables(self) -> list[str]:
        """Return the names of required environment variables that are not set."""
        missing = []
        if not self.client_id:
            missing.append("CLIENT_ID")
        if not self.tenant_id:
            missing.append("TENANT_ID")
        return missing


class StorageSettings(BaseSettings):
    """Storage configuration settings."""

    record_file: str = Field(
        default="token.json",
        description="File for storing the serialized authentication record",
    )
    cache_name: str = Field(
        default="email-reader-cache",
        description="Name of the persistent MSAL token cache",
    )

    @field_validator("record_file")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand user home directory in paths."""
        return str(Path(v).expanduser())

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        v_upper = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid logging level: {v}. Must be one of {valid_levels}")
        return v_upper

    model_config = SettingsConfigDict(env_prefix="LOGGING_")


class Settings(BaseSettings):
    """Main application settings."""

    azure: AzureSettings = Field(default_factory=AzureSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file.

        Values absent from the file fall back to environment variables, so
        ``CLIENT_ID``/``TENANT_ID`` work with or without a config file.

        Args:
            config_path: Path to YAML config file. If None, uses default locations.

        Returns:
            Settings instance loaded from YAML file.
        """
        if config_path is None:
            possible_paths = [
                Path("config/config.yaml"),
                Path.home() / ".email-reader" / "config.yaml",
            ]
            for path in possible_paths:
                if path.exists():
                    config_path = path
                    break

        if config_path is None or not config_path.exists():
            return cls(
                azure=AzureSettings(),
                storage=StorageSettings(),
                logging=LoggingSettings(),
            )

        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}

        azure_settings = AzureSettings(**config_data.get("azure", {}))
        storage_settings = StorageSettings(**config_data.get("storage", {}))
        logging_settings = LoggingSettings(**config_data.get("logging", {}))

        return cls(
            azure=azure_settings,
            storage=storage_settings,
            logging=logging_settings,
        )

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        logging.basicConfig(
            level=getattr(logging, self.logging.level),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def ensure_directories(self) -> None:
        """Ensure the directory holding the authentication record exists."""
        Path(self.storage.record_file).parent.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings(config_path: Optional[Path] = None) -> Settings:
    """Get cached settings instance.

    Args:
        config_path: Optional path to config file.

    Returns:
        Cached Settings instance.
    """
    env_config_path = os.getenv("EMAIL_READER_CONFIG")
    if env_config_path:
        config_path = Path(env_config_path)

    return Settings.from_yaml(config_path)
