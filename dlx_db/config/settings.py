"""
Pydantic Settings for DLx Database Operations

This module provides strongly-typed configuration settings using Pydantic,
with support for environment variables and YAML configuration files.
"""

from typing import Optional, Union
from pathlib import Path
import logging
import os

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_yaml import to_yaml_file


class CosmosSettings(BaseSettings):
    """
    Connection settings for the Cosmos DB account.

    The database name should generally be `digitallinguistics` in production
    and `test` otherwise. The production name is also what the delete guard
    refuses to drop.
    """
    endpoint: str = Field("https://localhost:8081",
                          description="URL of the Cosmos DB account")
    key: str = Field("", description="Primary or secondary account key")
    database_name: str = Field("test",
                               description="Name of the database to operate on")
    production_database_name: str = Field("digitallinguistics",
                                          description="Database name protected from deletion")

    model_config = SettingsConfigDict(env_prefix="DLX_COSMOS_", case_sensitive=False)


class OperationSettings(BaseSettings):
    """
    Settings for multi-item operations.

    Cosmos DB accepts at most 100 operations in one bulk or batch request,
    so bulk_limit bounds both chunk size and the number of ids accepted by
    a single read-many call.
    """
    bulk_limit: int = Field(100, ge=1,
                            description="Maximum number of operations per bulk or batch request")
    continue_on_error: bool = Field(True,
                                    description="Whether bulk requests continue past failed operations")

    model_config = SettingsConfigDict(env_prefix="DLX_OPERATIONS_", case_sensitive=False)


class MonitoringSettings(BaseSettings):
    """Logging settings."""
    log_level: str = Field("INFO",
                           description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")

    model_config = SettingsConfigDict(env_prefix="DLX_MONITORING_", case_sensitive=False)


class DlxSettings(BaseSettings):
    """
    Main settings class that consolidates all configuration categories.

    Usage:
        # Load from environment variables and defaults
        settings = DlxSettings()

        # Load from YAML file
        settings = DlxSettings.from_yaml('config.yaml')

        # Access nested settings
        endpoint = settings.cosmos.endpoint
        bulk_limit = settings.operations.bulk_limit
    """
    cosmos: CosmosSettings = Field(default_factory=CosmosSettings,
                                   description="Cosmos DB connection settings")
    operations: OperationSettings = Field(default_factory=OperationSettings,
                                          description="Bulk and batch operation settings")
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings,
                                           description="Logging settings")

    model_config = SettingsConfigDict(
        env_prefix="DLX_",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    @classmethod
    def from_yaml(cls, yaml_file: Union[str, Path]) -> "DlxSettings":
        """Load settings from YAML file"""
        with open(yaml_file, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, yaml_file: Union[str, Path]) -> None:
        """Write settings to a YAML file"""
        to_yaml_file(Path(yaml_file), self)


def load_settings(config_path: Optional[str] = None) -> DlxSettings:
    """
    Load settings from file and/or environment variables.

    Args:
        config_path: Path to YAML configuration file. If None or file doesn't exist,
                    falls back to environment variables and default values.

    Returns:
        DlxSettings object with loaded configuration
    """
    if config_path and os.path.exists(config_path):
        return DlxSettings.from_yaml(config_path)
    return DlxSettings()


def configure_logging(settings: Optional[DlxSettings] = None) -> None:
    """Apply the configured log level to the dlx_db logger hierarchy."""
    settings = settings or load_settings()
    level = getattr(logging, settings.monitoring.log_level.upper(), logging.INFO)
    logging.getLogger("dlx_db").setLevel(level)
