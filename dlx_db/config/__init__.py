"""
Configuration Module

Centralized, environment-aware configuration for the dlx_db package:
- Cosmos DB connection settings
- Bulk/batch operation limits
- Logging level

Settings are validated with Pydantic and can be loaded from environment
variables (DLX_ prefix) or YAML files.
"""

from .settings import (
    DlxSettings,
    CosmosSettings,
    OperationSettings,
    MonitoringSettings,
    load_settings,
    configure_logging
)

__all__ = [
    'DlxSettings',
    'CosmosSettings',
    'OperationSettings',
    'MonitoringSettings',
    'load_settings',
    'configure_logging'
]
