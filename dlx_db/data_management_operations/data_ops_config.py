"""
Data Management Operations Configuration

Centralized configuration for multi-item operations: how many operations
go into one bulk or batch request and how bulk requests treat failed
operations.
"""

from dataclasses import dataclass, fields
from typing import Dict, Any, Optional, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from ..config import DlxSettings

logger = logging.getLogger(__name__)


@dataclass
class DataOperationConfig:
    """
    Configuration for data operations.

    Attributes:
        bulk_limit: Maximum number of operations in a single bulk or batch
                    request. Also the maximum number of ids accepted by one
                    read-many call.
        continue_on_error: Whether bulk requests keep executing operations
                           after one of them fails.

    Example:
        ```python
        config = DataOperationConfig(bulk_limit=50)
        db = Database(settings, config=config)
        ```
    """

    bulk_limit: int = 100
    continue_on_error: bool = True

    def __post_init__(self):
        """Validate configuration parameters after initialization."""
        if self.bulk_limit < 1:
            raise ValueError(f"bulk_limit must be a positive integer, got {self.bulk_limit}")
        if self.bulk_limit > 100:
            logger.warning(
                f"bulk_limit ({self.bulk_limit}) exceeds the Cosmos DB limit of 100 "
                f"operations per request; requests may be rejected by the service."
            )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'DataOperationConfig':
        """
        Create configuration from a dictionary, ignoring unknown keys.

        Args:
            config_dict: Dictionary containing configuration parameters.
        """
        valid_fields = {f.name for f in fields(cls)}
        filtered_dict = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered_dict)

    @classmethod
    def from_settings(cls, settings: Optional['DlxSettings']) -> 'DataOperationConfig':
        """Create configuration from the `operations` section of DlxSettings."""
        if settings is None:
            return cls()
        return cls.from_dict(settings.operations.model_dump())

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'bulk_limit': self.bulk_limit,
            'continue_on_error': self.continue_on_error
        }
