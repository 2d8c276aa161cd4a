"""
Core Data Management Components

Contains the orchestrator, response normalizer and record validator.
"""

from .normalizer import ResponseNormalizer
from .orchestrator import BulkOrchestrator
from .validator import RecordValidator

__all__ = ['ResponseNormalizer', 'BulkOrchestrator', 'RecordValidator']
