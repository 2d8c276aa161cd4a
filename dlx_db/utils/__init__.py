"""
Utilities Module

Common helpers shared across the dlx_db package:
- Chunking of operation lists for bulk and batch requests
- Preparation of records (id assignment) without mutating caller input
"""

from .chunking import chunk
from .records import with_id, without_id

__all__ = ['chunk', 'with_id', 'without_id']
