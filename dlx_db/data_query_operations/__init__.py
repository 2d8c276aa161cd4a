"""
Data Query Operations Module

Parameterized query construction for listing and counting records.
"""

from .query_builder import Query, QueryBuilder, QueryFilters

__all__ = ['Query', 'QueryBuilder', 'QueryFilters']
