"""
Repository layer for data access.

Repositories handle all document store operations.
Philosophy: Single source of truth for data access patterns.
"""

from blog.repositories.query_result import QueryResult, FOUND, NOT_FOUND, ERROR
from blog.repositories.entry_repository import EntryRepository
from blog.repositories.user_repository import UserRepository

__all__ = [
    'QueryResult',
    'FOUND',
    'NOT_FOUND',
    'ERROR',
    'EntryRepository',
    'UserRepository'
]
