"""
Repository for backend user data access.
"""

from blog.db_manager import query_db
from blog.exceptions import DecodeError, StoreError
from blog.models import User
from blog.repositories.query_result import QueryResult
import logging

logger = logging.getLogger(__name__)


class UserRepository:
    """Data access layer for backend users"""

    @staticmethod
    def find_by_name(name: str) -> QueryResult:
        """
        Get a user by login name.

        Args:
            name: login name

        Returns:
            QueryResult with at most one User
        """
        logger.debug(f"Fetching user by name: {name}")
        try:
            row = query_db(
                'SELECT user_id, name, password FROM users WHERE name = ? LIMIT 1',
                [name],
                one=True
            )
        except StoreError as e:
            logger.error(f"User lookup failed: {e}")
            return QueryResult.failed(e)

        if row is None:
            return QueryResult.of([])

        try:
            return QueryResult.of([User.from_row(row)])
        except DecodeError as e:
            logger.error(f"User record for {name!r} is undecodable: {e}")
            return QueryResult.failed(e)
