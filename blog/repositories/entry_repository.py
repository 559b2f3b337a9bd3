"""
Repository for blog entry data access.

Centralizes all entry-related store queries.
Philosophy: Single source of truth for entry data access patterns.

Every method answers a QueryResult instead of raising: store, timeout and
decode failures come back as ERROR results carrying whatever records were
decoded before the failure.
"""

from typing import Any, Dict, List, Optional
from blog.db_manager import query_db
from blog.exceptions import DecodeError, StoreError
from blog.models import Post, PUBLISHED
from blog.repositories.query_result import QueryResult
import logging

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = '''
    entry_id, entry_code, publish_date, title, content, tags,
    is_published, author_id, created_at, updated_at
'''

# Newest first; entry_id keeps same-day entries in a stable order
NEWEST_FIRST = 'ORDER BY publish_date DESC, entry_id DESC'

HAS_TAG = 'EXISTS (SELECT 1 FROM json_each(entries.tags) WHERE json_each.value = ?)'


def _decode_all(rows: List[Dict[str, Any]], stop_on_error: bool = True) -> QueryResult:
    """
    Decode rows into Posts.

    With stop_on_error the first undecodable row ends the walk and the result
    is an ERROR carrying the rows decoded so far. Otherwise bad rows are
    skipped and logged.
    """
    posts = []
    for row in rows:
        try:
            posts.append(Post.from_row(row))
        except DecodeError as e:
            if stop_on_error:
                logger.error(f"Decode failure, returning {len(posts)} decoded entries: {e}")
                return QueryResult.failed(e, posts)
            logger.warning(f"Skipping undecodable entry: {e}")
    return QueryResult.of(posts)


def _run(query: str, args: List[Any], stop_on_error: bool = True) -> QueryResult:
    try:
        rows = query_db(query, args)
    except StoreError as e:
        logger.error(f"Entry query failed: {e}")
        return QueryResult.failed(e)
    return _decode_all(rows, stop_on_error=stop_on_error)


class EntryRepository:
    """Data access layer for blog entries"""

    @staticmethod
    def find_by_code(entry_code: str, published_only: bool = True) -> QueryResult:
        """
        Get a single entry by its code (slug).

        Args:
            entry_code: URL-safe entry code
            published_only: exclude unpublished entries

        Returns:
            QueryResult with at most one Post
        """
        logger.debug(f"Fetching entry by code: {entry_code}")
        where = 'entry_code = ?'
        args: List[Any] = [entry_code]
        if published_only:
            where += ' AND is_published = ?'
            args.append(PUBLISHED)
        return _run(f'SELECT {ENTRY_COLUMNS} FROM entries WHERE {where} LIMIT 1', args)

    @staticmethod
    def find_page(skip: int, limit: int, published_only: bool = True) -> QueryResult:
        """
        Get a window of entries, newest first.

        Args:
            skip: number of entries to skip
            limit: maximum number of entries to return
            published_only: exclude unpublished entries

        Returns:
            QueryResult with up to limit Posts
        """
        logger.debug(f"Fetching entry page: skip={skip} limit={limit}")
        where = 'WHERE is_published = ?' if published_only else ''
        args: List[Any] = [PUBLISHED] if published_only else []
        args.extend([limit, skip])
        return _run(
            f'SELECT {ENTRY_COLUMNS} FROM entries {where} {NEWEST_FIRST} LIMIT ? OFFSET ?',
            args
        )

    @staticmethod
    def find_by_tag(tag_name: str, published_only: bool = True) -> QueryResult:
        """
        Get every entry carrying a tag, newest first.

        Args:
            tag_name: exact tag name
            published_only: exclude unpublished entries

        Returns:
            QueryResult with matching Posts
        """
        logger.debug(f"Fetching entries by tag: {tag_name}")
        where = HAS_TAG
        args: List[Any] = [tag_name]
        if published_only:
            where += ' AND is_published = ?'
            args.append(PUBLISHED)
        return _run(f'SELECT {ENTRY_COLUMNS} FROM entries WHERE {where} {NEWEST_FIRST}', args)

    @staticmethod
    def find_all() -> QueryResult:
        """
        Get every entry, published or not, newest first.

        Admin export only.
        """
        logger.debug("Fetching all entries")
        return _run(f'SELECT {ENTRY_COLUMNS} FROM entries {NEWEST_FIRST}', [])

    @staticmethod
    def scan_all() -> QueryResult:
        """
        Get every entry in storage order, skipping undecodable records.

        Used by tag aggregation, where one bad record must not hide the rest.
        """
        logger.debug("Scanning all entries")
        return _run(f'SELECT {ENTRY_COLUMNS} FROM entries', [], stop_on_error=False)

    @staticmethod
    def count_published() -> Optional[int]:
        """Number of published entries, or None when the store fails."""
        try:
            row = query_db(
                'SELECT COUNT(*) AS cnt FROM entries WHERE is_published = ?',
                [PUBLISHED],
                one=True
            )
        except StoreError as e:
            logger.error(f"Counting entries failed: {e}")
            return None
        return row['cnt'] if row else 0
