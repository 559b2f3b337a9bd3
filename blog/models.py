"""
Data model for the blog content core.

Post and User mirror stored records. The remaining classes are the
view-ready shapes handed to templates and cached by EntryService.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from blog.exceptions import DecodeError

PUBLISHED = 1


@dataclass
class Post:
    """A stored blog post. Read-only from the content core's perspective."""
    entry_id: int
    entry_code: str
    publish_date: str
    title: str
    content: str
    tags: List[str] = field(default_factory=list)
    is_published: int = 0
    author_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Post':
        """
        Decode a row of the entries table.

        Raises:
            DecodeError: missing columns or a tags field that is not a
                JSON array of strings
        """
        try:
            tags = json.loads(row['tags'] or '[]')
            if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
                raise DecodeError(f"tags of entry {row.get('entry_code')!r} is not a list of strings")
            return cls(
                entry_id=int(row['entry_id']),
                entry_code=row['entry_code'],
                publish_date=row['publish_date'],
                title=row['title'],
                content=row['content'],
                tags=tags,
                is_published=int(row['is_published']),
                author_id=row['author_id'],
                created_at=row['created_at'],
                updated_at=row['updated_at'],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Undecodable entry record: {e}") from e

    @property
    def published(self) -> bool:
        return self.is_published == PUBLISHED

    def to_dict(self) -> Dict[str, Any]:
        """Export shape used by the admin API."""
        return {
            'entryId': self.entry_id,
            'entryCode': self.entry_code,
            'publishDate': self.publish_date,
            'title': self.title,
            'content': self.content,
            'tag': list(self.tags),
            'isPublished': self.is_published,
            'authorId': self.author_id,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }


@dataclass
class User:
    """Backend account. password holds a werkzeug password hash."""
    user_id: int
    name: str
    password: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'User':
        try:
            return cls(user_id=int(row['user_id']), name=row['name'], password=row['password'])
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Undecodable user record: {e}") from e


@dataclass(frozen=True)
class TagDescriptor:
    """Tag name and link. count is only set in the global tag index."""
    name: str
    uri: str
    count: Optional[int] = None


@dataclass(frozen=True)
class ViewEntry:
    entry_id: int
    uri: str
    publish_date: str
    title: str
    content: str
    tags: tuple = ()

    @classmethod
    def empty(cls) -> 'ViewEntry':
        """Sentinel for "no such published entry"."""
        return cls(entry_id=0, uri='', publish_date='', title='', content='')

    @property
    def found(self) -> bool:
        return self.entry_id >= 1


@dataclass(frozen=True)
class PaginatorLink:
    exists: bool = False
    uri: str = ''


@dataclass(frozen=True)
class PageResult:
    """One listing page plus its navigation links."""
    entries: tuple = ()
    next: PaginatorLink = PaginatorLink()
    previous: PaginatorLink = PaginatorLink()


@dataclass(frozen=True)
class TitleListEntry:
    uri: str
    publish_date: str
    title: str
    tags: tuple = ()
