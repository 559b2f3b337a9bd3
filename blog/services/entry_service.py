"""
Business logic for listing pages, single entries and tag title lists.

Every read goes through a ContentCache. Internally each lookup resolves to a
tagged Resolution (found, not found, store error); the public get_* methods
flatten a store error into the same "empty" answer as not found, which is
what the route layer expects.
"""

from typing import Any, List, NamedTuple, Optional, Tuple
import logging

from blog.cache import ContentCache
from blog.exceptions import ValidationError
from blog.models import (
    PageResult,
    PaginatorLink,
    Post,
    TagDescriptor,
    TitleListEntry,
    ViewEntry,
)
from blog.repositories import EntryRepository, FOUND, NOT_FOUND, ERROR
from blog.utils.links import LinkBuilder

logger = logging.getLogger(__name__)

# Largest OFFSET SQLite can bind (signed 64-bit)
MAX_STORE_OFFSET = 2 ** 63 - 1


class Resolution(NamedTuple):
    status: str
    value: Any

    @property
    def cacheable(self) -> bool:
        return self.status != ERROR


class EntryService:
    """
    Read side of the blog: pagination, entry lookup, tag listings.

    Args:
        links: URI builder rooted at ROOT_PATH
        page_size: entries per listing page
        max_cache_entries: per-cache memo bound (None = unbounded)
    """

    def __init__(self, links: LinkBuilder, page_size: int, max_cache_entries: Optional[int] = None):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.links = links
        self.page_size = page_size
        self.page_cache = ContentCache('page', max_cache_entries)
        self.entry_cache = ContentCache('entry', max_cache_entries)
        self.title_list_cache = ContentCache('title_list', max_cache_entries)

    # --- Transformations ---

    def _entry_tags(self, post: Post) -> Tuple[TagDescriptor, ...]:
        return tuple(TagDescriptor(name=name, uri=self.links.tag_uri(name)) for name in post.tags)

    def to_view_entry(self, post: Post) -> ViewEntry:
        return ViewEntry(
            entry_id=post.entry_id,
            uri=self.links.entry_uri(post.entry_code),
            publish_date=post.publish_date,
            title=post.title,
            content=post.content,
            tags=self._entry_tags(post),
        )

    def to_title_list_entry(self, post: Post) -> TitleListEntry:
        return TitleListEntry(
            uri=self.links.entry_uri(post.entry_code),
            publish_date=post.publish_date,
            title=post.title,
            tags=self._entry_tags(post),
        )

    def _next_link(self, page_number: int) -> PaginatorLink:
        # "next" walks toward newer entries; page 0 is the newest
        if page_number == 0:
            return PaginatorLink()
        return PaginatorLink(exists=True, uri=self.links.page_uri(page_number - 1))

    # --- Tagged lookups ---

    def resolve_page(self, page_number: int) -> Resolution:
        """
        Resolve one listing page, consulting the cache.

        Fetches page_size + 1 entries; the extra one only signals that an
        older page exists and is never shown.

        Raises:
            ValidationError: page_number is negative
        """
        if page_number < 0:
            raise ValidationError(f"Page number must be at least 0, got {page_number}")
        return self.page_cache.get_or_compute(
            page_number,
            lambda: self._load_page(page_number),
            store_if=lambda resolution: resolution.cacheable
        )

    def _load_page(self, page_number: int) -> Resolution:
        offset = page_number * self.page_size
        if offset > MAX_STORE_OFFSET:
            # No store can hold that many entries: past the end
            logger.debug(f"Page {page_number} is beyond any storable offset")
            return Resolution(NOT_FOUND, PageResult(next=self._next_link(page_number)))

        result =EntryRepository.find_page(skip=offset, limit=self.page_size + 1)
        if result.failed_query:
            logger.error(f"Page {page_number} unavailable: {result.error}")
            return Resolution(ERROR, PageResult())

        posts = result.records
        previous = PaginatorLink()
        if len(posts) > self.page_size:
            previous = PaginatorLink(exists=True, uri=self.links.page_uri(page_number + 1))
            posts = posts[:self.page_size]

        page = PageResult(
            entries=tuple(self.to_view_entry(post) for post in posts),
            next=self._next_link(page_number),
            previous=previous,
        )
        logger.debug(f"Built page {page_number}: {len(page.entries)} entries")
        return Resolution(FOUND if page.entries else NOT_FOUND, page)

    def resolve_entry(self, entry_code: str) -> Resolution:
        """Resolve a published entry by code. Only found entries are cached."""
        return self.entry_cache.get_or_compute(
            entry_code,
            lambda: self._load_entry(entry_code),
            store_if=lambda resolution: resolution.status == FOUND
        )

    def _load_entry(self, entry_code: str) -> Resolution:
        result = EntryRepository.find_by_code(entry_code, published_only=True)
        if result.failed_query:
            logger.error(f"Entry {entry_code!r} unavailable: {result.error}")
            return Resolution(ERROR, ViewEntry.empty())
        post = result.first()
        if post is None:
            return Resolution(NOT_FOUND, ViewEntry.empty())
        return Resolution(FOUND, self.to_view_entry(post))

    def resolve_title_list(self, tag_name: str) -> Resolution:
        """Resolve the published entries of a tag. Empty lists are cached too."""
        return self.title_list_cache.get_or_compute(
            tag_name,
            lambda: self._load_title_list(tag_name),
            store_if=lambda resolution: resolution.cacheable
        )

    def _load_title_list(self, tag_name: str) -> Resolution:
        result = EntryRepository.find_by_tag(tag_name, published_only=True)
        if result.failed_query:
            logger.error(f"Title list for tag {tag_name!r} unavailable: {result.error}")
            return Resolution(ERROR, ())
        titles = tuple(self.to_title_list_entry(post) for post in result.records)
        return Resolution(FOUND if titles else NOT_FOUND, titles)

    # --- Flattened API used by routes ---

    def get_page(self, page_number: int) -> PageResult:
        """Listing page; empty entries mean "nothing to show" (not found or store failure)."""
        return self.resolve_page(page_number).value

    def get_entry(self, entry_code: str) -> ViewEntry:
        """Entry by code; a sentinel with entry_id < 1 means not found or store failure."""
        return self.resolve_entry(entry_code).value

    def get_title_list(self, tag_name: str) -> Tuple[TitleListEntry, ...]:
        """Title list of a tag; empty means no published entries or store failure."""
        return self.resolve_title_list(tag_name).value

    @staticmethod
    def get_all_entries() -> List[Post]:
        """Every stored entry, unfiltered and uncached. Admin export only."""
        result = EntryRepository.find_all()
        if result.failed_query:
            logger.error(f"Export query failed, returning {len(result.records)} entries: {result.error}")
        return result.records
