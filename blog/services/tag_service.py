"""
Global tag index.

Built by scanning every entry (published or not) once at startup and again
on an explicit admin refresh. The index is replaced wholesale by a single
reference swap, so readers always see a complete list and need no lock.
"""

from typing import Dict, List, Tuple
import logging

from blog.models import TagDescriptor
from blog.repositories import EntryRepository
from blog.utils.links import LinkBuilder

logger = logging.getLogger(__name__)


def aggregate_tags(tag_lists, links: LinkBuilder) -> List[TagDescriptor]:
    """
    Count tag occurrences across tag lists.

    Order is the order of first appearance; no sorting is applied.

    Args:
        tag_lists: iterable of per-entry tag name lists
        links: builds each tag's URI

    Returns:
        TagDescriptor list with counts
    """
    counts: Dict[str, int] = {}
    for tags in tag_lists:
        for name in tags:
            counts[name] = counts.get(name, 0) + 1
    return [TagDescriptor(name=name, uri=links.tag_uri(name), count=count)
            for name, count in counts.items()]


class TagService:
    """Owns the global tag index"""

    def __init__(self, links: LinkBuilder):
        self.links = links
        self._tags: Tuple[TagDescriptor, ...] = ()
        self.last_error = None

    @property
    def tags(self) -> Tuple[TagDescriptor, ...]:
        return self._tags

    def rebuild_tag_index(self) -> Tuple[TagDescriptor, ...]:
        """
        Rescan all entries and replace the tag index.

        Undecodable entries are skipped. If the store query itself fails the
        previous index is kept.

        Returns:
            The index now in effect
        """
        result = EntryRepository.scan_all()
        if result.failed_query:
            logger.error(f"Tag index rebuild failed, keeping {len(self._tags)} tags: {result.error}")
            self.last_error = result.error
            return self._tags

        self.last_error = None
        self._tags = tuple(aggregate_tags((post.tags for post in result.records), self.links))
        logger.info(f"Tag index rebuilt: {len(self._tags)} tags from {len(result.records)} entries")
        return self._tags
