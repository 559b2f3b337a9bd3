"""
Service layer for business logic.

Services hold the content cache and the tag index; they talk to the store
only through repositories.
"""

from blog.services.entry_service import EntryService, Resolution
from blog.services.tag_service import TagService, aggregate_tags

__all__ = ['EntryService', 'Resolution', 'TagService', 'aggregate_tags']
