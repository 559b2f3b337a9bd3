"""
URI construction for entries, tags and listing pages.

All public URIs hang off ROOT_PATH, which always ends with a slash.
"""

from urllib.parse import quote


def normalize_root_path(root_path: str) -> str:
    """Ensure the root path starts and ends with '/'."""
    root_path = root_path or '/'
    if not root_path.startswith('/'):
        root_path = '/' + root_path
    if not root_path.endswith('/'):
        root_path += '/'
    return root_path


class LinkBuilder:
    def __init__(self, root_path: str = '/'):
        self.root_path = normalize_root_path(root_path)
        self.page_prefix = self.root_path + 'page/'
        self.tag_prefix = self.root_path + 'tag/'

    def entry_uri(self, entry_code: str) -> str:
        return self.root_path + quote(entry_code, safe='')

    def tag_uri(self, tag_name: str) -> str:
        return self.tag_prefix + quote(tag_name, safe='')

    def page_uri(self, page_number: int) -> str:
        # Page 0 is the index itself
        if page_number == 0:
            return self.root_path
        return f'{self.page_prefix}{page_number}'
