"""Custom exceptions for the blog backend.

These exceptions make it clear what kind of failure occurred, rather than
catching generic Exception everywhere.
"""


class BlogError(Exception):
    """Base exception for all blog operations."""
    pass


class StoreError(BlogError):
    """Document store query failed (unreachable, locked, bad SQL)."""
    pass


class StoreTimeoutError(StoreError):
    """Document store query exceeded STORE_QUERY_TIMEOUT."""
    pass


class DecodeError(StoreError):
    """A stored record could not be decoded into a Post."""
    pass


class ValidationError(BlogError):
    """Invalid input (negative page number, bad form data, etc.)."""
    pass


class UploadError(BlogError):
    """Image upload rejected or could not be written."""
    pass
