"""
Tagged outcome of a repository query.

Repositories never raise for store failures; they answer FOUND, NOT_FOUND or
ERROR. Callers that only care about "is there something to show" treat
ERROR like NOT_FOUND via records/first().
"""

from typing import Any, List, Optional

FOUND = 'found'
NOT_FOUND = 'not_found'
ERROR = 'error'


class QueryResult:
    """Records returned by a query plus how the query ended"""

    def __init__(self, status: str, records: Optional[List[Any]] = None,
                 error: Optional[Exception] = None):
        self.status = status
        self.records = records or []
        self.error = error

    @classmethod
    def of(cls, records: List[Any]) -> 'QueryResult':
        return cls(FOUND if records else NOT_FOUND, records)

    @classmethod
    def failed(cls, error: Exception, partial: Optional[List[Any]] = None) -> 'QueryResult':
        # partial holds records decoded before the failure
        return cls(ERROR, partial, error)

    @property
    def found(self) -> bool:
        return self.status == FOUND

    @property
    def failed_query(self) -> bool:
        return self.status == ERROR

    def first(self) -> Optional[Any]:
        return self.records[0] if self.records else None

    def __bool__(self):
        return self.found

    def __repr__(self):
        return f"QueryResult({self.status}, {len(self.records)} records)"
