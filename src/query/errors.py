# src/query/errors.py — v1
"""Query engine error taxonomy.

Not-found conditions are never errors: they surface as empty views or None.
Store failures are not wrapped; they reach the caller unchanged.
"""

from __future__ import annotations


class GraphQueryError(Exception):
    """Base class for errors raised by the query engine itself."""


class InvalidQueryError(GraphQueryError, ValueError):
    """Raised before any store call when query arguments are invalid."""


class QueryCancelledError(GraphQueryError):
    """Raised when a query is cancelled or exceeds its deadline.

    Distinct from an empty result: no partial view is returned.
    """

    def __init__(self, operation: str, reason: str = "cancelled") -> None:
        super().__init__(f"{operation} {reason}")
        self.operation = operation
        self.reason = reason
