"""query"""

from .query_service import QueryService

__all__ = [
    "QueryService",
]
