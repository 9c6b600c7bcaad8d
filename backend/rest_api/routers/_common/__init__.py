"""
Common utilities shared across routers.
"""

from .pagination import Pagination, get_pagination
from .responses import ok, error_body

__all__ = [
    "Pagination",
    "get_pagination",
    "ok",
    "error_body",
]
