from __future__ import annotations

from typing import Dict, Optional

from rabbitmq_http.errors import InvalidArgument

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 500


class PaginationParams:
    """
    Page selection for the paginated list endpoints.

    ``page`` is 1-indexed and ``page_size`` must lie in [1, 500].
    """

    __slots__ = ("page", "page_size")

    def __init__(self, page: Optional[int] = None, page_size: Optional[int] = None):
        if page is not None and page < 1:
            raise InvalidArgument(f"page must be 1 or greater, got {page}")
        if page_size is not None and not 1 <= page_size <= MAX_PAGE_SIZE:
            raise InvalidArgument(
                f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}"
            )
        self.page = page
        self.page_size = page_size

    @classmethod
    def first_page(cls, page_size: int = DEFAULT_PAGE_SIZE) -> PaginationParams:
        return cls(page=1, page_size=page_size)

    def to_query_params(self) -> Optional[Dict[str, int]]:
        params = {}
        if self.page is not None:
            params["page"] = self.page
        if self.page_size is not None:
            params["page_size"] = self.page_size
        return params or None

    def to_query_string(self) -> Optional[str]:
        params = self.to_query_params()
        if params is None:
            return None
        return "&".join(f"{key}={value}" for key, value in params.items())

    def __eq__(self, other):
        if not isinstance(other, PaginationParams):
            return NotImplemented
        return (self.page, self.page_size) == (other.page, other.page_size)

    def __repr__(self):
        return f"PaginationParams(page={self.page!r}, page_size={self.page_size!r})"
