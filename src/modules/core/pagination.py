"""Page/limit pagination for list endpoints.

Response shape: ``{"items": [...], "page", "limit", "total", "pages"}``.
``page`` is 1-based; ``limit`` is capped by ``settings.MAX_PAGE_SIZE``.
"""

from __future__ import annotations

import math

from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PageLimitPagination(PageNumberPagination):
    page_query_param = "page"
    page_size_query_param = "limit"

    def __init__(self, page_size: int | None = None) -> None:
        if page_size is not None:
            self.page_size = page_size
        self.max_page_size = settings.MAX_PAGE_SIZE

    def get_paginated_response(self, data) -> Response:
        total = self.page.paginator.count
        limit = self.page.paginator.per_page
        return Response(
            {
                "items": data,
                "page": self.page.number,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "required": ["items", "page", "limit", "total", "pages"],
            "properties": {
                "items": schema,
                "page": {"type": "integer", "example": 1},
                "limit": {"type": "integer", "example": self.page_size},
                "total": {"type": "integer", "example": 42},
                "pages": {"type": "integer", "example": 5},
            },
        }
