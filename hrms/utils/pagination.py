# hrms/utils/pagination.py

"""
page/limit 요청 파라미터를 offset/limit 쌍과 응답 메타데이터로 변환합니다.
잘못된 값은 거부하지 않고 기본값으로 되돌립니다.
"""

import math
from typing import Any, Dict, NamedTuple, Optional

from fastapi import Query

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class PaginationParams(NamedTuple):
    page: int
    limit: int


def get_pagination_params(page: Optional[int] = None, limit: Optional[int] = None) -> PaginationParams:
    """
    - page: 1 이상이 아니면 1
    - limit: 1~100 범위가 아니면 10 (100으로 자르지 않고 기본값으로 되돌림)
    """
    valid_page = page if page is not None and page > 0 else DEFAULT_PAGE
    valid_limit = limit if limit is not None and 0 < limit <= MAX_LIMIT else DEFAULT_LIMIT
    return PaginationParams(page=valid_page, limit=valid_limit)


def calculate_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def get_pagination_metadata(total: int, page: int, limit: int) -> Dict[str, Any]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


class ListParams:
    """
    목록 엔드포인트 공통 쿼리 파라미터 (page, limit, sortBy, sortOrder, search).
    범위를 벗어난 page/limit 은 422 로 거부하지 않고 get_pagination_params 가 기본값으로 되돌립니다.
    """

    def __init__(
        self,
        page: Optional[int] = Query(None, description="페이지 번호 (기본 1)"),
        limit: Optional[int] = Query(None, description="페이지 크기 (1~100, 기본 10)"),
        sortBy: Optional[str] = Query(None, description="정렬 컬럼 (기본 createdAt)"),
        sortOrder: Optional[str] = Query(None, description="ASC 또는 DESC (기본 DESC)"),
        search: Optional[str] = Query(None, description="여러 컬럼 부분 일치 검색어"),
    ):
        self.page = page
        self.limit = limit
        self.sort_by = sortBy
        self.sort_order = sortOrder
        self.search = search
