"""페이지네이션 유틸리티 모듈.

Pagination utility module.
Provides the Pager (page/page size/offset), the ResultSet returned by the
data access service, the pager sanity check, and a Page response model
for consistent pagination across list endpoints.
"""

from math import ceil
from typing import Any, Generic, Iterable, TypeVar

from pydantic import BaseModel

from app.utils.exceptions import PagingError

T = TypeVar("T")

DEFAULT_PAGE_NUMBER: int = 1
DEFAULT_PAGE_SIZE: int = 10


class Pager:
    """페이지 번호/크기/오프셋 묶음.

    Page number, page size and row offset used to slice a result set.
    Missing or non-positive inputs are replaced with the defaults
    (page 1, page size 10) instead of being rejected. There is no upper
    bound on the page size.

    Attributes:
        page: 현재 페이지 번호, 1부터 시작 (Current page, 1-indexed)
        page_size: 페이지당 항목 수 (Items per page)
        offset: 건너뛸 행 수 (Rows to skip: (page - 1) * page_size)
    """

    def __init__(self, page: int | None = None, page_size: int | None = None) -> None:
        self.page: int = page if page is not None and page >= 1 else DEFAULT_PAGE_NUMBER
        self.page_size: int = (
            page_size if page_size is not None and page_size >= 1 else DEFAULT_PAGE_SIZE
        )
        self.offset: int = (self.page - 1) * self.page_size

    def __repr__(self) -> str:
        return f"Pager(page={self.page}, page_size={self.page_size}, offset={self.offset})"


class ResultSet(list, Generic[T]):
    """레코드 목록과 전체 개수 메타데이터.

    An ordered list of records plus ``total_pages`` and ``total_results``.
    When a pager was applied the totals describe the whole (unpaged)
    result; otherwise they describe the returned list.
    """

    def __init__(
        self,
        results: Iterable[T] = (),
        total_pages: int = 0,
        total_results: int = 0,
    ) -> None:
        super().__init__(results)
        self.total_pages: int = total_pages
        self.total_results: int = total_results


def sanity_check_pager(total_rows: int, pager: Pager | None) -> None:
    """요청한 페이지가 결과 범위 안에 있는지 확인합니다.

    Reject a page that starts past the end of the result set. A partial
    last page is allowed.

    Args:
        total_rows: 페이징 없이 조회한 전체 행 수 (Row count without pagination)
        pager: 검사할 페이저, None이면 검사 생략 (Pager to check; None skips the check)

    Raises:
        PagingError: offset이 전체 행 수보다 클 때 (When offset > total_rows)
    """
    if pager is not None and pager.offset > total_rows:
        raise PagingError("More rows were requested than are returned by the query.")


def total_pages_for(total_results: int, page_size: int) -> int:
    """전체 페이지 수 — ceil(total_results / page_size)."""
    return ceil(total_results / page_size)


class Page(BaseModel, Generic[T]):
    """페이지네이션 결과 모델.

    Pagination result model for typed responses.
    Contains the paginated items and metadata for client-side pagination controls.

    Attributes:
        items: 현재 페이지 항목 목록 (Items for the current page)
        total_results: 전체 항목 수 (Total count across all pages)
        total_pages: 전체 페이지 수 (Total number of pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        page_size: 페이지당 항목 수 (Items per page)
    """

    items: list[T]  # 현재 페이지 항목 목록 (Paginated items)
    total_results: int  # 전체 항목 수 (Total item count)
    total_pages: int  # 전체 페이지 수 (Total pages, computed: ceil(total/page_size))
    page: int  # 현재 페이지 번호 — 1부터 시작 (Current page, 1-indexed)
    page_size: int  # 페이지당 항목 수 (Items per page)

    @classmethod
    def from_result_set(cls, items: list[Any], result_set: ResultSet, pager: Pager) -> "Page":
        """ResultSet과 Pager로 응답 모델을 생성합니다.

        Build a page response from already converted ``items`` and the
        metadata of the ResultSet they came from.
        """
        return cls(
            items=items,
            total_results=result_set.total_results,
            total_pages=result_set.total_pages,
            page=pager.page,
            page_size=pager.page_size,
        )
