"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Every error raised by the data access layer carries the HTTP status code
the API should answer with, so FastAPI renders it without extra handlers.

Usage:
    from app.utils.exceptions import ConflictError, NotFoundError
    raise NotFoundError("Security not found")
    raise ConflictError("Database error trying to save something that already exists.")
"""

from fastapi import HTTPException, status


class HttpStatusCodeError(HTTPException):
    """HTTP 상태 코드를 포함하는 예외의 공통 부모.

    Base exception carrying an HTTP status code and a message used to
    shape the HTTP response. Defaults to 500 Internal Server Error.

    Args:
        status_code: HTTP 상태 코드 (HTTP status code)
        detail: 오류 메시지 (Error message)
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(HttpStatusCodeError):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised by the HTTP layer when a looked-up record (security, watchlist) does not exist.
    The data access service itself returns None for absent records.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HttpStatusCodeError):
    """409 Conflict 예외 — 유일성 제약 위반 시 사용.

    409 Conflict exception.
    Raised when a save violates a uniqueness constraint (duplicate primary
    key, duplicate ticker symbol). The store error is chained as ``__cause__``.
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class PagingError(HttpStatusCodeError):
    """400 Bad Request 예외 — 결과 범위를 벗어난 페이지 요청.

    400 Bad Request exception.
    Raised when the requested page starts past the end of the result set;
    the caller must resubmit with a valid page.
    """

    def __init__(
        self,
        detail: str = "More rows were requested than are returned by the query.",
    ) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
