"""요청 로깅 미들웨어 — Axiom 또는 표준 로거로 전송.

Request logging middleware.
Builds one structured event per request (method, path, params, masked
body, actor, status code, duration, error detail). Events go to Axiom when
``AXIOM_API_TOKEN`` and ``AXIOM_DATASET`` are configured and to the
``app.requests`` logger otherwise.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

request_logger = logging.getLogger("app.requests")

# 마스킹 대상 필드 패턴 — Fields masked in request bodies and query strings
_SENSITIVE_KEYS = re.compile(r"(password|secret|token|authorization|api_key|credential)", re.IGNORECASE)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_MAX_BODY_CHARS: int = 2000
_MAX_ERROR_CHARS: int = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 마스킹 — Recursively mask sensitive keys in dicts and lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            key: "***" if _SENSITIVE_KEYS.search(key) else _mask(value, depth + 1)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > _MAX_BODY_CHARS:
        return data[:_MAX_BODY_CHARS] + "...(truncated)"
    return data


def _error_detail(body: bytes) -> str:
    """오류 응답 본문에서 사유 추출 — Pull ``detail`` out of an error response body."""
    try:
        payload: Any = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace")[:_MAX_ERROR_CHARS]
    detail: Any = payload.get("detail", payload) if isinstance(payload, dict) else payload
    return str(detail)[:_MAX_ERROR_CHARS]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 구조화 로그로 남기는 미들웨어.

    Middleware that records every API request and response as a structured
    event.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._dataset: str = settings.AXIOM_DATASET
        self._client: AxiomClient | None = None
        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started: float = time.perf_counter()
        event: dict[str, Any] = {"method": request.method, "path": request.url.path}
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))
        actor_id: str | None = request.headers.get("x-actor-id")
        if actor_id:
            event["actor_id"] = actor_id
        if request.method in ("POST", "PUT", "PATCH"):
            body: bytes = await request.body()
            if body:
                try:
                    event["request_body"] = _mask(json.loads(body))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    event["request_body"] = "(non-json body)"

        event["status_code"] = 500
        try:
            response: Response = await call_next(request)
            event["status_code"] = response.status_code
            if response.status_code >= 400:
                # 본문을 소비했으므로 새 응답으로 다시 감쌈 — Body is consumed, re-wrap it
                content: bytes = b"".join(
                    [chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                     async for chunk in response.body_iterator]
                )
                event["error"] = _error_detail(content)
                response = Response(
                    content=content,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            self._emit(event)

        return response

    def _emit(self, event: dict[str, Any]) -> None:
        if self._client is None:
            level: int = logging.WARNING if event["status_code"] >= 500 else logging.INFO
            request_logger.log(
                level, "%s %s -> %s (%.2f ms)",
                event["method"], event["path"], event["status_code"], event["duration_ms"],
                extra={"event": event},
            )
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            # 로깅 실패는 요청 처리에 영향 없음 — Ingest failures never fail the request
            request_logger.exception("Failed to send request event to Axiom")
