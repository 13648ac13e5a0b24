"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Builds one structured event per request (method, path, params, status,
duration, error detail and error code) and ships it to Axiom when a token
and dataset are configured. Without Axiom the event is written to the
stdlib logger at DEBUG level. Sensitive fields are masked.
"""

import json
import logging
import re
import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from axiom_py import Client as AxiomClient

from app.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and params
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# 알림 본문은 길 수 있으므로 잘라서 기록 — Notification bodies can be long
_MAX_FIELD_LENGTH = 500


def _mask(data: Any, depth: int = 0) -> Any:
    """민감 필드 마스킹 및 긴 문자열 절단 — Mask secrets and shorten long strings."""
    if depth > 4:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else _mask(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        # 대상 사용자 목록은 개수만 의미 있음 — Only the first few target ids are kept
        return [_mask(item, depth + 1) for item in data[:10]]
    if isinstance(data, str) and len(data) > _MAX_FIELD_LENGTH:
        return data[:_MAX_FIELD_LENGTH] + "...(truncated)"
    return data


async def _read_error_body(response: Response) -> tuple[bytes, str | None, str | None]:
    """오류 응답 본문을 소비하고 detail/code를 추출합니다.

    Drain an error response body and pull out ``detail`` and ``code``.
    """
    body = b""
    async for chunk in response.body_iterator:
        body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body, body.decode("utf-8", errors="replace")[:_MAX_FIELD_LENGTH], None

    if not isinstance(data, dict):
        return body, str(data)[:_MAX_FIELD_LENGTH], None
    detail = data.get("detail")
    detail_text = detail if isinstance(detail, str) else json.dumps(detail)[:_MAX_FIELD_LENGTH]
    return body, detail_text, data.get("code")


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 구조화된 이벤트로 기록하는 미들웨어.

    Middleware that records every API request as a structured event.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 제외 경로 스킵 — Skip excluded paths
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        event: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
        }
        if request.query_params:
            event["query_params"] = _mask(dict(request.query_params))

        # Request body 읽기 — Read request body (only for methods with body)
        if request.method in ("POST", "PUT", "PATCH"):
            body_bytes = await request.body()
            if body_bytes:
                try:
                    event["request_body"] = _mask(json.loads(body_bytes))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    event["request_body"] = "(non-json body)"

        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code

            # 에러 응답시 사유/코드 추출 후 body 재구성 — Extract detail/code and re-wrap the body
            if status_code >= 400:
                body, detail, code = await _read_error_body(response)
                if detail:
                    event["error"] = detail
                if code:
                    event["error_code"] = code
                response = Response(
                    content=body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["status_code"] = status_code
            event["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
            self._emit(event)

        return response

    def _emit(self, event: dict[str, Any]) -> None:
        """이벤트를 Axiom 또는 표준 로거로 전송합니다 (Ship to Axiom or the stdlib logger)."""
        if self._client is None:
            logger.debug("request %s", event)
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            # 로깅 실패가 요청 처리에 영향주지 않도록 — Never break a request on log failure
            logger.warning("Axiom ingest failed for %s %s", event["method"], event["path"], exc_info=True)
