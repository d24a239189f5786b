# hrms/core/exceptions.py

"""
애플리케이션 공통 예외와 오류 응답 핸들러를 정의하는 모듈입니다.

- CRUD/서비스 계층은 아래의 타입 지정 예외(HTTPException 하위 클래스)를 발생시킵니다.
- `register_exception_handlers(app)`로 등록되는 핸들러는 모든 실패를 동일한 형태로 응답합니다:
  {statusCode, timestamp, path, method, message: [..], error}
"""

import logging
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# =============================================================================
# 1. 타입 지정 예외
# =============================================================================
class BadRequestError(HTTPException):
    def __init__(self, detail: Any = "Bad Request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: Any = "Not Found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: Any = "Conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: Any = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    def __init__(self, detail: Any = "Insufficient permissions"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


# =============================================================================
# 2. 공통 오류 응답
# =============================================================================
def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _as_message_list(detail: Any) -> List[str]:
    if detail is None:
        return []
    if isinstance(detail, (list, tuple)):
        return [str(item) for item in detail]
    return [str(detail)]


def error_response(
    request: Request,
    *,
    status_code: int,
    message: Any,
    error: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    payload = {
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "path": request.url.path,
        "method": request.method,
        "message": _as_message_list(message),
        "error": error or _reason_phrase(status_code),
    }
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def _format_validation_error(err: Dict[str, Any]) -> str:
    # 'body', 'query' 등 위치 접두사는 제외하고 필드 경로만 남깁니다.
    loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    return f"{field}: {err.get('msg')}" if field else str(err.get("msg"))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        request,
        status_code=exc.status_code,
        message=exc.detail,
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        request,
        status_code=status.HTTP_400_BAD_REQUEST,
        message=[_format_validation_error(err) for err in exc.errors()],
    )


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    # 존재하지 않는 FK 참조, 유니크 제약 경합 등 데이터 무결성 오류
    logger.warning("integrity_error", extra={"path": request.url.path, "method": request.method})
    return error_response(
        request,
        status_code=status.HTTP_400_BAD_REQUEST,
        message=str(exc.orig) if exc.orig is not None else str(exc),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", extra={"path": request.url.path, "method": request.method})
    return error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
