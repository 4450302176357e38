# File: /interface_engine/core/error_handlers.py | Version: 2.0 | Title: Error handlers (data-store errors always; standardized envelope optional)
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from interface_engine.core.cancellation import QueryCancelledError
from interface_engine.core.layout import CorruptedLayoutError
from interface_engine.db.query_builder import QueryFailedError

log = logging.getLogger(__name__)

_CODE_MAP = {
    400: "BAD_REQUEST",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "UNPROCESSABLE_ENTITY",
    500: "INTERNAL_SERVER_ERROR",
    502: "BAD_GATEWAY",
    504: "GATEWAY_TIMEOUT",
}


def _err(code: int, message: str):
    return {"error": {"code": _CODE_MAP.get(code, "ERROR"), "message": message}}


def register_query_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(QueryFailedError)
    async def _query_failed(_req: Request, exc: QueryFailedError):
        log.warning("Data store query failed: [%s] %s", exc.error.code, exc.error.message)
        return JSONResponse(
            status_code=502, content={"detail": f"Query failed ({exc.error.code}): {exc.error.message}"}
        )

    @app.exception_handler(QueryCancelledError)
    async def _query_cancelled(_req: Request, exc: QueryCancelledError):
        return JSONResponse(status_code=504, content={"detail": f"Query cancelled: {exc}"})

    @app.exception_handler(CorruptedLayoutError)
    async def _corrupted_layout(_req: Request, exc: CorruptedLayoutError):
        log.error("%s", exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_exc(_req: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code, content=_err(exc.status_code, str(exc.detail))
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_exc(_req: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content=_err(422, "Validation error"))

    @app.exception_handler(QueryFailedError)
    async def _query_failed(_req: Request, exc: QueryFailedError):
        log.warning("Data store query failed: [%s] %s", exc.error.code, exc.error.message)
        return JSONResponse(status_code=502, content=_err(502, exc.error.message))

    @app.exception_handler(QueryCancelledError)
    async def _query_cancelled(_req: Request, exc: QueryCancelledError):
        return JSONResponse(status_code=504, content=_err(504, str(exc)))

    @app.exception_handler(CorruptedLayoutError)
    async def _corrupted_layout(_req: Request, exc: CorruptedLayoutError):
        log.error("%s", exc)
        return JSONResponse(status_code=500, content=_err(500, str(exc)))

    @app.exception_handler(Exception)
    async def _unhandled(_req: Request, exc: Exception):
        # Avoid leaking internals
        log.exception("Unhandled error")
        return JSONResponse(status_code=500, content=_err(500, "Internal server error"))
