# File: /interface_engine/routers/health.py | Version: 1.1 | Title: Health & readiness endpoints
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from interface_engine.db.session import engine

log = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


@router.get("/readyz")
def readyz():
    """
    Readiness probe: 200 if the row store is reachable (SELECT 1), else 503.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ok", "db": "ok"}
    except SQLAlchemyError as exc:
        log.warning("Readiness check failed: %s", exc)
        return JSONResponse({"status": "degraded", "db": "error"}, status_code=503)
