"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.logging import get_logger
from src.db.database import get_db

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Return application, database and trade service status."""
    service = getattr(request.app.state, "trade_service", None)
    trade_status = {
        "traders": len(service.list_traders()) if service is not None else 0,
        "active_sessions": service.active_session_count() if service is not None else 0,
    }

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        return {"status": "error", "database": "disconnected", **trade_status}
    return {"status": "ok", "database": "connected", **trade_status}
