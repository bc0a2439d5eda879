"""
Health check endpoints for monitoring system status.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from spotjott.config import API_VERSION
from spotjott.db import get_session
from spotjott.deps import media_store

router = APIRouter(prefix="/health", tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_database_health() -> Dict[str, str]:
    """
    Check database connectivity and health.

    Returns:
        Dict with status and optional error details
    """
    try:
        with get_session() as db:
            result = db.execute(text("SELECT 1")).scalar()
            if result == 1:
                return {"status": "ok"}
            else:
                return {"status": "down", "error": "Unexpected query result"}
    except SQLAlchemyError as e:
        return {"status": "down", "error": f"Database error: {str(e)}"}
    except Exception as e:
        return {"status": "down", "error": f"Connection error: {str(e)}"}


def check_media_health() -> Dict[str, str]:
    """
    Check that the media store accepts writes.

    Returns:
        Dict with status and optional error details
    """
    try:
        if media_store.is_available():
            return {"status": "ok"}
        return {"status": "down", "error": "Media store is not writable"}
    except Exception as e:
        return {"status": "down", "error": f"Media store error: {str(e)}"}


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """
    Comprehensive health check endpoint.

    Returns:
        Dict containing:
        - status: "ok" | "degraded" | "down"
        - db: database health status
        - media: media store health status
        - version: API version
        - timestamp: current UTC timestamp
    """
    db_health = check_database_health()
    media_status = check_media_health()

    overall_status = "ok"
    if db_health["status"] == "down":
        overall_status = "down"  # Database is critical
    elif media_status["status"] == "down":
        overall_status = "degraded"  # uploads fail, reads still work

    return {
        "status": overall_status,
        "db": db_health,
        "media": media_status,
        "version": API_VERSION,
        "timestamp": _now(),
    }


@router.get("/db")
async def database_health() -> Dict[str, Any]:
    """
    Database-specific health check, with row counts for the main tables.
    """
    health_status = check_database_health()
    if health_status["status"] != "ok":
        return health_status

    try:
        with get_session() as db:
            user_count = db.execute(text("SELECT COUNT(*) FROM users")).scalar()
            jot_count = db.execute(text("SELECT COUNT(*) FROM jots")).scalar()
            entry_count = db.execute(text("SELECT COUNT(*) FROM diary_entries")).scalar()

            health_status.update({
                "tables": {
                    "users": user_count,
                    "jots": jot_count,
                    "diary_entries": entry_count,
                },
                "timestamp": _now(),
            })
    except Exception as e:
        health_status["error"] = f"Extended check failed: {str(e)}"

    return health_status


@router.get("/media")
async def media_health() -> Dict[str, Any]:
    health_status = check_media_health()
    health_status.update({"root": media_store.root, "timestamp": _now()})
    return health_status
