"""Health endpoints."""

# ruff: noqa: I001
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from app.core.settings import settings
from db import engine

router = APIRouter()


@router.get("/health")
def health_check():
    # Check required settings presence (don't leak values)
    missing = []
    if settings.SECRET_KEY == "CHANGE_THIS_TO_A_SECRET_KEY" or not settings.SECRET_KEY:
        missing.append("SECRET_KEY")

    # Check DB connectivity best-effort
    db_ok = False
    db_error = None
    try:
        with engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
        db_ok = True
    except Exception as e:
        db_error = str(e)

    status = "ok" if db_ok and not missing else ("degraded" if db_ok else "error")
    payload = {
        "status": status,
        "time": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "config": {
            "base_url_set": bool(settings.BASE_URL),
            "db_backend": settings.DATABASE_URL.split(":", 1)[0],
            "currency": settings.CURRENCY.upper(),
            "stripe_pub_set": bool(settings.STRIPE_PUBLISHABLE_KEY),
            "stripe_sec_set": bool(settings.STRIPE_SECRET_KEY),
        },
        "missing": missing,
        "db": {"ok": db_ok, "error": db_error},
    }
    # Always return 200; status is in payload
    return JSONResponse(content=payload, status_code=200)


@router.get("/health.txt")
def health_text():
    # simple OK text for load balancer checks
    return Response(content="OK", media_type="text/plain")
