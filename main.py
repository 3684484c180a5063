import logging
import time
import traceback
import uuid
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi import HTTPException as FastAPIHTTPException
from fastapi.responses import JSONResponse
from starlette.responses import PlainTextResponse

from app.api import (
    addons,
    auth,
    events,
    milongas,
    misc,
    pricing,
    registrations,
    seating,
    tables,
    workshops,
)
from app.core.logging_utils import configure_logging
from app.core.settings import settings
from app.models import AppErrorLog
from app.services.auth import get_bearer_token, read_admin_token
from app.services.catalog import CatalogCache
from app.services.errors import DomainError
from db import get_db

try:
    import sentry_sdk  # type: ignore
    from sentry_sdk.integrations.starlette import StarletteIntegration  # type: ignore
except Exception:
    sentry_sdk = None  # type: ignore

load_dotenv()


app = FastAPI(title="Festival Registration")

# Configure logging (console + rotating file; JSON by default)
configure_logging(settings)
logger = logging.getLogger("app")

# Initialize Sentry if DSN provided
if getattr(settings, "SENTRY_DSN", "") and sentry_sdk is not None:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[StarletteIntegration()],
        traces_sample_rate=float(getattr(settings, "SENTRY_TRACES_SAMPLE_RATE", 0.0) or 0.0),
        send_default_pii=False,
    )

# Shared catalog snapshot cache; admin writes invalidate it
app.state.catalog_cache = CatalogCache(settings.CATALOG_REFRESH_SECONDS)

app.include_router(misc.router)
app.include_router(auth.router)
app.include_router(events.router)
app.include_router(tables.router)
app.include_router(addons.router)
app.include_router(workshops.router)
app.include_router(milongas.router)
app.include_router(seating.router)
app.include_router(pricing.router)
app.include_router(registrations.router)


def _admin_id_from_request(request: Request) -> Optional[int]:
    admin_id = getattr(request.state, "admin_id", None)
    if admin_id is not None:
        return int(admin_id)
    token = get_bearer_token(request)
    data = read_admin_token(token) if token else None
    if data and isinstance(data.get("id"), int):
        return data["id"]
    return None


def _log_error(request: Request, status: int, message: str, stack: Optional[str] = None) -> None:
    """Best-effort write of an AppErrorLog row; never masks the original error."""
    request_id = getattr(request.state, "request_id", None)
    db_gen = get_db()
    try:
        db = next(db_gen)
        try:
            err = AppErrorLog(
                RequestID=str(request_id) if request_id else None,
                Path=str(request.url.path),
                Method=request.method,
                StatusCode=int(status),
                AdminID=_admin_id_from_request(request),
                ClientIP=request.client.host if request.client else None,
                UserAgent=request.headers.get("user-agent"),
                Message=message,
                StackTrace=stack,
            )
            db.add(err)
            db.commit()
        except Exception:
            db.rollback()
            logger.warning("error_log.write_failed", extra={"request_id": request_id})
    except Exception:
        logger.warning("error_log.no_session", extra={"request_id": request_id})
    finally:
        db_gen.close()


def _json_error(request: Request, status: int, detail, headers=None) -> JSONResponse:
    resp = JSONResponse({"detail": detail}, status_code=status, headers=headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        resp.headers["X-Request-ID"] = str(request_id)
    return resp


# Request logging middleware with request id and admin context
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    # Ensure duration_ms is always defined to avoid UnboundLocalError in exception paths
    duration_ms: Optional[int] = None
    # Stash request_id for downstream handlers
    request.state.request_id = request_id

    extra_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client": request.client.host if request.client else None,
        "admin_id": _admin_id_from_request(request),
        "user_agent": request.headers.get("user-agent"),
    }
    logger.info("request.start", extra=extra_ctx)
    try:
        response = await call_next(request)
    except Exception:
        # Compute duration on error, then log and re-raise for global handler
        if duration_ms is None:
            duration_ms = int((time.perf_counter() - start) * 1000)
        logger.exception("request.error", extra={**extra_ctx, "duration_ms": duration_ms})
        # Re-raise to be handled by 500 handler
        raise

    duration_ms = int((time.perf_counter() - start) * 1000)
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "request.end",
        extra={**extra_ctx, "status_code": response.status_code, "duration_ms": duration_ms},
    )
    return response


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    detail = getattr(exc, "detail", None) or "Not Found"
    _log_error(request, 404, str(detail))
    return _json_error(request, 404, detail)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    _log_error(request, exc.status_code, str(exc))
    return _json_error(request, exc.status_code, exc.message)


@app.exception_handler(FastAPIHTTPException)
async def http_exception_handler(request: Request, exc: FastAPIHTTPException):
    """Log all HTTPException (>=400) to DB, then return a JSON response.

    Note: 404 has a dedicated handler above which also logs to DB.
    """
    status = getattr(exc, "status_code", 500) or 500
    if status >= 400:
        _log_error(request, status, str(getattr(exc, "detail", "HTTP error")))
    return _json_error(request, status, exc.detail, headers=getattr(exc, "headers", None))


@app.exception_handler(500)
async def server_error_handler(request: Request, exc):
    try:
        _log_error(
            request,
            500,
            str(exc),
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )
        return _json_error(request, 500, "Internal Server Error")
    except Exception:
        return PlainTextResponse("Internal Server Error", status_code=500)
