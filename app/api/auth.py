# ruff: noqa: I001
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from db import get_db
from app.api.schemas import LoginIn
from app.api.serializers import admin_to_dict
from app.models.user import AdminUser
from app.services import auth
from app.services.auth import require_admin

router = APIRouter()
audit = logging.getLogger("audit")


# --- Login ---
@router.post("/api/admin/login")
def login(body: LoginIn, request: Request, db: Session = Depends(get_db)):
    username = body.username.strip()
    rl_key = f"login:{request.client.host if request.client else 'unknown'}:{username.lower()}"
    if auth.is_login_rate_limited(rl_key):
        audit.warning("admin.login_rate_limited", extra={"username": username})
        raise HTTPException(status_code=429, detail="Too many login attempts. Please try again later.")

    admin = auth.authenticate_admin(db, username, body.password)
    if admin is None:
        auth.add_login_attempt(rl_key)
        audit.info("admin.login_failed", extra={"username": username})
        raise HTTPException(status_code=401, detail="Invalid username or password")

    auth.clear_login_attempts(rl_key)
    audit.info("admin.login", extra={"admin_id": admin.AdminID})
    return {"token": auth.issue_admin_token(admin), "admin": admin_to_dict(admin)}


@router.get("/api/admin/verify")
def verify(admin: AdminUser = Depends(require_admin)):
    return {"valid": True, "admin": admin_to_dict(admin)}
