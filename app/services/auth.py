# ruff: noqa: I001
from collections import defaultdict, deque
from typing import Any, Optional

from fastapi import Depends, HTTPException
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.requests import Request

from app.core.clock import utcnow
from app.core.settings import settings
from app.models.user import AdminUser
from db import get_db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SECRET_KEY = settings.SECRET_KEY
serializer = URLSafeTimedSerializer(SECRET_KEY)

ADMIN_TOKEN_SALT = "admin-auth"

# Password hashing


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


# Admin authentication


def authenticate_admin(db: Session, username: str, password: str) -> Optional[AdminUser]:
    admin = (
        db.query(AdminUser)
        .filter(AdminUser.Username == username, AdminUser.IsActive == True)  # noqa: E712
        .first()
    )
    if admin and verify_password(password, getattr(admin, "HashedPassword", "")):
        admin.LastLoginAt = utcnow()
        db.commit()
        return admin
    return None


def create_admin(db: Session, username: str, email: str, password: str, role: str = "admin"):
    admin = AdminUser(
        Username=username,
        Email=email,
        HashedPassword=hash_password(password),
        Role=role,
        IsActive=True,
    )
    db.add(admin)
    try:
        db.commit()
        db.refresh(admin)
        return admin
    except IntegrityError:
        db.rollback()
        return None


# In-memory rate limiter (per process).
_login_attempts = defaultdict(lambda: deque())


def is_login_rate_limited(key: str) -> bool:
    from time import time

    window = int(getattr(settings, "RATE_LIMIT_LOGIN_WINDOW_SECONDS", 900))
    limit = int(getattr(settings, "RATE_LIMIT_LOGIN_ATTEMPTS", 5))
    q = _login_attempts.get(key)
    if q is None:
        return False
    now = time()
    # drop old
    while q and q[0] < now - window:
        q.popleft()
    if not q:
        _login_attempts.pop(key, None)
        return False
    return len(q) >= limit


def add_login_attempt(key: str):
    from time import time

    q = _login_attempts[key]
    q.append(time())


def clear_login_attempts(key: str):
    _login_attempts.pop(key, None)


# Bearer tokens


def issue_admin_token(admin: AdminUser) -> str:
    payload = {"id": int(admin.AdminID), "username": str(admin.Username), "role": str(admin.Role)}
    return str(serializer.dumps(payload, salt=ADMIN_TOKEN_SALT))


def read_admin_token(token: str, max_age: Optional[int] = None) -> Optional[dict]:
    if max_age is None:
        max_age = settings.ADMIN_TOKEN_MAX_AGE_SECONDS
    try:
        data: Any = serializer.loads(token, salt=ADMIN_TOKEN_SALT, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None
    return data if isinstance(data, dict) else None


def get_bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


# FastAPI dependencies for auth


def get_current_admin(request: Request, db: Session = Depends(get_db)) -> Optional[AdminUser]:
    """Return the AdminUser named by the bearer token, or None when missing/invalid."""
    token = get_bearer_token(request)
    if not token:
        return None
    data = read_admin_token(token)
    if not data:
        return None
    admin = db.get(AdminUser, data.get("id"))
    if admin is None or not bool(admin.IsActive):
        return None
    request.state.admin_id = admin.AdminID
    return admin


def require_admin(admin: Optional[AdminUser] = Depends(get_current_admin)) -> AdminUser:
    """Dependency that requires a valid admin bearer token."""
    if admin is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return admin
