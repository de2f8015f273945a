"""Token issuing and request authentication.

Sessions are stateless HS256 JWTs. The token travels in the httpOnly
``token`` cookie (browser clients) or an ``Authorization: Bearer`` header.
Logging out stores the token in ``revoked_tokens`` so it is refused until
it expires.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Optional

import jwt
from flask import current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import delete, select

from .extensions import db, login_manager
from .models import RevokedToken, User

logger = logging.getLogger(__name__)

COOKIE_NAME = "token"
ALGORITHM = "HS256"


def generate_auth_token(user: User) -> str:
    now = datetime.now(timezone.utc)
    hours = current_app.config["JWT_EXPIRES_HOURS"]
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(hours=hours),
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=ALGORITHM)


def token_from_request() -> Optional[str]:
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token

    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def is_revoked(token: str) -> bool:
    return db.session.scalar(select(RevokedToken.id).where(RevokedToken.token == token)) is not None


def _token_expiry(token: str) -> datetime:
    try:
        payload = jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=[ALGORITHM])
        return datetime.fromtimestamp(int(payload["exp"]), timezone.utc)
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError):
        return datetime.now(timezone.utc) + timedelta(hours=current_app.config["JWT_EXPIRES_HOURS"])


def revoke_token(token: str) -> None:
    """Refuse *token* until it expires, dropping rows for tokens that already have."""
    db.session.execute(delete(RevokedToken).where(RevokedToken.expires_at < datetime.now(timezone.utc)))
    if not is_revoked(token):
        db.session.add(RevokedToken(token=token, expires_at=_token_expiry(token)))
    db.session.commit()


@login_manager.request_loader
def load_user_from_request(req) -> Optional[User]:
    token = token_from_request()
    if not token or is_revoked(token):
        return None

    try:
        payload = jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=[ALGORITHM])
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        logger.info("Rejected token on %s %s: %s", req.method, req.path, e)
        return None

    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"message": "Unauthorized", "errors": []}), 401


def _cookie_options() -> dict:
    production = current_app.config.get("APP_ENV") == "production"
    return {
        "httponly": True,
        "secure": production,
        "samesite": "None" if production else "Lax",
    }


def set_auth_cookie(response, token: str):
    max_age = current_app.config["JWT_EXPIRES_HOURS"] * 60 * 60
    response.set_cookie(COOKIE_NAME, token, max_age=max_age, **_cookie_options())
    return response


def clear_auth_cookie(response):
    response.delete_cookie(COOKIE_NAME, **_cookie_options())
    return response


def is_admin() -> bool:
    return bool(current_user.is_authenticated and getattr(current_user, "role", None) == "admin")


def admin_required(view):
    """Like ``login_required`` but also demands the admin role."""

    @wraps(view)
    @login_required
    def wrapper(*args, **kwargs):
        if not is_admin():
            return jsonify({"message": "Access denied. Admins only.", "errors": []}), 403
        return view(*args, **kwargs)

    return wrapper
