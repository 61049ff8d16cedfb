"""
Security utilities: authentication, wedding roles and rate limiting
"""

import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.core.config import settings
from app.services.firebase_client import verify_firebase_token
from app.utils.responses import forbidden_error, unauthorized_error

logger = logging.getLogger(__name__)

ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"

# Simple in-memory rate limiter
rate_limiter = defaultdict(list)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: Optional[str] = None


def _decode_token(token: str) -> AuthUser:
    if settings.USE_FIREBASE:
        try:
            claims = verify_firebase_token(token)
        except Exception as e:
            logger.warning(f"Rejected Firebase ID token: {e}")
            raise unauthorized_error("Invalid authentication token")
        return AuthUser(uid=claims["uid"], email=claims.get("email"))

    # Development tokens: "dev:<uid>:<email>"
    if settings.DEV_AUTH_ENABLED and token.startswith("dev:"):
        parts = token.split(":", 2)
        if len(parts) >= 2 and parts[1]:
            email = parts[2] if len(parts) == 3 and parts[2] else None
            return AuthUser(uid=parts[1], email=email)

    raise unauthorized_error("Invalid authentication token")


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> AuthUser:
    """Verify the bearer token and return the signed-in user"""
    if credentials is None or not credentials.credentials:
        raise unauthorized_error("Not authenticated")
    return _decode_token(credentials.credentials)


def get_optional_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Optional[AuthUser]:
    """Signed-in user for public pages, or None for anonymous guests"""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return _decode_token(credentials.credentials)
    except HTTPException:
        return None


# -------- Wedding roles --------

def collaborator_role(wedding: Dict[str, Any], user: Optional[AuthUser]) -> Optional[str]:
    """Role of user on the wedding, or None when they have no access"""
    if not user or not wedding:
        return None
    if wedding.get("owner_id") == user.uid:
        return ROLE_OWNER

    user_email = (user.email or "").lower()
    for collaborator in wedding.get("collaborators") or []:
        if collaborator.get("user_id") and collaborator.get("user_id") == user.uid:
            return collaborator.get("role")
        if user_email and (collaborator.get("email") or "").lower() == user_email:
            return collaborator.get("role")
    return None


def require_view(wedding: Dict[str, Any], user: AuthUser) -> str:
    role = collaborator_role(wedding, user)
    if role is None:
        raise forbidden_error("You do not have access to this wedding")
    return role


def require_edit(wedding: Dict[str, Any], user: AuthUser) -> str:
    role = require_view(wedding, user)
    if role not in (ROLE_OWNER, ROLE_ADMIN):
        raise forbidden_error("You have read-only access to this wedding")
    return role


# -------- Rate limiting --------

def rate_limit_check(client_ip: str, limit: int = None) -> bool:
    """Simple rate limiting by IP address"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    current_time = time.time()
    minute_ago = current_time - 60

    # Clean old requests
    rate_limiter[client_ip] = [
        req_time for req_time in rate_limiter[client_ip]
        if req_time > minute_ago
    ]

    # Check limit
    if len(rate_limiter[client_ip]) >= limit:
        return False

    # Add current request
    rate_limiter[client_ip].append(current_time)
    return True

def get_client_ip(request) -> str:
    """Extract client IP from request"""
    # Check for forwarded IP first (for reverse proxy setups)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    # Check for real IP header
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fall back to direct client IP
    return request.client.host if request.client else "unknown"
