"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification (`sub` = document id, `role` = account type)
- FastAPI dependencies for protected routes, one per role:
  user (job seeker), employer, mentor, admin
"""

from datetime import datetime, timedelta
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext

from jobzee.core.config import get_settings
from jobzee.core.errors import ForbiddenError
from jobzee.db.mongodb import get_collection

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor
bearer_scheme = HTTPBearer()

# role claim -> collection holding that account
ROLE_COLLECTIONS = {
    "user": "users",
    "employer": "employers",
    "mentor": "mentors",
    "admin": "admins",
}


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode = {"sub": str(subject), "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _load_account(token: str, role: str) -> dict:
    """Resolve a bearer token to the account document of the expected role."""
    payload = decode_token(token)
    if not payload or not payload.get("sub"):
        logger.warning("Rejected bearer token (invalid or expired)")
        raise _credentials_exception()

    if payload.get("role") != role:
        raise HTTPException(status_code=403, detail=f"Access denied. {role.capitalize()} account required")

    try:
        account_id = ObjectId(payload["sub"])
    except (InvalidId, TypeError):
        raise _credentials_exception()

    account = get_collection(ROLE_COLLECTIONS[role]).find_one({"_id": account_id})
    if not account:
        raise _credentials_exception()

    account["id"] = str(account["_id"])
    return account


def _ensure_active(account: dict, role: str) -> dict:
    """Same account-state rules for every route that accepts the role."""
    if role == "user":
        if not account.get("is_active", True) or account.get("status") == "suspended":
            raise HTTPException(status_code=403, detail="Account suspended or deactivated")
    elif role == "mentor":
        if account.get("status") != "approved" or not account.get("is_active", True):
            raise HTTPException(status_code=403, detail="Mentor account is not approved")
    elif not account.get("is_active", True):
        raise HTTPException(status_code=403, detail=f"{role.capitalize()} account deactivated")
    return account


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated job seeker.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    return _ensure_active(_load_account(credentials.credentials, "user"), "user")


async def get_current_employer(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """Dependency - Require employer role and an active account."""
    return _ensure_active(_load_account(credentials.credentials, "employer"), "employer")


async def require_verified_employer(employer: dict = Depends(get_current_employer)) -> dict:
    """Dependency - Employer must be verified by an admin before posting."""
    if not employer.get("is_verified"):
        raise ForbiddenError(
            "Your company must be verified before posting",
            error_type="verification_required",
            extra={"verification_status": employer.get("verification_status", "pending")},
        )
    return employer


async def get_current_mentor(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """Dependency - Require an approved mentor."""
    return _ensure_active(_load_account(credentials.credentials, "mentor"), "mentor")


async def get_current_admin(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """Dependency - Require admin role."""
    return _ensure_active(_load_account(credentials.credentials, "admin"), "admin")


async def get_current_account(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    Dependency for routes shared by several roles.

    Loads the account named by the token's role claim, applies that role's
    active checks and tags the document with `role`.
    """
    payload = decode_token(credentials.credentials)
    role = (payload or {}).get("role")
    if role not in ROLE_COLLECTIONS:
        logger.warning("Rejected bearer token (invalid, expired or unknown role)")
        raise _credentials_exception()
    account = _ensure_active(_load_account(credentials.credentials, role), role)
    account["role"] = role
    return account
