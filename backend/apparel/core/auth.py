"""
Authentication and role checks

Validates session JWTs issued by the identity provider and exposes the
current user, with their role, as FastAPI dependencies.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from .config import settings


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

ROLES = ("admin", "designer", "shipper", "customer")
DEFAULT_ROLE = "customer"


class TokenUser(BaseModel):
    """User data extracted from the session token"""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str = DEFAULT_ROLE

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def decode_session_token(token: str) -> dict:
    """
    Decode and validate an identity provider session token.

    Expected payload (custom session claims):
    {
        "sub": "user_2abc...",
        "email": "jane@example.com",
        "name": "Jane",
        "metadata": {"role": "admin"},
        "iat": 1234567890,
        "exp": 1234567890
    }
    """
    if not settings.AUTH_JWT_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token verification key is not configured",
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_KEY,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            options={"verify_aud": False}
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"}
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )


def extract_role(payload: dict) -> str:
    """Role lives in the session metadata claim, falling back to a top-level claim"""
    for claim in ("metadata", "public_metadata", "publicMetadata"):
        metadata = payload.get(claim)
        if isinstance(metadata, dict) and metadata.get("role"):
            return metadata["role"]
    return payload.get("role") or DEFAULT_ROLE


def _user_from_payload(payload: dict) -> Optional[TokenUser]:
    user_id = payload.get("sub") or payload.get("id")
    if not user_id:
        return None
    return TokenUser(
        id=user_id,
        email=payload.get("email"),
        name=payload.get("name"),
        role=extract_role(payload)
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from the JWT.

    Usage:
        @router.get("/protected")
        async def protected_route(user: TokenUser = Depends(get_current_user)):
            return {"message": f"Hello {user.id}"}
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_session_token(credentials.credentials)
    user = _user_from_payload(payload)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing user id",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenUser]:
    """Optional authentication - returns None if no valid token provided."""
    if not credentials:
        return None

    try:
        payload = decode_session_token(credentials.credentials)
    except HTTPException:
        return None

    return _user_from_payload(payload)


def require_roles(*allowed_roles: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.delete("/products/{product_id}")
        async def delete_product(
            product_id: int,
            user: TokenUser = Depends(require_roles("admin"))
        ):
            pass
    """
    async def role_checker(
        user: TokenUser = Depends(get_current_user)
    ) -> TokenUser:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {' or '.join(allowed_roles)}, your role: {user.role}"
            )
        return user

    return role_checker


# Convenience dependencies for common role requirements
require_admin = require_roles("admin")
require_designer = require_roles("admin", "designer")
require_shipper = require_roles("shipper")
require_shipper_or_admin = require_roles("shipper", "admin")
