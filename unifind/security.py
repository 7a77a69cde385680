"""
Bearer Token Authentication

Resolves the bearer credential on a request into a typed Principal and
enforces the role required by each route. Credential storage and login live
outside this service; `create_access_token` exists for development tooling
and tests.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError as SchemaError

from unifind.config import settings
from unifind.core.models import Principal
from unifind.core.states import Role

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)

BearerCreds = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer)]


def create_access_token(principal: Principal, expires_in: Optional[timedelta] = None) -> str:
    """Sign a token carrying the principal's identity and role."""
    expires_in = expires_in or timedelta(days=settings.JWT_EXPIRE_DAYS)
    payload = {
        "id": principal.id,
        "role": principal.role.value,
        "email": principal.email,
        "fullName": principal.full_name,
        "universityId": principal.university_id,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Principal:
    """
    Verify a token and build the Principal it names.

    Raises:
        HTTPException: 401 if the token is invalid, expired or malformed
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return Principal.model_validate(payload)
    except JWTError as e:
        logger.debug(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except SchemaError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token does not describe a user",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_principal(creds: BearerCreds) -> Principal:
    if creds is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decode_access_token(creds.credentials)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def require_role(role: Role):
    """Dependency factory: the caller must hold `role`."""

    def dependency(principal: CurrentPrincipal) -> Principal:
        if principal.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{role.value} role required",
            )
        return principal

    return dependency


StudentPrincipal = Annotated[Principal, Depends(require_role(Role.STUDENT))]
AdminPrincipal = Annotated[Principal, Depends(require_role(Role.ADMIN))]
