# backend/lessonbook/api/dependencies/auth.py
"""
Authentication and authorization dependencies.
"""

import logging
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt

from ...auth import decode_access_token
from ...core.enums import RoleName
from ...principal import CurrentUser

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    """Resolve the caller from the bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _credentials_exception("No token provided.")

    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise _credentials_exception("Invalid or expired token.")

    user_id = payload.get("sub")
    role_raw = payload.get("role")
    try:
        role = RoleName(role_raw)
    except ValueError:
        raise _credentials_exception("Invalid or expired token.")
    if not isinstance(user_id, str) or not user_id:
        raise _credentials_exception("Invalid or expired token.")

    return CurrentUser(user_id=user_id, role=role)


def require_role(role: RoleName) -> Callable[..., CurrentUser]:
    """Dependency factory: the caller must hold ``role``."""

    async def _require_role(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role is not role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return current_user

    return _require_role


require_student = require_role(RoleName.STUDENT)
require_teacher = require_role(RoleName.TEACHER)
