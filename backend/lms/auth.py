"""Identity of the caller, taken from a JWT issued by the external auth provider."""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import JWT_ALGORITHM, JWT_SECRET_KEY
from .models.enums import UserRole

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    id: str
    role: UserRole

    @property
    def is_facilitator(self) -> bool:
        return self.role == UserRole.facilitator


def create_access_token(user_id: str, role: UserRole, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a token the way the auth provider does; used by local tooling and tests."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    payload = {"sub": user_id, "role": role.value, "exp": expire}
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> CurrentUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
        user_id: str = payload.get("sub")
        role = UserRole(payload.get("role", UserRole.student.value))
    except (JWTError, ValueError):
        raise credentials_exception
    if user_id is None:
        raise credentials_exception
    return CurrentUser(id=user_id, role=role)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Dependency to get the caller from the bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decode_token(credentials.credentials)


def require_facilitator(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency restricting an endpoint to facilitators."""
    if not current_user.is_facilitator:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Facilitator access required")
    return current_user
