from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from mistock.core.config import settings
from mistock.models.user import Actor, LoginResult

security = HTTPBearer()


def create_access_token(login: LoginResult, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT carrying the identity provider's login result.

    Tokens are normally minted by the identity provider; this mirrors its
    claim layout for tooling and tests.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    expire = now + expires_delta

    payload = {
        "sub": login.email,
        "name": login.full_name,
        "designation": login.designation,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp())
    }

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_login(token: str) -> LoginResult:
    """Decode a bearer token into a LoginResult. Raises 401 on any problem."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        email = payload.get("sub")
        if email is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token"
            )
        return LoginResult(
            email=email,
            full_name=payload.get("name"),
            designation=payload.get("designation")
        )
    except (JWTError, PydanticValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Actor:
    """Current actor from the bearer token; role derived from the designation claim."""
    return Actor.from_login(decode_login(credentials.credentials))
