import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.security import jwt_manager
from app.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _get_or_create_profile(db: Session, payload: dict) -> User:
    """
    Return the local profile row for the token subject.
    The auth provider owns accounts; the first authenticated request
    from a subject creates its profile.
    """
    user_id = payload["sub"]
    user = db.query(User).filter(User.id == user_id).first()
    if user:
        return user

    user = User(
        id=user_id,
        username=payload.get("username"),
        display_name=payload.get("display_name"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created profile for user {user_id}")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency that requires a valid Bearer token and returns the active user.
    Raises 401 Unauthorized if the token is missing or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = jwt_manager.verify_token(credentials.credentials, "access")
    user = _get_or_create_profile(db, payload)

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user"
        )

    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Dependency that returns a user if a valid user token is provided, or None otherwise.
    Invalid or expired tokens are treated as anonymous viewers.
    """
    if not credentials:
        return None

    try:
        payload = jwt_manager.verify_token(credentials.credentials, "access")
    except HTTPException:
        return None

    user = db.query(User).filter(User.id == payload["sub"]).first()
    if not user or not user.is_active:
        return None

    return user


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, preferring proxy headers over the socket peer"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # x-forwarded-for can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return None
