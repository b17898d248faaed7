from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from ..crud import crud_user
from ..database import get_db
from ..models.artist import Artist
from ..models.user import User, UserRole
from .auth import decode_token, get_current_user, oauth2_scheme


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
    return current_user


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Resolve the caller when a valid token is present, else ``None``."""
    jwt_token = token or request.cookies.get("access_token")
    if not jwt_token:
        return None
    try:
        payload = decode_token(jwt_token)
    except JWTError:
        return None
    email = payload.get("sub")
    if not email or payload.get("typ") == "refresh":
        return None
    user = crud_user.user.get_user_by_email(db, email)
    return user if user and user.is_active else None


def is_admin(user: Optional[User]) -> bool:
    if user is None or not user.email:
        return False
    email = user.email.lower()
    if email in settings.admin_emails:
        return True
    return email.rsplit("@", 1)[-1] in settings.admin_domains


def get_current_admin(current_user: User = Depends(get_current_active_user)) -> User:
    if not is_admin(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def get_current_artist(current_user: User = Depends(get_current_active_user)) -> User:
    """Ensure the current user is an active artist account."""
    if current_user.role != UserRole.ARTIST:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is not an artist.",
        )
    return current_user


def get_current_artist_profile(current_user: User = Depends(get_current_artist)) -> Artist:
    if current_user.artist_profile is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Artist profile does not exist. Please create one.",
        )
    return current_user.artist_profile
