# backend/app/api/auth.py

from datetime import datetime, timedelta
from typing import Optional, Tuple
from urllib.parse import urlparse
import hashlib
import logging
import secrets

import redis
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import settings
from ..crud import crud_user
from ..database import get_db
from ..middleware.rate_limit import client_ip
from ..models.user import User
from ..schemas.user import RefreshRequest, TokenData, UserCreate, UserResponse
from ..utils.auth import normalize_email, verify_password
from ..utils.redis_cache import get_redis_client, hit_counter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "typ": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _create_refresh_token(email: str) -> Tuple[str, datetime]:
    """Create a signed refresh token and its expiry."""
    expires = datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    jti = secrets.token_urlsafe(16)
    token = jwt.encode(
        {"sub": email, "typ": "refresh", "jti": jti, "exp": expires},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    return token, expires


def _is_secure_cookie() -> bool:
    return settings.FRONTEND_URL.lower().startswith("https")


def _compute_cookie_domain() -> str | None:
    configured = (settings.COOKIE_DOMAIN or "").strip()
    if configured:
        return configured
    host = (urlparse(settings.FRONTEND_URL).hostname or "").strip().lstrip(".").lower()
    if not host or host in {"localhost", "127.0.0.1"} or host.endswith(".local"):
        return None
    if host.startswith("www."):
        host = host[4:]
    if "." not in host:
        return None
    return f".{host}"


def _cookie_kwargs() -> dict:
    secure = _is_secure_cookie()
    return {
        "httponly": True,
        "secure": secure,
        # SameSite=None requires Secure
        "samesite": "none" if secure else "lax",
        "path": "/",
        "domain": _compute_cookie_domain(),
    }


def _set_auth_cookies(response: Response, access: str, refresh: str, refresh_exp: datetime) -> None:
    response.set_cookie(
        key="access_token",
        value=access,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        **_cookie_kwargs(),
    )
    response.set_cookie(
        key="refresh_token",
        value=refresh,
        max_age=max(0, int((refresh_exp - datetime.utcnow()).total_seconds())),
        **_cookie_kwargs(),
    )


def _clear_auth_cookies(response: Response) -> None:
    for key in ("access_token", "refresh_token"):
        response.set_cookie(key=key, value="", max_age=0, expires=0, **_cookie_kwargs())


def _token_payload(db: Session, user: User) -> JSONResponse:
    access = create_access_token({"sub": user.email})
    refresh, refresh_exp = _create_refresh_token(user.email)
    crud_user.user.store_refresh_token(db, user, _hash_token(refresh), settings.REFRESH_TOKEN_EXPIRE_DAYS)
    payload = {
        "access_token": access,
        "token_type": "bearer",
        "refresh_token": refresh,
        "user": UserResponse.model_validate(user).model_dump(mode="json"),
    }
    resp = JSONResponse(payload)
    _set_auth_cookies(resp, access, refresh, refresh_exp)
    return resp


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(request: Request, user_data: UserCreate, db: Session = Depends(get_db)):
    ip = client_ip(request)
    attempts, retry_after = hit_counter(f"register:ip:{ip}", settings.REGISTER_RATE_WINDOW)
    if attempts > settings.REGISTER_RATE_LIMIT:
        logger.info("Registration throttled for %s", ip)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many registration attempts. Try again later.",
            headers={"Retry-After": str(retry_after)},
        )

    if crud_user.user.get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="That email already has an account. Sign in instead.",
        )

    db_user = crud_user.user.create_user(db, user_data)
    logger.info("Registered user %s with role %s", db_user.id, db_user.role.value)
    return db_user


@router.post("/login")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    ip = client_ip(request)
    email = normalize_email(form_data.username)
    user_key = f"login_fail:user:{email}"
    ip_key = f"login_fail:ip:{ip}"
    client = get_redis_client()
    try:
        user_attempts = int(client.get(user_key) or 0)
        ip_attempts = int(client.get(ip_key) or 0)
    except redis.exceptions.RedisError as exc:
        logger.warning("Redis unavailable for login tracking: %s", exc)
        user_attempts = ip_attempts = 0
    if user_attempts >= settings.MAX_LOGIN_ATTEMPTS or ip_attempts >= settings.MAX_LOGIN_ATTEMPTS:
        logger.info("Login locked out for %s from %s", email, ip)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Try again later.",
        )

    user = crud_user.user.get_user_by_email(db, email)
    if not user or not verify_password(form_data.password, user.password):
        try:
            for key in (user_key, ip_key):
                client.incr(key)
                client.expire(key, settings.LOGIN_ATTEMPT_WINDOW)
        except redis.exceptions.RedisError as exc:
            logger.warning("Could not update login attempt counters: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

    try:
        client.delete(user_key, ip_key)
    except redis.exceptions.RedisError as exc:
        logger.warning("Could not reset login counters: %s", exc)

    user.update_last_login()
    logger.info("User %s logged in", user.id)
    return _token_payload(db, user)


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    # Prefer Authorization header; fall back to access_token cookie
    jwt_token = token or request.cookies.get("access_token")
    if not jwt_token:
        raise credentials_exception
    try:
        payload = decode_token(jwt_token)
        if payload.get("typ") == "refresh":
            raise credentials_exception
        token_data = TokenData(email=payload.get("sub"))
    except JWTError:
        raise credentials_exception
    if token_data.email is None:
        raise credentials_exception

    user = crud_user.user.get_user_by_email(db, token_data.email)
    if user is None:
        raise credentials_exception
    return user


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/refresh")
def refresh_token(
    request: Request,
    body: Optional[RefreshRequest] = None,
    db: Session = Depends(get_db),
):
    """Rotate the refresh token and issue a new access token.

    The refresh token comes from the JSON body or the ``refresh_token``
    cookie. Its hash must match the one stored on the user; a token that
    has already been rotated is rejected.
    """
    refresh_jwt = (body.token if body else None) or request.cookies.get("refresh_token")
    if not refresh_jwt:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing refresh token")
    try:
        payload = decode_token(refresh_jwt)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    if payload.get("typ") != "refresh":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token type")

    user = crud_user.user.get_user_by_email(db, payload.get("sub") or "")
    if not user or not user.refresh_token_hash or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")
    if user.refresh_token_expires_at and user.refresh_token_expires_at < datetime.utcnow():
        crud_user.user.store_refresh_token(db, user, None)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")
    if _hash_token(refresh_jwt) != user.refresh_token_hash:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has been rotated")

    return _token_payload(db, user)


@router.post("/logout")
def logout(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Invalidate the current session's refresh token."""
    crud_user.user.store_refresh_token(db, current_user, None)
    resp = JSONResponse({"message": "logged out"})
    _clear_auth_cookies(resp)
    return resp
