import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from ideahub.core.config import settings
from ideahub.db.models import User
from ideahub.db.session import get_db
from ideahub.schemas.auth import LoginRequest, RegisterRequest, Token
from ideahub.schemas.user import UserOut
from ideahub.utils.auth import create_token_pair
from ideahub.utils.deps import get_current_user
from ideahub.utils.infrastructure import rate_limit

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    access_max_age = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    refresh_max_age = settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
    for name, value, max_age, httponly in (
        (settings.ACCESS_TOKEN_COOKIE_NAME, access_token, access_max_age, settings.ACCESS_TOKEN_HTTPONLY),
        (settings.REFRESH_TOKEN_COOKIE_NAME, refresh_token, refresh_max_age, settings.REFRESH_TOKEN_HTTPONLY),
    ):
        response.set_cookie(
            key=name,
            value=value,
            max_age=max_age,
            httponly=httponly,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
            domain=settings.COOKIE_DOMAIN,
            path="/",
        )


def _clear_auth_cookies(response: Response) -> None:
    for name, httponly in (
        (settings.ACCESS_TOKEN_COOKIE_NAME, settings.ACCESS_TOKEN_HTTPONLY),
        (settings.REFRESH_TOKEN_COOKIE_NAME, settings.REFRESH_TOKEN_HTTPONLY),
    ):
        response.set_cookie(
            key=name,
            value="",
            max_age=0,
            httponly=httponly,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
            domain=settings.COOKIE_DOMAIN,
            path="/",
        )


def _issue_tokens(response: Response, user: User) -> Token:
    access_token, refresh_token = create_token_pair(user.id)
    _set_auth_cookies(response, access_token, refresh_token)
    return Token(access_token=access_token, refresh_token=refresh_token)


@router.post("/register", response_model=Token, status_code=201)
@rate_limit(
    max_requests=settings.RATE_LIMIT_AUTH_MAX,
    window_seconds=settings.RATE_LIMIT_AUTH_WINDOW,
    key_prefix="rl:register",
)
async def register(
    data: RegisterRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    email = data.email.strip().lower()
    existing = await db.execute(select(User).where(User.email == email))
    if existing.scalar():
        raise HTTPException(status_code=400, detail="Email already registered")

    # Profile row is created with the account; role is chosen afterwards
    user = User(
        email=email,
        password_hash=pwd_context.hash(data.password),
        username=data.username or email.split("@")[0],
        is_premium=False,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    log.info("auth.register user=%s", user.id)

    return _issue_tokens(response, user)


@router.post("/login", response_model=Token)
@rate_limit(
    max_requests=settings.RATE_LIMIT_AUTH_MAX,
    window_seconds=settings.RATE_LIMIT_AUTH_WINDOW,
    key_prefix="rl:login",
)
async def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(User).where(User.email == data.email.strip().lower()))
    user = result.scalar()

    if not user or not pwd_context.verify(data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return _issue_tokens(response, user)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    request: Request,
    response: Response,
    refresh_token: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    token_value = refresh_token or request.cookies.get(settings.REFRESH_TOKEN_COOKIE_NAME)
    if not token_value:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    try:
        payload = jwt.decode(token_value, settings.REFRESH_SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    return _issue_tokens(response, user)


@router.post("/logout")
async def logout(response: Response) -> dict:
    _clear_auth_cookies(response)
    return {"ok": True, "message": "Logged out"}


@router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    return {
        "user": UserOut.model_validate(user),
        "needs_role": user.role is None,
    }
