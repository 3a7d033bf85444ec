from jose import JWTError, jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from ideahub.db.models import User
from ideahub.db.session import get_db
from ideahub.core.config import settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _decode_subject(token_value: str | None) -> str | None:
    if not token_value:
        return None
    try:
        payload = jwt.decode(token_value, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")


async def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    token_value = token or request.cookies.get(settings.ACCESS_TOKEN_COOKIE_NAME)
    user_id = _decode_subject(token_value)
    if user_id is None:
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None:
        raise credentials_exception

    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Same as get_current_user but anonymous visitors get None instead of a 401."""
    token_value = token or request.cookies.get(settings.ACCESS_TOKEN_COOKIE_NAME)
    user_id = _decode_subject(token_value)
    if user_id is None:
        return None
    user = await db.get(User, user_id)
    if user is not None:
        request.state.user = user
    return user


def require_role(*roles: str):
    """
    Dependency factory for role-gated routes.

    Raises:
        HTTPException: 403 if the user's role is not one of `roles`
    """
    async def _checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "ROLE_REQUIRED",
                    "message": f"This action requires the {' or '.join(roles)} role.",
                    "role": user.role,
                },
            )
        return user

    return _checker
