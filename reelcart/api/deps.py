# reelcart/api/deps.py
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, ExpiredSignatureError
from ..database import get_db
from ..utils.security import decode_access_token
from ..models.user import User

# auto_error=False so a missing header and a non-Bearer scheme both land here as None
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    """
    Resolve the bearer token to a user.
    Missing header, wrong scheme, bad signature and expiry all answer 401.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Unauthorized")

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = payload.get("sub")

        if user_id is None:
            raise _unauthorized("Could not validate credentials")

        try:
            user_id = int(user_id)
        except (ValueError, TypeError):
            raise _unauthorized("Invalid token format")

    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")

    except JWTError:
        raise _unauthorized("Could not validate credentials")

    user = db.query(User).filter(User.id == user_id).first()

    if user is None:
        raise _unauthorized("User not found")

    request.state.user_id = user.id
    return user


def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Verify current user has the ADMIN role.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None instead of 401"""
    if credentials is None or not credentials.credentials:
        return None
    return get_current_user(request, db, credentials)
