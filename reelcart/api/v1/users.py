# reelcart/api/v1/users.py
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from ...database import get_db
from ...crud.user import user as crud_user
from ...models import User, UserRole
from ...schemas.user import (
    LoginRequest,
    LoginResponse,
    User as UserSchema,
    UserCreate,
    UserUpdate,
)
from ...utils.responses import success
from ...utils.security import (
    create_access_token,
    get_password_hash,
    token_lifetime,
    verify_password,
)
from ..deps import get_current_admin, get_current_user, get_optional_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/user", tags=["users"])


def _serialize(user: User) -> dict:
    # The schema has no password field, so the hash never leaves the API
    return UserSchema.model_validate(user).model_dump()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    caller: Optional[User] = Depends(get_optional_user),
):
    """Sign up; the password is stored as an argon2 hash. Only admins create admins."""
    if user_data.role == UserRole.ADMIN and not (caller and caller.is_admin):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can create admin accounts")

    try:
        email = user_data.email.lower().strip()
        if crud_user.get_by_email(db, email=email):
            raise HTTPException(status_code=400, detail="Email already registered")

        fields = user_data.model_dump()
        fields["email"] = email
        fields["password"] = get_password_hash(user_data.password)

        user = crud_user.create(db, obj_in=fields)

        logger.info(f"✅ User created: {user.email} ({user.role.value})")
        return success(_serialize(user), "User created successfully")

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error creating user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create user")


@router.post("/login")
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """
    Log in as USER or ADMIN. The role in `type` must match the stored role;
    an unknown (email, role) pair and a wrong password fail differently.
    """
    email = credentials.email.lower().strip()
    logger.info(f"🔍 Login attempt: {email} as {credentials.type.value}")

    user = crud_user.get_for_login(db, email=email, role=credentials.type)
    if not user:
        logger.warning(f"❌ No {credentials.type.value} account for {email}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Username doesn't exist")

    if not verify_password(credentials.password, user.password):
        logger.warning(f"❌ Incorrect password for {email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user.last_session = datetime.now(timezone.utc)
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error recording session for {email}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to log in")

    token = create_access_token(subject=user.id, role=user.role.value)

    logger.info(f"✅ Login successful: {email}")
    payload = LoginResponse(
        user=UserSchema.model_validate(user),
        token=token,
        expires_in=int(token_lifetime().total_seconds()),
    )
    return success(payload.model_dump(), "Logged user")


@router.get("", status_code=status.HTTP_200_OK)
def list_users(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        users = crud_user.get_multi(db)
        return success([_serialize(u) for u in users])
    except Exception as e:
        logger.error(f"Error fetching users: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch users")


@router.get("/{user_id}")
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = crud_user.get(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return success(_serialize(user))


@router.put("/{user_id}")
def update_user(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Users edit themselves; admins edit anyone. Only admins change roles."""
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough permissions")

    if user_data.role is not None and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can change roles")

    try:
        user = crud_user.get(db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        updates = user_data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in updates:
            updates["email"] = updates["email"].lower().strip()
            existing = crud_user.get_by_email(db, email=updates["email"])
            if existing and existing.id != user_id:
                raise HTTPException(status_code=400, detail="Email already registered")

        if updates.get("password"):
            updates["password"] = get_password_hash(updates["password"])
        else:
            updates.pop("password", None)

        user = crud_user.update(db, db_obj=user, obj_in=updates)

        logger.info(f"✅ User updated: {user.email}")
        return success(_serialize(user), "User updated successfully")

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error updating user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update user")
