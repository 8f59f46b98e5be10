from typing import Optional
from sqlalchemy.orm import Session
from ..crud.base import CRUDBase
from ..models.user import User, UserRole
from ..schemas.user import UserCreate, UserUpdate

class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    def get_for_login(self, db: Session, *, email: str, role: UserRole) -> Optional[User]:
        """Admin and customer logins share the table; the role must match"""
        return db.query(User).filter(User.email == email, User.role == role).first()

user = CRUDUser(User)
