from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from ..crud.base import CRUDBase
from ..models.category import Category
from ..schemas.category import CategoryCreate, CategoryUpdate

class CRUDCategory(CRUDBase[Category, CategoryCreate, CategoryUpdate]):
    def get_with_movies(self, db: Session, id: int) -> Optional[Category]:
        return (
            db.query(Category)
            .options(selectinload(Category.movies))
            .filter(Category.id == id)
            .first()
        )

    def list_with_movies(self, db: Session) -> List[Category]:
        return (
            db.query(Category)
            .options(selectinload(Category.movies))
            .order_by(Category.id)
            .all()
        )

    def get_by_name(self, db: Session, *, name: str, exclude_id: Optional[int] = None) -> Optional[Category]:
        query = db.query(Category).filter(Category.name == name)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        return query.first()

category = CRUDCategory(Category)
