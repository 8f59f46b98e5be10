# reelcart/api/v1/categories.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from ...database import get_db
from ...crud.category import category as crud_category
from ...models import User
from ...schemas.category import Category as CategorySchema, CategoryCreate, CategoryUpdate
from ...utils.responses import success
from ..deps import get_current_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/category", tags=["categories"])


def _serialize(category) -> dict:
    return CategorySchema.model_validate(category).model_dump()


@router.get("", status_code=status.HTTP_200_OK)
def list_categories(db: Session = Depends(get_db)):
    """Get all categories with their movies"""
    try:
        categories = crud_category.list_with_movies(db)
        logger.info(f"Found {len(categories)} categories")
        return success([_serialize(cat) for cat in categories])
    except Exception as e:
        logger.error(f"Error fetching categories: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.get("/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db)):
    """Get single category by ID"""
    try:
        category = crud_category.get_with_movies(db, category_id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")

        return success(_serialize(category))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching category {category_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch category")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Create new category"""
    try:
        if crud_category.get_by_name(db, name=category_data.name):
            raise HTTPException(status_code=400, detail="Category name already exists")

        category = crud_category.create(db, obj_in=category_data)

        logger.info(f"Category created: {category.name} (by user {current_admin.id})")
        return success(_serialize(category), "Category created")

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating category: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create category")


@router.put("/{category_id}")
def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Update category"""
    try:
        category = crud_category.get(db, category_id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")

        if category_data.name is not None and crud_category.get_by_name(
            db, name=category_data.name, exclude_id=category_id
        ):
            raise HTTPException(status_code=400, detail="Category name already exists")

        category = crud_category.update(db, db_obj=category, obj_in=category_data)

        logger.info(f"Category updated: {category.name}")
        return success(_serialize(category), "Category updated successfully")

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating category {category_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update category")


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Delete category; its movies stay in the catalog uncategorized"""
    try:
        category = crud_category.get(db, category_id)
        if not category:
            raise HTTPException(status_code=404, detail="Category not found")

        name = category.name
        crud_category.remove(db, db_obj=category)

        logger.info(f"Category deleted: {name}")
        return success(message="Category deleted successfully")

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting category {category_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete category")
