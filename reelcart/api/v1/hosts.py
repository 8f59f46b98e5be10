# reelcart/api/v1/hosts.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging

from ...database import get_db
from ...crud.host import host as crud_host
from ...models import User
from ...schemas.host import Host as HostSchema, HostCreate, HostUpdate
from ...utils.responses import success
from ..deps import get_current_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/host", tags=["hosts"])


def _serialize(host) -> dict:
    # Host.movies resolves the join rows; movie_hosts itself is never sent
    return HostSchema.model_validate(host).model_dump()


@router.get("", status_code=status.HTTP_200_OK)
def list_hosts(db: Session = Depends(get_db)):
    """Get all hosts with the movies they appear in"""
    try:
        hosts = crud_host.list_with_movies(db)
        return success([_serialize(h) for h in hosts])
    except Exception as e:
        logger.error(f"Error fetching hosts: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch hosts")


@router.get("/{host_id}")
def get_host(host_id: int, db: Session = Depends(get_db)):
    try:
        host = crud_host.get_with_movies(db, host_id)
        if not host:
            raise HTTPException(status_code=404, detail="Host not found")

        return success(_serialize(host))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching host {host_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch host")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_host(
    host_data: HostCreate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Create host; name is trimmed and required, bio defaults to an empty string"""
    try:
        host = crud_host.create(db, obj_in={"name": host_data.name, "bio": host_data.bio or ""})

        logger.info(f"Host created: {host.name} (ID: {host.id})")
        return success(_serialize(host), "Host created")

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating host: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create host")


@router.put("/{host_id}")
def update_host(
    host_id: int,
    host_data: HostUpdate,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """Update host; a missing bio keeps the stored one"""
    try:
        host = crud_host.get(db, host_id)
        if not host:
            raise HTTPException(status_code=404, detail="Host not found")

        host = crud_host.update(db, db_obj=host, obj_in={"name": host_data.name, "bio": host_data.bio})

        logger.info(f"Host updated: {host.name}")
        return success(_serialize(crud_host.get_with_movies(db, host.id)), "Host updated successfully")

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating host {host_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update host")


@router.delete("/{host_id}")
def delete_host(
    host_id: int,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    try:
        host = crud_host.get(db, host_id)
        if not host:
            raise HTTPException(status_code=404, detail="Host not found")

        crud_host.remove(db, db_obj=host)

        logger.info(f"Host deleted: {host_id}")
        return success(message="Host deleted successfully")

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting host {host_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete host")
