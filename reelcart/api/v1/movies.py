from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form, Query
from sqlalchemy.orm import Session
import logging
import json

from ...config import settings
from ...database import get_db
from ...crud.category import category as crud_category
from ...crud.host import host as crud_host
from ...crud.movie import movie as crud_movie
from ...models import Movie, User
from ...schemas.movie import Movie as MovieSchema
from ...utils.responses import success
from ...utils.storage import StorageService, get_storage
from ..deps import get_current_admin

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/movie", tags=["movies"])

THUMBNAIL_FOLDER = "thumbnails"
MOVIE_NOT_FOUND = "movie not found"


def format_movie(movie: Movie) -> dict:
    """Canonical movie payload: nested category, flat hosts"""
    return MovieSchema.model_validate(movie).model_dump()


def parse_host_ids(raw: Optional[str]) -> Optional[List[int]]:
    """
    Parse the multipart hostIds field.

    None means the field was not sent. Anything that is not a JSON array of
    integer ids raises ValueError.
    """
    if raw is None:
        return None

    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise ValueError("hostIds must be a JSON array of host ids")

    if not isinstance(value, list):
        raise ValueError("hostIds must be a JSON array of host ids")

    host_ids = []
    for item in value:
        if isinstance(item, bool):
            raise ValueError(f"Invalid host id: {item!r}")
        if isinstance(item, int):
            host_ids.append(item)
        elif isinstance(item, str) and item.strip().isdigit():
            host_ids.append(int(item.strip()))
        else:
            raise ValueError(f"Invalid host id: {item!r}")
    return host_ids


def _host_ids_or_400(raw: Optional[str]) -> Optional[List[int]]:
    try:
        return parse_host_ids(raw)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _check_references(db: Session, category_id: Optional[int], host_ids: Optional[List[int]]) -> None:
    if category_id is not None and crud_category.get(db, category_id) is None:
        raise HTTPException(status_code=400, detail=f"Category {category_id} does not exist")

    if host_ids:
        missing = crud_host.missing_ids(db, host_ids)
        if missing:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown host ids: {', '.join(str(i) for i in missing)}"
            )


async def _check_thumbnail(thumbnail: UploadFile) -> None:
    """Images only, at most MAX_THUMBNAIL_SIZE bytes"""
    if thumbnail.content_type not in settings.allowed_thumbnail_types:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid thumbnail type. Allowed: {', '.join(settings.allowed_thumbnail_types)}"
        )

    size = thumbnail.size
    if size is None:
        size = len(await thumbnail.read())
        await thumbnail.seek(0)

    if size > settings.MAX_THUMBNAIL_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"Thumbnail too large. Max size: {settings.MAX_THUMBNAIL_SIZE} bytes"
        )


async def _upload_thumbnail(storage: StorageService, thumbnail: UploadFile) -> str:
    try:
        return await storage.upload(thumbnail, THUMBNAIL_FOLDER)
    except Exception as e:
        logger.error(f"❌ Thumbnail upload failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to upload thumbnail")


@router.get("", status_code=status.HTTP_200_OK)
def list_movies(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    host_id: Optional[int] = Query(None, alias="hostId"),
    db: Session = Depends(get_db)
):
    """Get movies, optionally filtered by category and/or host"""
    try:
        logger.info(f"list_movies called with category_id={category_id}, host_id={host_id}")
        movies = crud_movie.list_filtered(db, category_id=category_id, host_id=host_id)
        return success([format_movie(m) for m in movies])
    except Exception as e:
        logger.error(f"Error fetching movies: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch movies")


@router.get("/{movie_id}")
def get_movie(movie_id: int, db: Session = Depends(get_db)):
    """
    Get single movie by ID.

    A missing movie answers 200 with ok=false and message "movie not found";
    existing storefront clients check the payload, not the status.
    """
    try:
        movie = crud_movie.get(db, movie_id)
        if not movie:
            return {"ok": False, "data": None, "message": MOVIE_NOT_FOUND}

        return success(format_movie(movie))
    except Exception as e:
        logger.error(f"Error fetching movie {movie_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch movie")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_movie(
    title: Optional[str] = Form(None),
    category_id: Optional[int] = Form(None, alias="categoryId"),
    description: Optional[str] = Form(None),
    video_url: Optional[str] = Form(None),
    host_ids: Optional[str] = Form(None, alias="hostIds"),  # JSON string
    show: Optional[str] = Form(None),
    products_reviewed: Optional[str] = Form(None),
    key_highlights: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    additional_context: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    release_year: Optional[int] = Form(None),
    cast: Optional[str] = Form(None),
    director: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    current_admin: User = Depends(get_current_admin),
):
    """
    Create new movie from a multipart form.
    The thumbnail goes to the bucket under thumbnails/ before the row is written.
    """
    # Validate everything before touching storage so a rejected request leaves nothing behind
    missing = [
        name for name, value in (
            ("thumbnail", thumbnail),
            ("title", title),
            ("categoryId", category_id),
            ("description", description),
            ("video_url", video_url),
        )
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required fields: {', '.join(missing)}"
        )

    parsed_host_ids = _host_ids_or_400(host_ids) or []
    _check_references(db, category_id, parsed_host_ids)
    await _check_thumbnail(thumbnail)

    logger.info(f"Uploading thumbnail: {thumbnail.filename}")
    thumbnail_url = await _upload_thumbnail(storage, thumbnail)

    try:
        movie = crud_movie.create_with_hosts(
            db,
            fields={
                "title": title.strip(),
                "category_id": category_id,
                "description": description,
                "video_url": video_url.strip(),
                "thumbnail_url": thumbnail_url,
                "show": show,
                "products_reviewed": products_reviewed,
                "key_highlights": key_highlights,
                "rating": rating,
                "additional_context": additional_context,
                "duration": duration,
                "release_year": release_year,
                "cast": cast,
                "director": director,
            },
            host_ids=parsed_host_ids,
        )
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error creating movie: {e}", exc_info=True)
        await storage.safe_delete_url(thumbnail_url)
        raise HTTPException(status_code=500, detail="Failed to create movie")

    logger.info(f"✅ Movie created: {movie.title} (ID: {movie.id})")
    return success(format_movie(crud_movie.get(db, movie.id)), "Movie created")


@router.put("/{movie_id}")
async def update_movie(
    movie_id: int,
    title: Optional[str] = Form(None),
    category_id: Optional[int] = Form(None, alias="categoryId"),
    description: Optional[str] = Form(None),
    video_url: Optional[str] = Form(None),
    host_ids: Optional[str] = Form(None, alias="hostIds"),
    show: Optional[str] = Form(None),
    products_reviewed: Optional[str] = Form(None),
    key_highlights: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    additional_context: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    release_year: Optional[int] = Form(None),
    cast: Optional[str] = Form(None),
    director: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    current_admin: User = Depends(get_current_admin),
):
    """
    Update movie. Sent fields overwrite, omitted fields stay as they are.
    hostIds, when sent, replaces every host link in the same transaction.
    """
    movie = crud_movie.get(db, movie_id)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found")

    parsed_host_ids = _host_ids_or_400(host_ids)
    _check_references(db, category_id, parsed_host_ids)
    if thumbnail is not None:
        await _check_thumbnail(thumbnail)

    updates = {
        "title": title,
        "category_id": category_id,
        "description": description,
        "video_url": video_url,
        "show": show,
        "products_reviewed": products_reviewed,
        "key_highlights": key_highlights,
        "rating": rating,
        "additional_context": additional_context,
        "duration": duration,
        "release_year": release_year,
        "cast": cast,
        "director": director,
    }
    updates = {field: value for field, value in updates.items() if value is not None}

    old_thumbnail_url = None
    new_thumbnail_url = None
    if thumbnail is not None:
        logger.info(f"Uploading new thumbnail: {thumbnail.filename}")
        new_thumbnail_url = await _upload_thumbnail(storage, thumbnail)
        old_thumbnail_url = movie.thumbnail_url
        updates["thumbnail_url"] = new_thumbnail_url

    try:
        for field, value in updates.items():
            setattr(movie, field, value)

        if parsed_host_ids is not None:
            crud_movie.relink_hosts(db, movie=movie, host_ids=parsed_host_ids)

        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error updating movie {movie_id}: {e}", exc_info=True)
        if new_thumbnail_url:
            await storage.safe_delete_url(new_thumbnail_url)
        raise HTTPException(status_code=500, detail="Failed to update movie")

    if old_thumbnail_url and old_thumbnail_url != new_thumbnail_url:
        await storage.safe_delete_url(old_thumbnail_url)

    db.expire_all()
    logger.info(f"✅ Movie updated: {movie.title}")
    return success(format_movie(crud_movie.get(db, movie_id)), "Movie updated successfully")


@router.delete("/{movie_id}")
async def delete_movie(
    movie_id: int,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    current_admin: User = Depends(get_current_admin),
):
    """
    Permanently delete movie, then clean up its bucket objects.
    Cleanup failures are logged; the row stays deleted.
    """
    try:
        movie = crud_movie.get(db, movie_id)
        if not movie:
            raise HTTPException(status_code=404, detail="Movie not found")

        movie_title = movie.title
        asset_urls = [movie.thumbnail_url, movie.video_url]

        # Join rows go with the movie (ON DELETE CASCADE)
        crud_movie.remove(db, db_obj=movie)

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error deleting movie {movie_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete movie")

    for url in asset_urls:
        await storage.safe_delete_url(url)

    logger.info(f"✅ Movie deleted: {movie_title}")
    return success(message="Movie deleted successfully")
