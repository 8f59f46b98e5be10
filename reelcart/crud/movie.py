from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session, selectinload
from ..crud.base import CRUDBase
from ..models.movie import Movie, MovieHost
from ..schemas.movie import MovieCreate, MovieUpdate


def dedupe(ids: List[int]) -> List[int]:
    return list(dict.fromkeys(ids))


class CRUDMovie(CRUDBase[Movie, MovieCreate, MovieUpdate]):
    def _with_relations(self, db: Session):
        return db.query(Movie).options(
            selectinload(Movie.category),
            selectinload(Movie.movie_hosts).selectinload(MovieHost.host),
        )

    def get(self, db: Session, id: Any) -> Optional[Movie]:
        return self._with_relations(db).filter(Movie.id == id).first()

    def list_filtered(
        self,
        db: Session,
        *,
        category_id: Optional[int] = None,
        host_id: Optional[int] = None,
    ) -> List[Movie]:
        """Absent filters impose no constraint; present ones combine with AND"""
        query = self._with_relations(db)

        if category_id is not None:
            query = query.filter(Movie.category_id == category_id)

        if host_id is not None:
            query = query.filter(
                Movie.movie_hosts.any(MovieHost.host_id == host_id)
            )

        return query.order_by(Movie.created_at.desc(), Movie.id.desc()).all()

    def create_with_hosts(
        self, db: Session, *, fields: Dict[str, Any], host_ids: List[int]
    ) -> Movie:
        """Insert the movie and one join row per host in a single commit"""
        movie = Movie(**fields)
        movie.movie_hosts = [MovieHost(host_id=host_id) for host_id in dedupe(host_ids)]
        db.add(movie)
        db.commit()
        db.refresh(movie)
        return movie

    def relink_hosts(self, db: Session, *, movie: Movie, host_ids: List[int]) -> None:
        """
        Replace every join row of the movie with the given set.
        Does not commit: the caller commits together with the scalar updates.
        """
        movie.movie_hosts.clear()
        db.flush()
        for host_id in dedupe(host_ids):
            movie.movie_hosts.append(MovieHost(host_id=host_id))
        db.flush()

movie = CRUDMovie(Movie)
