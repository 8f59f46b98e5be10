from typing import Iterable, List, Optional
from sqlalchemy.orm import Session, selectinload
from ..crud.base import CRUDBase
from ..models.host import Host
from ..models.movie import MovieHost
from ..schemas.host import HostCreate, HostUpdate

class CRUDHost(CRUDBase[Host, HostCreate, HostUpdate]):
    def _with_movies(self, db: Session):
        return db.query(Host).options(
            selectinload(Host.movie_hosts).selectinload(MovieHost.movie)
        )

    def get_with_movies(self, db: Session, id: int) -> Optional[Host]:
        return self._with_movies(db).filter(Host.id == id).first()

    def list_with_movies(self, db: Session) -> List[Host]:
        return self._with_movies(db).order_by(Host.id).all()

    def missing_ids(self, db: Session, ids: Iterable[int]) -> List[int]:
        """Ids from the input with no matching host row"""
        wanted = set(ids)
        if not wanted:
            return []
        found = {row.id for row in db.query(Host.id).filter(Host.id.in_(wanted)).all()}
        return sorted(wanted - found)

host = CRUDHost(Host)
