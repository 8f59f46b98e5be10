"""Admin dashboard: category, host, movie and user panels over CatalogClient"""
import logging
from typing import Any, Dict, Generic, List, Optional, TypeVar

from .api import ApiError, CatalogClient, FileTuple
from .forms import OptimisticList, SequencedForm, error_message
from .models import Category, Host, LoginResult, Movie, Role, User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Panel(Generic[T]):
    """One admin screen: the rendered list plus the form editing it"""

    def __init__(self, name: str):
        self.name = name
        self.items: OptimisticList[T] = OptimisticList()
        self.form = SequencedForm(name)
        self.loading = False
        self.error: Optional[str] = None


class AdminDashboard:
    def __init__(self, client: CatalogClient):
        self.client = client
        self.categories: Panel[Category] = Panel("categories")
        self.hosts: Panel[Host] = Panel("hosts")
        self.movies: Panel[Movie] = Panel("movies")
        self.users: Panel[User] = Panel("users")

    # ==================== AUTH ====================

    async def login(self, email: str, password: str) -> LoginResult:
        """Dashboard logins always ask for the ADMIN role"""
        return await self.client.login(email, password, role=Role.ADMIN)

    def logout(self) -> None:
        self.client.logout()

    @property
    def is_authenticated(self) -> bool:
        return self.client.session.is_admin

    # ==================== LOADING ====================

    async def _load(self, panel: Panel, fetch) -> None:
        panel.loading = True
        panel.error = None
        try:
            panel.items.replace_all(await fetch())
        except ApiError as e:
            panel.error = error_message(e)
            logger.warning(f"⚠️ Failed to load {panel.name}: {panel.error}")
        finally:
            panel.loading = False

    async def refresh_categories(self) -> None:
        await self._load(self.categories, self.client.list_categories)

    async def refresh_hosts(self) -> None:
        await self._load(self.hosts, self.client.list_hosts)

    async def refresh_movies(self) -> None:
        await self._load(self.movies, self.client.list_movies)

    async def refresh_users(self) -> None:
        await self._load(self.users, self.client.list_users)

    async def refresh_all(self) -> None:
        await self.refresh_categories()
        await self.refresh_hosts()
        await self.refresh_movies()
        await self.refresh_users()

    async def _delete(self, panel: Panel, remove, item_id: int) -> bool:
        try:
            await remove(item_id)
        except ApiError as e:
            panel.error = f"Failed to delete: {error_message(e)}"
            return False
        panel.items.remove(item_id)
        return True

    # ==================== CATEGORIES ====================

    async def save_category(
        self, name: str, description: str, category_id: Optional[int] = None
    ) -> Optional[Category]:
        if category_id is None:
            action = lambda: self.client.create_category(name, description)
        else:
            action = lambda: self.client.update_category(category_id, name, description)
        return await self.categories.form.submit(action, on_success=self.categories.items.upsert)

    async def delete_category(self, category_id: int) -> bool:
        deleted = await self._delete(self.categories, self.client.delete_category, category_id)
        if deleted:
            # Movies of the category are now uncategorized server-side
            for movie in self.movies.items:
                if movie.category_id == category_id:
                    self.movies.items.upsert(movie.model_copy(update={"category_id": None, "category": None}))
        return deleted

    # ==================== HOSTS ====================

    async def save_host(
        self, name: str, bio: Optional[str] = None, host_id: Optional[int] = None
    ) -> Optional[Host]:
        if host_id is None:
            action = lambda: self.client.create_host(name, bio)
        else:
            action = lambda: self.client.update_host(host_id, name, bio)
        return await self.hosts.form.submit(action, on_success=self.hosts.items.upsert)

    async def delete_host(self, host_id: int) -> bool:
        return await self._delete(self.hosts, self.client.delete_host, host_id)

    # ==================== MOVIES ====================

    async def save_movie(
        self,
        fields: Dict[str, Any],
        host_ids: Optional[List[int]] = None,
        thumbnail: Optional[FileTuple] = None,
        movie_id: Optional[int] = None,
    ) -> Optional[Movie]:
        if movie_id is None:
            if thumbnail is None:
                self.movies.form.error = "Thumbnail is required"
                return None
            action = lambda: self.client.create_movie(thumbnail, host_ids=host_ids, **fields)
        else:
            action = lambda: self.client.update_movie(movie_id, thumbnail=thumbnail, host_ids=host_ids, **fields)
        return await self.movies.form.submit(action, on_success=self.movies.items.upsert)

    async def delete_movie(self, movie_id: int) -> bool:
        return await self._delete(self.movies, self.client.delete_movie, movie_id)

    def category_name(self, movie: Movie) -> Optional[str]:
        if movie.category is not None:
            return movie.category.name
        category = self.categories.items.get(movie.category_id) if movie.category_id else None
        return category.name if category else None

    # ==================== USERS ====================

    async def save_user(self, user_id: int, **fields) -> Optional[User]:
        return await self.users.form.submit(
            lambda: self.client.update_user(user_id, **fields),
            on_success=self.users.items.upsert,
        )
