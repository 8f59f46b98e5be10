"""
Async HTTP client for the Reelcart catalog API.

Every response is the {ok, data, message} envelope; ok=false (or a body that
is not an envelope at all) surfaces as ApiError carrying the server message.
"""
import httpx
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from .models import Category, Host, LoginResult, Movie, Role, User
from .session import AppSession

logger = logging.getLogger(__name__)

MOVIE_NOT_FOUND = "movie not found"

# (filename, content, content_type) as accepted by httpx files=
FileTuple = Tuple[str, bytes, str]


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self):
        return self.message


def _form_fields(fields: Dict[str, Any]) -> Dict[str, str]:
    """Multipart text parts; None means 'not sent'"""
    return {key: str(value) for key, value in fields.items() if value is not None}


class CatalogClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[AppSession] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session or AppSession()
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> Dict[str, str]:
        if self.session.token:
            return {"Authorization": f"Bearer {self.session.token}"}
        return {}

    async def _envelope(self, method: str, path: str, **kwargs) -> Tuple[int, dict]:
        try:
            response = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ {method} {path} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            raise ApiError(f"Unexpected response from server ({response.status_code})", response.status_code)

        if not isinstance(body, dict) or "ok" not in body:
            raise ApiError(f"Unexpected response from server ({response.status_code})", response.status_code)

        return response.status_code, body

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        status_code, body = await self._envelope(method, path, **kwargs)
        if not body["ok"]:
            raise ApiError(body.get("message") or "Request failed", status_code)
        return body.get("data")

    # ==================== AUTH & USERS ====================

    async def login(self, email: str, password: str, role: Role = Role.USER) -> LoginResult:
        """Log in and store user + token on the session"""
        data = await self._request(
            "POST", "/user/login",
            json={"email": email, "password": password, "type": role.value},
        )
        result = LoginResult.model_validate(data)
        self.session.sign_in(result.user, result.token)
        logger.info(f"✅ Signed in as {result.user.email}")
        return result

    def logout(self) -> None:
        self.session.sign_out()

    async def signup(self, **fields) -> User:
        payload = {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in fields.items() if v is not None}
        return User.model_validate(await self._request("POST", "/user", json=payload))

    async def list_users(self) -> List[User]:
        return [User.model_validate(u) for u in await self._request("GET", "/user")]

    async def get_user(self, user_id: int) -> User:
        return User.model_validate(await self._request("GET", f"/user/{user_id}"))

    async def update_user(self, user_id: int, **fields) -> User:
        payload = {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in fields.items() if v is not None}
        return User.model_validate(await self._request("PUT", f"/user/{user_id}", json=payload))

    # ==================== CATEGORIES ====================

    async def list_categories(self) -> List[Category]:
        return [Category.model_validate(c) for c in await self._request("GET", "/category")]

    async def get_category(self, category_id: int) -> Category:
        return Category.model_validate(await self._request("GET", f"/category/{category_id}"))

    async def create_category(self, name: str, description: str) -> Category:
        data = await self._request("POST", "/category", json={"name": name, "description": description})
        return Category.model_validate(data)

    async def update_category(
        self, category_id: int, name: Optional[str] = None, description: Optional[str] = None
    ) -> Category:
        payload = {k: v for k, v in {"name": name, "description": description}.items() if v is not None}
        return Category.model_validate(await self._request("PUT", f"/category/{category_id}", json=payload))

    async def delete_category(self, category_id: int) -> None:
        await self._request("DELETE", f"/category/{category_id}")

    # ==================== HOSTS ====================

    async def list_hosts(self) -> List[Host]:
        return [Host.model_validate(h) for h in await self._request("GET", "/host")]

    async def get_host(self, host_id: int) -> Host:
        return Host.model_validate(await self._request("GET", f"/host/{host_id}"))

    async def create_host(self, name: str, bio: Optional[str] = None) -> Host:
        payload = {"name": name}
        if bio is not None:
            payload["bio"] = bio
        return Host.model_validate(await self._request("POST", "/host", json=payload))

    async def update_host(self, host_id: int, name: str, bio: Optional[str] = None) -> Host:
        payload = {"name": name}
        if bio is not None:
            payload["bio"] = bio
        return Host.model_validate(await self._request("PUT", f"/host/{host_id}", json=payload))

    async def delete_host(self, host_id: int) -> None:
        await self._request("DELETE", f"/host/{host_id}")

    # ==================== MOVIES ====================

    async def list_movies(
        self, category_id: Optional[int] = None, host_id: Optional[int] = None
    ) -> List[Movie]:
        params = {}
        if category_id is not None:
            params["categoryId"] = category_id
        if host_id is not None:
            params["hostId"] = host_id
        return [Movie.model_validate(m) for m in await self._request("GET", "/movie", params=params)]

    async def get_movie(self, movie_id: int) -> Optional[Movie]:
        """None when the movie does not exist; other failures raise ApiError"""
        status_code, body = await self._envelope("GET", f"/movie/{movie_id}")
        if body["ok"]:
            return Movie.model_validate(body["data"])
        if body.get("message") == MOVIE_NOT_FOUND:
            return None
        raise ApiError(body.get("message") or "Request failed", status_code)

    def _movie_form(self, fields: Dict[str, Any], host_ids: Optional[List[int]]) -> Dict[str, str]:
        form = dict(fields)
        if "category_id" in form:
            form["categoryId"] = form.pop("category_id")
        if host_ids is not None:
            form["hostIds"] = json.dumps(list(host_ids))
        return _form_fields(form)

    async def create_movie(
        self,
        thumbnail: FileTuple,
        host_ids: Optional[List[int]] = None,
        **fields,
    ) -> Movie:
        """
        fields: title, category_id, description, video_url and optional
        metadata (show, rating, duration, release_year, ...)
        """
        data = await self._request(
            "POST", "/movie",
            data=self._movie_form(fields, host_ids),
            files={"thumbnail": thumbnail},
        )
        return Movie.model_validate(data)

    async def update_movie(
        self,
        movie_id: int,
        thumbnail: Optional[FileTuple] = None,
        host_ids: Optional[List[int]] = None,
        **fields,
    ) -> Movie:
        """Only the given fields change; host_ids replaces every host link when given"""
        kwargs = {"data": self._movie_form(fields, host_ids)}
        if thumbnail is not None:
            kwargs["files"] = {"thumbnail": thumbnail}
        return Movie.model_validate(await self._request("PUT", f"/movie/{movie_id}", **kwargs))

    async def delete_movie(self, movie_id: int) -> None:
        await self._request("DELETE", f"/movie/{movie_id}")
