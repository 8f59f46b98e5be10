import json

import httpx
import pytest

from reelcart.client.admin import AdminDashboard
from reelcart.client.api import ApiError, CatalogClient
from reelcart.client.models import Movie, Role
from reelcart.client.playback import PlaybackState
from reelcart.client.session import AppSession
from reelcart.client.storefront import CheckoutError, Storefront

BASE = "https://api.reelcart.io/api/v1"

MOVIE = {
    "id": 7,
    "title": "Pixel 9 Review",
    "description": "Two weeks in",
    "video_url": "https://cdn.reelcart.io/pixel9/full.mp4",
    "thumbnail_url": "https://reelcart-assets.s3.us-east-1.amazonaws.com/thumbnails/a.png",
    "category_id": 1,
    "category": {"id": 1, "name": "Tech Reviews", "description": "Gadgets"},
    "hosts": [{"id": 2, "name": "Maya", "bio": ""}],
}
USER = {"id": 3, "name": "Admin", "email": "admin@reelcart.io", "role": "ADMIN"}


def ok(data=None, message=None, status=200):
    return httpx.Response(status, json={"ok": True, "data": data, "message": message})


def fail(message, status):
    return httpx.Response(status, json={"ok": False, "data": None, "message": message})


class Router:
    """Maps (method, path) to canned responses and records every request"""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, response):
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        path = request.url.path.replace("/api/v1", "", 1)
        response = self.routes.get((request.method, path))
        if response is None:
            return fail(f"Endpoint not found: {request.url.path}", 404)
        return response(request) if callable(response) else response


@pytest.fixture()
def router():
    return Router()


@pytest.fixture()
async def api(router):
    client = CatalogClient(BASE, session=AppSession(), transport=httpx.MockTransport(router))
    yield client
    await client.aclose()


# ==================== CatalogClient ====================

async def test_login_stores_token_and_sends_it(api, router):
    router.add("POST", "/user/login", ok({"user": USER, "token": "jwt-abc", "expires_in": 172800}, "Logged user"))
    router.add("GET", "/user", ok([USER]))

    result = await api.login("admin@reelcart.io", "pw", role=Role.ADMIN)
    assert result.user.is_admin
    assert api.session.token == "jwt-abc"
    assert json.loads(router.requests[0].content) == {
        "email": "admin@reelcart.io", "password": "pw", "type": "ADMIN",
    }

    users = await api.list_users()
    assert users[0].email == "admin@reelcart.io"
    assert router.requests[-1].headers["Authorization"] == "Bearer jwt-abc"


async def test_error_envelope_raises_api_error(api, router):
    router.add("POST", "/user/login", fail("Incorrect password", 401))

    with pytest.raises(ApiError) as exc_info:
        await api.login("a@reelcart.io", "wrong")
    assert exc_info.value.status_code == 401
    assert str(exc_info.value) == "Incorrect password"
    assert api.session.token is None


async def test_non_envelope_body_raises(api, router):
    router.add("GET", "/category", httpx.Response(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(ApiError) as exc_info:
        await api.list_categories()
    assert exc_info.value.status_code == 502


async def test_get_movie_not_found_returns_none(api, router):
    router.add("GET", "/movie/7", ok(MOVIE))
    router.add("GET", "/movie/8", fail("movie not found", 200))

    movie = await api.get_movie(7)
    assert movie.category.name == "Tech Reviews"
    assert movie.host_ids == [2]
    assert await api.get_movie(8) is None


async def test_list_movies_sends_filters(api, router):
    router.add("GET", "/movie", ok([MOVIE]))

    await api.list_movies(category_id=1, host_id=2)
    params = router.requests[-1].url.params
    assert params["categoryId"] == "1"
    assert params["hostId"] == "2"


async def test_create_movie_sends_multipart(api, router):
    router.add("POST", "/movie", ok(MOVIE, "Movie created", status=201))

    movie = await api.create_movie(
        ("thumb.png", b"png-bytes", "image/png"),
        host_ids=[2, 5],
        title="Pixel 9 Review",
        category_id=1,
        description="Two weeks in",
        video_url="https://cdn.reelcart.io/pixel9/full.mp4",
        rating=None,
    )
    assert movie.id == 7

    request = router.requests[-1]
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.content.decode("latin-1")
    assert 'name="categoryId"' in body
    assert 'name="hostIds"' in body and "[2, 5]" in body
    assert 'name="thumbnail"; filename="thumb.png"' in body
    assert 'name="rating"' not in body


# ==================== AdminDashboard ====================

async def test_admin_panels_apply_successful_mutations(api, router):
    category = {"id": 1, "name": "Tech Reviews", "description": "Gadgets", "movies": []}
    router.add("GET", "/category", ok([category]))
    router.add("POST", "/category", ok({**category, "id": 2, "name": "Unboxings"}, status=201))
    router.add("DELETE", "/category/1", ok(message="Category deleted successfully"))
    router.add("GET", "/movie", ok([MOVIE]))

    dashboard = AdminDashboard(api)
    await dashboard.refresh_categories()
    await dashboard.refresh_movies()
    assert [c.name for c in dashboard.categories.items] == ["Tech Reviews"]

    created = await dashboard.save_category("Unboxings", "Out of the box")
    assert created.id == 2
    assert [c.id for c in dashboard.categories.items] == [1, 2]

    assert await dashboard.delete_category(1) is True
    assert [c.id for c in dashboard.categories.items] == [2]
    assert dashboard.movies.items.get(7).category_id is None


async def test_admin_form_failure_keeps_list(api, router):
    router.add("POST", "/host", fail("Name is required and must be a non-empty string", 400))

    dashboard = AdminDashboard(api)
    assert await dashboard.save_host("   ") is None
    assert dashboard.hosts.form.error == "Name is required and must be a non-empty string"
    assert len(dashboard.hosts.items) == 0


async def test_admin_movie_create_needs_thumbnail(api, router):
    dashboard = AdminDashboard(api)
    assert await dashboard.save_movie({"title": "x"}) is None
    assert dashboard.movies.form.error == "Thumbnail is required"
    assert router.requests == []


# ==================== Storefront ====================

class NullPlayer:
    def on(self, *args): pass
    def load_source(self, url): pass
    def attach_media(self, media): pass
    def start_load(self, position): pass
    def recover_media_error(self): pass
    def destroy(self): pass


class NullMedia:
    src = None
    current_time = 0.0
    muted = False

    def play(self): pass
    def pause(self): pass
    def release(self): pass


async def test_storefront_cart_and_checkout(api, router):
    router.add("GET", "/movie", ok([MOVIE]))
    shop = Storefront(api, player_factory=NullPlayer)

    movies = await shop.browse(category_id=1)
    assert shop.add_to_cart(movies[0]) is True
    assert shop.add_to_cart(movies[0]) is False
    assert shop.cart.total == 16.49

    with pytest.raises(CheckoutError):
        shop.checkout(name="Ana", email="not-an-email", address="1 Main St")
    assert len(shop.cart) == 1

    order = shop.checkout(name="Ana", email="Ana@Reelcart.io", address="1 Main St")
    assert order.total == 16.49
    assert order.buyer.email == "ana@reelcart.io"
    assert [i.id for i in order.items] == [7]
    assert len(shop.cart) == 0

    with pytest.raises(CheckoutError):
        shop.checkout(name="Ana", email="ana@reelcart.io", address="1 Main St")


async def test_storefront_watch_opens_session(api, router):
    router.add("GET", "/movie/7", ok(MOVIE))
    router.add("GET", "/movie/9", fail("movie not found", 200))
    shop = Storefront(api, player_factory=NullPlayer, scheduler=None)

    media = NullMedia()
    session = shop.watch(7, media)
    await session.open()
    assert session.state == PlaybackState.PLAYING
    assert media.src == MOVIE["video_url"]
    session.close()

    missing = shop.watch(9, NullMedia())
    await missing.open()
    assert missing.state == PlaybackState.ERROR
    assert missing.error == "Movie not found"


@pytest.mark.parametrize("email", ["x@y..z", "ana@", "ana reelcart.io", ""])
async def test_checkout_rejects_malformed_email(api, email):
    shop = Storefront(api, player_factory=NullPlayer)
    shop.add_to_cart(Movie(**MOVIE))

    with pytest.raises(CheckoutError):
        shop.checkout(name="Ana", email=email, address="1 Main St")
    assert len(shop.cart) == 1
