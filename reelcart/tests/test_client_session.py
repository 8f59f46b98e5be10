import json

import pytest

from reelcart.client.models import User
from reelcart.client.session import (
    AppSession,
    Cart,
    CartItem,
    json_file_persistence,
    memory_persistence,
)


def item(movie_id, price=14.99):
    return CartItem(id=movie_id, title=f"Movie {movie_id}", price=price)


def test_cart_deduplicates_by_movie():
    cart = Cart()
    assert cart.add(item(1)) is True
    assert cart.add(item(1, price=1.0)) is False
    assert len(cart) == 1
    assert cart.items[0].price == 14.99


def test_cart_totals_include_ten_percent_tax():
    cart = Cart([item(1, 14.99), item(2, 14.99)])
    assert cart.subtotal == 29.98
    assert cart.tax == 3.0
    assert cart.total == 32.98


def test_cart_remove_and_clear():
    cart = Cart([item(1), item(2)])
    assert cart.remove(1) is True
    assert cart.remove(1) is False
    assert 2 in cart
    cart.clear()
    assert len(cart) == 0
    assert cart.total == 0


def test_session_saves_on_every_change():
    load, save = memory_persistence()
    saved = []

    def recording_save(state):
        saved.append(state)
        save(state)

    session = AppSession((load, recording_save))
    session.add_to_cart(item(1))
    session.add_to_cart(item(1))  # duplicate, nothing to save
    session.sign_in(User(id=3, name="Viewer", email="viewer@reelcart.io"), "jwt-token")
    session.remove_from_cart(1)

    assert len(saved) == 3
    assert saved[-1]["token"] == "jwt-token"
    assert saved[-1]["cart"] == []


def test_session_restores_from_file(tmp_path):
    path = str(tmp_path / "session.json")
    first = AppSession(json_file_persistence(path))
    first.sign_in(User(id=3, name="Viewer", email="viewer@reelcart.io", role="ADMIN"), "jwt-token")
    first.add_to_cart(item(5))

    second = AppSession(json_file_persistence(path))
    assert second.is_authenticated
    assert second.is_admin
    assert second.user.email == "viewer@reelcart.io"
    assert [i.id for i in second.cart.items] == [5]

    second.sign_out()
    with open(path) as fh:
        assert json.load(fh)["token"] is None


@pytest.mark.parametrize("content", ["{not json", json.dumps({"user": {"id": "x"}, "token": "t"})])
def test_corrupt_session_file_starts_fresh(tmp_path, content):
    path = tmp_path / "session.json"
    path.write_text(content)

    session = AppSession(json_file_persistence(str(path)))
    assert not session.is_authenticated
    assert len(session.cart) == 0
