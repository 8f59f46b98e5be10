"""
Application session for storefront and admin clients.

One AppSession is built at start-up and handed to everything that needs the
signed-in user, the bearer token or the cart. Persistence is injected as a
(load, save) pair so the same session works against a JSON file, a browser
bridge or plain memory in tests.
"""
import json
import os
import logging
from typing import Callable, List, Optional, Tuple
from pydantic import BaseModel

from .models import User

logger = logging.getLogger(__name__)

DEFAULT_PRICE = 14.99
TAX_RATE = 0.10

Loader = Callable[[], Optional[dict]]
Saver = Callable[[dict], None]
Persistence = Tuple[Loader, Saver]


class CartItem(BaseModel):
    id: int  # movie id
    title: str
    price: float = DEFAULT_PRICE
    thumbnail_url: Optional[str] = None


class Cart:
    """Movie purchases keyed by movie id; a movie is in the cart at most once"""

    def __init__(self, items: Optional[List[CartItem]] = None):
        self._items: List[CartItem] = []
        for item in items or []:
            self.add(item)

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def __len__(self):
        return len(self._items)

    def __contains__(self, movie_id: int) -> bool:
        return any(item.id == movie_id for item in self._items)

    def add(self, item: CartItem) -> bool:
        if item.id in self:
            return False
        self._items.append(item)
        return True

    def remove(self, movie_id: int) -> bool:
        before = len(self._items)
        self._items = [item for item in self._items if item.id != movie_id]
        return len(self._items) != before

    def clear(self) -> None:
        self._items = []

    @property
    def subtotal(self) -> float:
        return round(sum(item.price for item in self._items), 2)

    @property
    def tax(self) -> float:
        return round(self.subtotal * TAX_RATE, 2)

    @property
    def total(self) -> float:
        return round(self.subtotal + self.tax, 2)


def memory_persistence(initial: Optional[dict] = None) -> Persistence:
    store = {"state": initial}

    def load() -> Optional[dict]:
        return store["state"]

    def save(state: dict) -> None:
        store["state"] = state

    return load, save


def json_file_persistence(path: str) -> Persistence:
    """Keep the session in a JSON file; an unreadable file starts a fresh session"""

    def load() -> Optional[dict]:
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Ignoring unreadable session file {path}: {e}")
            return None

    def save(state: dict) -> None:
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(state, fh)
        os.replace(tmp_path, path)

    return load, save


class AppSession:
    def __init__(self, persistence: Optional[Persistence] = None):
        self._load, self._save = persistence or memory_persistence()
        self.user: Optional[User] = None
        self.token: Optional[str] = None
        self.cart = Cart()
        self._restore()

    # ==================== PERSISTENCE ====================

    def _restore(self) -> None:
        state = self._load()
        if not state:
            return
        try:
            self.user = User.model_validate(state["user"]) if state.get("user") else None
            self.token = state.get("token")
            self.cart = Cart([CartItem.model_validate(i) for i in state.get("cart", [])])
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"⚠️ Discarding stored session: {e}")
            self.user, self.token, self.cart = None, None, Cart()

    def snapshot(self) -> dict:
        return {
            "user": self.user.model_dump(mode="json") if self.user else None,
            "token": self.token,
            "cart": [item.model_dump() for item in self.cart.items],
        }

    def save(self) -> None:
        self._save(self.snapshot())

    # ==================== AUTH ====================

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.user.is_admin

    def sign_in(self, user: User, token: str) -> None:
        self.user = user
        self.token = token
        self.save()

    def sign_out(self) -> None:
        self.user = None
        self.token = None
        self.save()

    # ==================== CART ====================

    def add_to_cart(self, item: CartItem) -> bool:
        added = self.cart.add(item)
        if added:
            self.save()
        return added

    def remove_from_cart(self, movie_id: int) -> bool:
        removed = self.cart.remove(movie_id)
        if removed:
            self.save()
        return removed

    def clear_cart(self) -> None:
        self.cart.clear()
        self.save()
