"""Storefront client: browsing, cart, checkout and the watch screen"""
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, EmailStr, validator

from .api import CatalogClient
from .models import Category, LoginResult, Movie, Role
from .playback import MediaElement, PlaybackSession, PlayerFactory, Scheduler
from .session import DEFAULT_PRICE, CartItem

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    pass


class BuyerDetails(BaseModel):
    name: str
    email: EmailStr
    address: str

    @validator('name', 'address')
    def must_not_be_blank(cls, v):
        if not v or not v.strip():
            raise ValueError('This field is required')
        return v.strip()

    @validator('email', pre=True)
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class OrderSummary(BaseModel):
    order_id: str
    buyer: BuyerDetails
    items: List[CartItem]
    subtotal: float
    tax: float
    total: float
    placed_at: datetime


class Storefront:
    def __init__(
        self,
        client: CatalogClient,
        player_factory: PlayerFactory,
        scheduler: Optional[Scheduler] = None,
    ):
        self.client = client
        self.session = client.session
        self._player_factory = player_factory
        self._scheduler = scheduler

    # ==================== ACCOUNT ====================

    async def login(self, email: str, password: str) -> LoginResult:
        return await self.client.login(email, password, role=Role.USER)

    def logout(self) -> None:
        self.client.logout()

    # ==================== BROWSE ====================

    async def categories(self) -> List[Category]:
        return await self.client.list_categories()

    async def browse(self, category_id: Optional[int] = None) -> List[Movie]:
        """All movies, or only those of one category"""
        return await self.client.list_movies(category_id=category_id)

    async def movie(self, movie_id: int) -> Optional[Movie]:
        return await self.client.get_movie(movie_id)

    # ==================== CART ====================

    def add_to_cart(self, movie: Movie, price: float = DEFAULT_PRICE) -> bool:
        """False when the movie is already in the cart"""
        return self.session.add_to_cart(
            CartItem(id=movie.id, title=movie.title, price=price, thumbnail_url=movie.thumbnail_url)
        )

    def remove_from_cart(self, movie_id: int) -> bool:
        return self.session.remove_from_cart(movie_id)

    @property
    def cart(self):
        return self.session.cart

    def checkout(self, name: str, email: str, address: str) -> OrderSummary:
        """
        Demo checkout: no payment provider is called. Validates the buyer,
        snapshots the cart into an order summary and empties the cart.
        """
        cart = self.session.cart
        if len(cart) == 0:
            raise CheckoutError("Your cart is empty")

        try:
            buyer = BuyerDetails(name=name, email=email, address=address)
        except ValueError as e:
            raise CheckoutError(f"Invalid buyer details: {e}") from e

        order = OrderSummary(
            order_id=uuid.uuid4().hex[:12].upper(),
            buyer=buyer,
            items=cart.items,
            subtotal=cart.subtotal,
            tax=cart.tax,
            total=cart.total,
            placed_at=datetime.now(timezone.utc),
        )
        self.session.clear_cart()
        logger.info(f"✅ Order {order.order_id} placed: {len(order.items)} item(s), total {order.total:.2f}")
        return order

    # ==================== WATCH ====================

    def watch(self, movie_id: int, media: MediaElement, on_change=None) -> PlaybackSession:
        """Build a playback session; the caller awaits open() and calls close()"""
        return PlaybackSession(
            movie_id=movie_id,
            loader=self.client.get_movie,
            media=media,
            player_factory=self._player_factory,
            scheduler=self._scheduler,
            on_change=on_change,
        )
