"""
Admin form helpers.

SequencedForm guards one create/edit form: a second submit while one is in
flight is refused, and a response that arrives after the form was reset (or
re-submitted) is dropped instead of overwriting newer state.
OptimisticList is the id-keyed list a panel renders, patched in place after
each successful mutation instead of being refetched.
"""
import httpx
import logging
from typing import Awaitable, Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from .api import ApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERIC_ERROR = "Something went wrong, please try again"


def error_message(exc: BaseException) -> str:
    """One readable line for the form's error banner"""
    if isinstance(exc, ApiError):
        return exc.message or GENERIC_ERROR
    if isinstance(exc, httpx.HTTPError):
        return "Network error, check your connection"
    return str(exc) or GENERIC_ERROR


class SequencedForm:
    def __init__(self, name: str = "form"):
        self.name = name
        self.submitting = False
        self.error: Optional[str] = None
        self._sequence = 0

    @property
    def sequence(self) -> int:
        return self._sequence

    def reset(self) -> None:
        """Forget any in-flight request; its response will be discarded"""
        self._sequence += 1
        self.submitting = False
        self.error = None

    def is_current(self, token: int) -> bool:
        return token == self._sequence

    async def submit(
        self,
        action: Callable[[], Awaitable[T]],
        on_success: Optional[Callable[[T], None]] = None,
    ) -> Optional[T]:
        """
        Run action once. Returns its result, or None when the submit was
        refused, failed, or was superseded while in flight.
        """
        if self.submitting:
            logger.debug(f"{self.name}: submit ignored, request already in flight")
            return None

        self._sequence += 1
        token = self._sequence
        self.submitting = True
        self.error = None

        try:
            result = await action()
        except (ApiError, httpx.HTTPError, ValueError) as e:
            if not self.is_current(token):
                logger.debug(f"{self.name}: dropping stale failure #{token}")
                return None
            self.error = error_message(e)
            logger.warning(f"⚠️ {self.name} failed: {self.error}")
            return None
        finally:
            # unexpected errors and cancellation must not leave the form locked
            if self.is_current(token):
                self.submitting = False

        if not self.is_current(token):
            logger.debug(f"{self.name}: dropping stale response #{token}")
            return None

        if on_success is not None:
            on_success(result)
        return result


class OptimisticList(Generic[T]):
    """Items keyed by their `id` attribute, in insertion order"""

    def __init__(self, items: Optional[List[T]] = None):
        self._items: Dict[int, T] = {}
        self.replace_all(items or [])

    def replace_all(self, items: List[T]) -> None:
        self._items = {item.id: item for item in items}

    def upsert(self, item: T) -> None:
        # dicts keep the original slot on overwrite, so edits stay in place
        self._items[item.id] = item

    def remove(self, item_id: int) -> bool:
        return self._items.pop(item_id, None) is not None

    def get(self, item_id: int) -> Optional[T]:
        return self._items.get(item_id)

    @property
    def items(self) -> List[T]:
        return list(self._items.values())

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self):
        return len(self._items)

    def __contains__(self, item_id: int) -> bool:
        return item_id in self._items
