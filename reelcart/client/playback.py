"""
Playback session for the storefront watch screen.

A PlaybackSession owns one media element and, for HLS sources, one adaptive
player created through an injected factory. The host environment forwards
media events (time update, duration change, ended) and pointer input; the
session keeps the player state, the scrub bar and the controls overlay
consistent.

    IDLE -> LOADING -> READY -> PLAYING <-> PAUSED -> ENDED
                 \\                 \\         /
                  +---------------> ERROR <--+

Player errors:
- non-fatal: ignored, the player recovers on its own
- fatal network error: reload from the current position
- fatal media error: media recovery
- any other fatal error: teardown and ERROR
"""
import asyncio
import logging
import math
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Protocol

from .models import Movie

logger = logging.getLogger(__name__)

CONTROLS_IDLE_TIMEOUT = 3.0  # seconds
SKIP_SECONDS = 10.0

LOAD_FAILED = "An error occurred while loading the movie"
NOT_FOUND = "Movie not found"
PLAYBACK_FAILED = "Playback failed"


class PlaybackState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"
    ERROR = "error"


class PlayerEvent(str, Enum):
    MANIFEST_PARSED = "hlsManifestParsed"
    ERROR = "hlsError"


class ErrorType(str, Enum):
    NETWORK = "networkError"
    MEDIA = "mediaError"
    OTHER = "otherError"


class PlayerError:
    def __init__(self, type: ErrorType, fatal: bool, details: str = ""):
        self.type = type
        self.fatal = fatal
        self.details = details

    def __repr__(self):
        return f"<PlayerError(type={self.type.value}, fatal={self.fatal}, details={self.details!r})>"


class MediaElement(Protocol):
    src: Optional[str]
    current_time: float
    muted: bool

    def play(self) -> None: ...
    def pause(self) -> None: ...
    def release(self) -> None: ...


class AdaptivePlayer(Protocol):
    def on(self, event: PlayerEvent, callback: Callable[..., None]) -> None: ...
    def load_source(self, url: str) -> None: ...
    def attach_media(self, media: MediaElement) -> None: ...
    def start_load(self, position: float) -> None: ...
    def recover_media_error(self) -> None: ...
    def destroy(self) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """asyncio event loops satisfy this"""
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


MovieLoader = Callable[[int], Awaitable[Optional[Movie]]]
PlayerFactory = Callable[[], AdaptivePlayer]


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _valid_seconds(value: Optional[float]) -> bool:
    return value is not None and not math.isnan(value) and value > 0


def format_time(seconds: Optional[float]) -> str:
    """M:SS"""
    if not _valid_seconds(seconds):
        return "0:00"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def format_long_time(seconds: Optional[float]) -> str:
    """H:MM:SS once there is at least one hour, M:SS below that"""
    if not _valid_seconds(seconds):
        return "0:00"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class PlaybackSession:
    def __init__(
        self,
        movie_id: int,
        loader: MovieLoader,
        media: MediaElement,
        player_factory: PlayerFactory,
        scheduler: Optional[Scheduler] = None,
        on_change: Optional[Callable[["PlaybackSession"], None]] = None,
    ):
        self.movie_id = movie_id
        self._loader = loader
        self.media = media
        self._player_factory = player_factory
        self._scheduler = scheduler
        self._on_change = on_change

        self.state = PlaybackState.IDLE
        self.movie: Optional[Movie] = None
        self.error: Optional[str] = None

        self.current_time = 0.0
        self.duration = 0.0
        self.muted = False
        self.fullscreen = False
        self.controls_visible = True
        self.dragging = False

        self._player: Optional[AdaptivePlayer] = None
        self._scrub_fraction = 0.0
        self._controls_timer: Optional[TimerHandle] = None
        self._closed = False

    # ==================== LIFECYCLE ====================

    async def open(self) -> None:
        """Fetch the movie and attach its source to the media element"""
        if self.state != PlaybackState.IDLE:
            return

        self._set_state(PlaybackState.LOADING)
        try:
            movie = await self._loader(self.movie_id)
        except Exception as e:
            logger.error(f"❌ Failed to load movie {self.movie_id}: {e}")
            self._fail(LOAD_FAILED)
            return

        if self._closed:
            return
        if movie is None:
            self._fail(NOT_FOUND)
            return

        self.movie = movie
        self._set_state(PlaybackState.READY)
        self._attach_source(movie)

    def _attach_source(self, movie: Movie) -> None:
        if movie.is_adaptive:
            player = self._player_factory()
            self._player = player
            player.on(PlayerEvent.MANIFEST_PARSED, self._on_manifest_parsed)
            player.on(PlayerEvent.ERROR, self._on_player_error)
            player.load_source(movie.video_url)
            player.attach_media(self.media)
            logger.info(f"🎬 Adaptive playback for movie {movie.id}")
        else:
            self.media.src = movie.video_url
            logger.info(f"🎬 Native playback for movie {movie.id}")
            self.play()

    def close(self) -> None:
        """Tear everything down; safe to call more than once"""
        if self._closed:
            return
        self._closed = True
        self._cancel_controls_timer()
        self._teardown_player()
        self.media.pause()
        self.media.release()
        logger.debug(f"Playback session for movie {self.movie_id} closed")

    @property
    def closed(self) -> bool:
        return self._closed

    def _teardown_player(self) -> None:
        player, self._player = self._player, None
        if player is not None:
            player.destroy()

    def _fail(self, message: str) -> None:
        self.error = message
        self._teardown_player()
        self._cancel_controls_timer()
        self.controls_visible = True
        self._set_state(PlaybackState.ERROR)

    def _set_state(self, state: PlaybackState) -> None:
        if self.state == state:
            return
        logger.debug(f"Playback {self.movie_id}: {self.state.value} -> {state.value}")
        self.state = state
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self)

    # ==================== PLAYER EVENTS ====================

    def _on_manifest_parsed(self, *args) -> None:
        if self.state == PlaybackState.READY:
            self.play()

    def _on_player_error(self, error: PlayerError) -> None:
        if not error.fatal:
            logger.debug(f"Non-fatal player error ignored: {error!r}")
            return

        if self._player is None:
            return

        if error.type == ErrorType.NETWORK:
            logger.warning(f"⚠️ Fatal network error, reloading from {self.current_time:.1f}s")
            self._player.start_load(self.current_time)
        elif error.type == ErrorType.MEDIA:
            logger.warning("⚠️ Fatal media error, trying to recover")
            self._player.recover_media_error()
        else:
            logger.error(f"❌ Unrecoverable player error: {error!r}")
            self._fail(PLAYBACK_FAILED)

    # ==================== MEDIA EVENTS ====================

    def on_time_update(self, seconds: float) -> None:
        # The scrub bar owns the position while dragging
        if self.dragging:
            return
        self.current_time = seconds
        self._notify()

    def on_duration_change(self, seconds: Optional[float]) -> None:
        if _valid_seconds(seconds) and not math.isinf(seconds):
            self.duration = seconds
            self._notify()

    def on_ended(self) -> None:
        if self.state in (PlaybackState.PLAYING, PlaybackState.PAUSED):
            self._cancel_controls_timer()
            self.controls_visible = True
            self._set_state(PlaybackState.ENDED)

    def on_fullscreen_change(self, fullscreen: bool) -> None:
        """Fullscreen can also be left from outside (Esc key)"""
        self.fullscreen = fullscreen
        self._notify()

    # ==================== TRANSPORT ====================

    def play(self) -> None:
        if self.state not in (PlaybackState.READY, PlaybackState.PAUSED, PlaybackState.ENDED):
            return
        if self.state == PlaybackState.ENDED:
            self.media.current_time = 0.0
            self.current_time = 0.0
        self.media.play()
        self._set_state(PlaybackState.PLAYING)
        self._arm_controls_timer()

    def pause(self) -> None:
        if self.state != PlaybackState.PLAYING:
            return
        self.media.pause()
        self._cancel_controls_timer()
        self.controls_visible = True
        self._set_state(PlaybackState.PAUSED)

    def toggle_play(self) -> None:
        if self.state == PlaybackState.PLAYING:
            self.pause()
        else:
            self.play()

    def _seek(self, seconds: float) -> None:
        target = clamp(seconds, 0.0, self.duration) if self.duration > 0 else max(0.0, seconds)
        self.media.current_time = target
        self.current_time = target
        self._notify()

    def skip(self, seconds: float) -> None:
        if self.state not in (PlaybackState.PLAYING, PlaybackState.PAUSED, PlaybackState.ENDED):
            return
        self._seek(self.current_time + seconds)

    def skip_forward(self) -> None:
        self.skip(SKIP_SECONDS)

    def skip_backward(self) -> None:
        self.skip(-SKIP_SECONDS)

    # ==================== SCRUB BAR ====================

    @property
    def progress(self) -> float:
        """Played share in percent, 0 when the duration is unknown"""
        if self.duration <= 0:
            return 0.0
        return clamp(self.current_time / self.duration * 100.0, 0.0, 100.0)

    def _fraction(self, x: float, width: float) -> Optional[float]:
        if width <= 0 or self.duration <= 0:
            return None
        return clamp(x / width, 0.0, 1.0)

    def seek_click(self, x: float, width: float) -> None:
        """Single click on the bar commits immediately"""
        if self.dragging:
            return
        fraction = self._fraction(x, width)
        if fraction is not None:
            self._seek(self.duration * fraction)

    def scrub_start(self, x: float, width: float) -> None:
        fraction = self._fraction(x, width)
        if fraction is None:
            return
        self.dragging = True
        self._scrub_fraction = fraction
        self.current_time = self.duration * fraction
        self._cancel_controls_timer()
        self.controls_visible = True
        self._notify()

    def scrub_move(self, x: float, width: float) -> None:
        if not self.dragging:
            return
        fraction = self._fraction(x, width)
        if fraction is None:
            return
        self._scrub_fraction = fraction
        self.current_time = self.duration * fraction
        self._notify()

    def scrub_end(self) -> None:
        """Release: the media seeks once, to the last dragged position"""
        if not self.dragging:
            return
        self.dragging = False
        self._seek(self.duration * self._scrub_fraction)
        self._arm_controls_timer()

    # ==================== TOGGLES ====================

    def toggle_mute(self) -> None:
        self.muted = not self.muted
        self.media.muted = self.muted
        self._notify()

    def toggle_fullscreen(self) -> None:
        self.fullscreen = not self.fullscreen
        self._notify()

    def pointer_moved(self) -> None:
        """Show controls now, hide them again after CONTROLS_IDLE_TIMEOUT of stillness"""
        self.controls_visible = True
        self._arm_controls_timer()
        self._notify()

    def _arm_controls_timer(self) -> None:
        self._cancel_controls_timer()
        if self.state != PlaybackState.PLAYING or self.dragging or self._closed:
            return
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._controls_timer = scheduler.call_later(CONTROLS_IDLE_TIMEOUT, self._hide_controls)

    def _cancel_controls_timer(self) -> None:
        timer, self._controls_timer = self._controls_timer, None
        if timer is not None:
            timer.cancel()

    def _hide_controls(self) -> None:
        self._controls_timer = None
        if self.state == PlaybackState.PLAYING and not self.dragging:
            self.controls_visible = False
            self._notify()

    # ==================== DISPLAY ====================

    @property
    def time_label(self) -> str:
        return f"{format_time(self.current_time)} / {format_long_time(self.duration)}"

    @property
    def overlay_lines(self) -> List[str]:
        """'You're watching' overlay shown while paused"""
        if self.movie is None or self.state != PlaybackState.PAUSED:
            return []
        details = " ".join(
            str(part) for part in (self.movie.release_year, self.movie.rating, self.movie.duration) if part
        )
        return [line for line in ("You're watching", self.movie.title, details, self.movie.description) if line]
