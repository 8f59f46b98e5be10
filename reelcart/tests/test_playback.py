import asyncio

import pytest

from reelcart.client.models import Movie
from reelcart.client.playback import (
    CONTROLS_IDLE_TIMEOUT,
    ErrorType,
    PlaybackSession,
    PlaybackState,
    PlayerError,
    PlayerEvent,
    format_long_time,
    format_time,
)

HLS_URL = "https://cdn.reelcart.io/pixel9/master.m3u8"
MP4_URL = "https://cdn.reelcart.io/pixel9/full.mp4"


class FakeMedia:
    def __init__(self):
        self.src = None
        self.current_time = 0.0
        self.muted = False
        self.seeks = []
        self.plays = 0
        self.pauses = 0
        self.released = 0

    def __setattr__(self, name, value):
        if name == "current_time" and "seeks" in self.__dict__:
            self.seeks.append(value)
        super().__setattr__(name, value)

    def play(self):
        self.plays += 1

    def pause(self):
        self.pauses += 1

    def release(self):
        self.released += 1


class FakePlayer:
    def __init__(self):
        self.handlers = {}
        self.source = None
        self.media = None
        self.start_loads = []
        self.recoveries = 0
        self.destroyed = 0

    def on(self, event, callback):
        self.handlers[event] = callback

    def emit(self, event, *args):
        self.handlers[event](*args)

    def load_source(self, url):
        self.source = url

    def attach_media(self, media):
        self.media = media

    def start_load(self, position):
        self.start_loads.append(position)

    def recover_media_error(self):
        self.recoveries += 1

    def destroy(self):
        self.destroyed += 1


class FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    def __init__(self):
        self.timers = []

    def call_later(self, delay, callback, *args):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire(self):
        for timer in [t for t in self.timers if not t.cancelled]:
            timer.cancelled = True
            timer.callback()


def make_movie(url=HLS_URL):
    return Movie(id=7, title="Pixel 9 Review", description="Two weeks in", video_url=url, rating="PG", duration="12m")


@pytest.fixture()
def player():
    return FakePlayer()


@pytest.fixture()
def media():
    return FakeMedia()


@pytest.fixture()
def scheduler():
    return FakeScheduler()


def make_session(media, player, scheduler, movie=None, loader=None):
    async def default_loader(movie_id):
        return movie

    return PlaybackSession(
        movie_id=7,
        loader=loader or default_loader,
        media=media,
        player_factory=lambda: player,
        scheduler=scheduler,
    )


async def playing_session(media, player, scheduler, duration=600.0):
    session = make_session(media, player, scheduler, movie=make_movie())
    await session.open()
    player.emit(PlayerEvent.MANIFEST_PARSED)
    session.on_duration_change(duration)
    return session


# ==================== loading ====================

async def test_hls_source_uses_adaptive_player(media, player, scheduler):
    session = make_session(media, player, scheduler, movie=make_movie())
    await session.open()

    assert session.state == PlaybackState.READY
    assert player.source == HLS_URL
    assert player.media is media
    assert media.src is None

    player.emit(PlayerEvent.MANIFEST_PARSED)
    assert session.state == PlaybackState.PLAYING
    assert media.plays == 1


async def test_direct_source_plays_natively(media, player, scheduler):
    session = make_session(media, player, scheduler, movie=make_movie(MP4_URL))
    await session.open()

    assert media.src == MP4_URL
    assert player.source is None
    assert session.state == PlaybackState.PLAYING


async def test_missing_movie_is_an_error(media, player, scheduler):
    session = make_session(media, player, scheduler, movie=None)
    await session.open()

    assert session.state == PlaybackState.ERROR
    assert session.error == "Movie not found"


async def test_loader_failure_is_an_error(media, player, scheduler):
    async def broken(movie_id):
        raise RuntimeError("connection refused")

    session = make_session(media, player, scheduler, loader=broken)
    await session.open()

    assert session.state == PlaybackState.ERROR
    assert session.error == "An error occurred while loading the movie"


# ==================== player errors ====================

async def test_non_fatal_errors_are_ignored(media, player, scheduler):
    session = await playing_session(media, player, scheduler)

    player.emit(PlayerEvent.ERROR, PlayerError(ErrorType.NETWORK, fatal=False))

    assert session.state == PlaybackState.PLAYING
    assert player.start_loads == []


async def test_fatal_network_error_reloads_from_current_position(media, player, scheduler):
    session = await playing_session(media, player, scheduler)
    session.on_time_update(42.5)

    player.emit(PlayerEvent.ERROR, PlayerError(ErrorType.NETWORK, fatal=True))

    assert player.start_loads == [42.5]
    assert session.state == PlaybackState.PLAYING
    assert player.destroyed == 0


async def test_fatal_media_error_recovers(media, player, scheduler):
    session = await playing_session(media, player, scheduler)

    player.emit(PlayerEvent.ERROR, PlayerError(ErrorType.MEDIA, fatal=True))

    assert player.recoveries == 1
    assert session.state == PlaybackState.PLAYING


async def test_other_fatal_error_tears_down_once(media, player, scheduler):
    session = await playing_session(media, player, scheduler)

    player.emit(PlayerEvent.ERROR, PlayerError(ErrorType.OTHER, fatal=True, details="keyLoadError"))
    player.emit(PlayerEvent.ERROR, PlayerError(ErrorType.OTHER, fatal=True))
    session.close()
    session.close()

    assert session.state == PlaybackState.ERROR
    assert player.destroyed == 1
    assert media.released == 1


# ==================== scrubbing ====================

async def test_scrub_commits_once_on_release(media, player, scheduler):
    session = await playing_session(media, player, scheduler, duration=600.0)
    media.seeks.clear()

    session.scrub_start(50, 100)
    assert session.dragging
    assert session.current_time == 300.0

    session.on_time_update(12.0)  # ignored while dragging
    assert session.current_time == 300.0

    session.scrub_move(75, 100)
    assert session.current_time == 450.0
    assert media.seeks == []

    session.scrub_end()
    assert media.seeks == [450.0]
    assert not session.dragging

    session.scrub_end()
    assert media.seeks == [450.0]


async def test_scrub_clamps_to_bar(media, player, scheduler):
    session = await playing_session(media, player, scheduler, duration=200.0)

    session.scrub_start(-20, 100)
    assert session.current_time == 0.0
    session.scrub_move(150, 100)
    session.scrub_end()
    assert media.current_time == 200.0


async def test_scrub_without_duration_is_ignored(media, player, scheduler):
    session = make_session(media, player, scheduler, movie=make_movie())
    await session.open()

    session.scrub_start(50, 100)
    assert not session.dragging


async def test_click_seek_and_skip(media, player, scheduler):
    session = await playing_session(media, player, scheduler, duration=100.0)

    session.seek_click(25, 100)
    assert media.current_time == 25.0

    session.skip_forward()
    assert media.current_time == 35.0

    session.on_time_update(5.0)
    session.skip_backward()
    assert media.current_time == 0.0

    session.on_time_update(95.0)
    session.skip_forward()
    assert media.current_time == 100.0


# ==================== controls & toggles ====================

async def test_controls_hide_after_idle_timeout(media, player, scheduler):
    session = await playing_session(media, player, scheduler)

    session.pointer_moved()
    assert session.controls_visible
    assert scheduler.timers[-1].delay == CONTROLS_IDLE_TIMEOUT

    scheduler.fire()
    assert not session.controls_visible

    session.pointer_moved()
    assert session.controls_visible


async def test_controls_stay_while_paused_or_dragging(media, player, scheduler):
    session = await playing_session(media, player, scheduler)

    session.pause()
    session.pointer_moved()
    scheduler.fire()
    assert session.controls_visible

    session.play()
    session.scrub_start(10, 100)
    scheduler.fire()
    assert session.controls_visible


async def test_controls_timer_defaults_to_running_loop(media, player, monkeypatch):
    monkeypatch.setattr("reelcart.client.playback.CONTROLS_IDLE_TIMEOUT", 0.01)
    session = await playing_session(media, player, None)

    session.pointer_moved()
    assert session.controls_visible
    await asyncio.sleep(0.05)
    assert not session.controls_visible
    session.close()


async def test_toggles_are_independent(media, player, scheduler):
    session = await playing_session(media, player, scheduler)

    session.toggle_mute()
    session.toggle_fullscreen()
    assert media.muted is True
    assert session.fullscreen is True
    assert session.state == PlaybackState.PLAYING

    session.toggle_play()
    assert session.state == PlaybackState.PAUSED
    assert session.muted is True
    assert session.overlay_lines[:2] == ["You're watching", "Pixel 9 Review"]


async def test_ended_and_replay(media, player, scheduler):
    session = await playing_session(media, player, scheduler)
    session.on_time_update(599.0)
    session.on_ended()
    assert session.state == PlaybackState.ENDED

    session.play()
    assert session.state == PlaybackState.PLAYING
    assert session.current_time == 0.0


# ==================== formatting ====================

@pytest.mark.parametrize("seconds, short, long", [
    (0, "0:00", "0:00"),
    (None, "0:00", "0:00"),
    (float("nan"), "0:00", "0:00"),
    (9, "0:09", "0:09"),
    (75.9, "1:15", "1:15"),
    (3725, "62:05", "1:02:05"),
])
def test_format_time(seconds, short, long):
    assert format_time(seconds) == short
    assert format_long_time(seconds) == long
