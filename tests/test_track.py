"""Tests for Track lifecycle and transport (using NullBackend)."""

import logging
import pytest
from trackplayer.api.track import Track
from trackplayer.backends.null_backend import NullBackend
from trackplayer.core.exceptions import IoFailure, ResourceUnavailable, UnsupportedFormat
from trackplayer.core.models import PlaybackState
from conftest import TEN_SECONDS


def test_unloaded_track_is_inert(backend):
    """Every transport call on an unloaded track is a silent no-op."""
    track = Track(backend)

    track.play()
    track.pause()
    track.stop()
    track.fast_forward(1_000_000)
    track.rewind(1_000_000)
    track.set_position(5)
    track.close()

    assert not track.is_loaded()
    assert track.get_position() == 0
    assert track.get_duration() == 0
    assert not track.is_playing()
    assert track.state == PlaybackState.UNLOADED
    assert track.snapshot() is None
    assert backend.opened_count == 0


def test_open_sets_duration(backend, make_wav):
    track = Track(backend)
    track.open(make_wav())

    assert track.is_loaded()
    assert track.get_duration() == TEN_SECONDS
    assert track.get_position() == 0
    assert track.state == PlaybackState.STOPPED


def test_play_advances_with_clock(backend, clock, make_wav):
    track = Track(backend)
    track.open(make_wav())

    track.play()
    clock.advance(2.5)

    assert track.is_playing()
    assert track.state == PlaybackState.PLAYING
    assert track.get_position() == 2_500_000


def test_pause_keeps_position_and_play_resumes(backend, clock, make_wav):
    track = Track(backend)
    track.open(make_wav())
    track.play()
    clock.advance(1.0)

    track.pause()
    clock.advance(3.0)

    assert track.state == PlaybackState.PAUSED
    assert track.get_position() == 1_000_000

    track.play()
    clock.advance(1.0)
    assert track.get_position() == 2_000_000


def test_pause_when_not_running_is_noop(backend, make_wav):
    track = Track(backend)
    track.open(make_wav())

    track.pause()

    assert track.state == PlaybackState.STOPPED


@pytest.mark.parametrize("advance_then", ["playing", "paused"])
def test_stop_rewinds_to_zero(backend, clock, make_wav, advance_then):
    track = Track(backend)
    track.open(make_wav())
    track.play()
    clock.advance(4.0)
    if advance_then == "paused":
        track.pause()

    track.stop()

    assert track.get_position() == 0
    assert track.state == PlaybackState.STOPPED
    assert not track.is_playing()


def test_seek_while_playing_keeps_playing(backend, clock, make_wav):
    track = Track(backend)
    track.open(make_wav())
    track.play()

    track.fast_forward(3_000_000)

    assert track.is_playing()
    assert track.get_position() == 3_000_000
    clock.advance(1.0)
    assert track.get_position() == 4_000_000


def test_seek_while_paused_stays_paused(backend, clock, make_wav):
    track = Track(backend)
    track.open(make_wav())
    track.play()
    clock.advance(1.0)
    track.pause()

    track.set_position(7_000_000)
    clock.advance(1.0)

    assert track.state == PlaybackState.PAUSED
    assert track.get_position() == 7_000_000


def test_seeks_are_clamped(backend, make_wav):
    track = Track(backend)
    track.open(make_wav())

    track.fast_forward(50_000_000)
    assert track.get_position() == TEN_SECONDS

    track.rewind(99_000_000)
    assert track.get_position() == 0

    track.set_position(-5)
    assert track.get_position() == 0

    track.set_position(TEN_SECONDS + 1)
    assert track.get_position() == TEN_SECONDS


def test_negative_delta_is_treated_as_zero(backend, make_wav):
    track = Track(backend)
    track.open(make_wav())
    track.set_position(4_000_000)

    track.fast_forward(-2_000_000)
    track.rewind(-2_000_000)

    assert track.get_position() == 4_000_000


def test_fast_forward_rewind_round_trip(backend, make_wav):
    track = Track(backend)
    track.open(make_wav())
    track.set_position(3_000_000)

    track.fast_forward(2_500_000)
    track.rewind(2_500_000)

    assert track.get_position() == 3_000_000


def test_playback_runs_to_end(backend, clock, make_wav):
    """At the end of data the track stops but keeps the position."""
    track = Track(backend)
    track.open(make_wav())
    track.play()

    clock.advance(30.0)

    assert not track.is_playing()
    assert track.state == PlaybackState.STOPPED
    assert track.get_position() == TEN_SECONDS


def test_reopen_releases_previous_resource_first(backend, make_wav):
    track = Track(backend)
    track.open(make_wav("a.wav"))
    track.open(make_wav("b.wav", duration_micros=2_000_000))

    assert backend.opened_count == 2
    assert backend.closed_count == 1
    assert backend.peak_live_count == 1
    assert track.get_duration() == 2_000_000


def test_close_is_idempotent(backend, make_wav):
    track = Track(backend)
    track.open(make_wav())

    track.close()
    track.close()

    assert not track.is_loaded()
    assert backend.closed_count == 1
    assert backend.live_count == 0


def test_close_failure_is_logged_not_raised(clock, make_wav, caplog):
    backend = NullBackend(clock=clock, fail_close=True)
    track = Track(backend)
    track.open(make_wav())

    with caplog.at_level(logging.WARNING):
        track.close()

    assert not track.is_loaded()
    assert "did not close cleanly" in caplog.text


def test_open_close_failure_does_not_fail_open(clock, make_wav):
    backend = NullBackend(clock=clock, fail_close=True)
    track = Track(backend)
    track.open(make_wav("a.wav"))

    track.open(make_wav("b.wav", duration_micros=1_000_000))

    assert track.is_loaded()
    assert track.get_duration() == 1_000_000
    assert backend.live_count == 1


def test_open_unsupported_extension(backend, tmp_path):
    path = tmp_path / "song.mp3"
    path.write_bytes(b"ID3")
    track = Track(backend)

    with pytest.raises(UnsupportedFormat):
        track.open(str(path))

    assert not track.is_loaded()
    assert backend.opened_count == 0


def test_open_missing_file(backend, tmp_path):
    track = Track(backend)

    with pytest.raises(IoFailure):
        track.open(str(tmp_path / "missing.wav"))


def test_open_without_free_line(clock, make_wav):
    backend = NullBackend(clock=clock, max_lines=0)
    track = Track(backend)

    with pytest.raises(ResourceUnavailable):
        track.open(make_wav())

    assert not track.is_loaded()


def test_snapshot(backend, make_wav):
    track = Track(backend)
    path = make_wav()
    track.open(path)
    track.set_position(1_234_567)

    snapshot = track.snapshot()

    assert snapshot.path == path
    assert snapshot.position_micros == 1_234_567
    assert snapshot.sound.duration_micros == TEN_SECONDS
