"""Tests for command execution and the driving loop."""

from unittest.mock import patch

import pytest

from music_triage.core.config import Config
from music_triage.core.output import clear_ui_mode, drain_pending_messages, set_ui_mode
from music_triage.domain.queues import Rating
from music_triage.domain.triage import EngineState, TriageEngine
from music_triage.exceptions import QueueIOError
from music_triage.ui import keys
from music_triage.ui.app import main_loop, run_interactive_ui
from music_triage.ui.commands import execute_command
from music_triage.ui.keys import Command
from music_triage.ui.render import calculate_layout, display_path, stats_lines


@pytest.fixture
def ui_messages():
    """Route log() into the pending status queue for the duration of a test."""
    drain_pending_messages()
    set_ui_mode()
    yield drain_pending_messages
    clear_ui_mode()
    drain_pending_messages()


class TestExecuteCommand:
    def test_quit(self, make_track, make_playlists, sinks):
        engine = TriageEngine(make_playlists([make_track("a.flac")]), sinks)
        assert execute_command(engine, Command(keys.QUIT)) == (True, False)

    def test_rate_failure_is_reported_not_raised(
        self, tmp_path, make_track, make_playlists, sinks, ui_messages
    ):
        bad = tmp_path / "bad.flac"
        bad.write_bytes(b"garbage")
        queues = make_playlists([make_track("a.flac"), str(bad)])
        engine = TriageEngine(queues, sinks)

        should_quit, redraw = execute_command(engine, Command(keys.RATE, Rating.R10))

        assert (should_quit, redraw) == (False, True)
        assert engine.state is EngineState.STALLED
        messages = ui_messages()
        assert messages[-1][1] == "red"
        assert "next item failed" in messages[-1][0]

    def test_write_failure_is_reported(self, make_track, make_playlists, sinks, ui_messages):
        engine = TriageEngine(make_playlists([make_track("a.flac")]), sinks)

        with patch.object(engine, "persist", side_effect=QueueIOError("todo.m3u8")):
            execute_command(engine, Command(keys.WRITE))

        assert ui_messages()[-1][1] == "red"

    def test_write(self, tmp_path, make_track, make_playlists, sinks, ui_messages):
        a, b = make_track("a.flac"), make_track("b.flac")
        engine = TriageEngine(make_playlists([a, b]), sinks)
        engine.rate(Rating.R02)

        execute_command(engine, Command(keys.WRITE))

        assert (tmp_path / "rating-02.m3u8").read_bytes() == f"{a}\n".encode()
        assert ui_messages()[-1] == ("Playlists written", "green")


class TestMainLoop:
    def test_stops_when_todo_exhausted(
        self, term, scripted_events, make_track, make_playlists, sinks
    ):
        a, b = make_track("a.flac"), make_track("b.flac")
        queues = make_playlists([a, b])
        engine = TriageEngine(queues, sinks)

        main_loop(term, engine, Config(), scripted_events("0", "x", "4"))

        assert engine.is_done()
        assert queues.bucket(Rating.R10).paths() == (a,)
        assert queues.bucket(Rating.R04).paths() == (b,)

    def test_quit_leaves_remaining_items(
        self, term, scripted_events, make_track, make_playlists, sinks
    ):
        a, b = make_track("a.flac"), make_track("b.flac")
        queues = make_playlists([a, b])
        engine = TriageEngine(queues, sinks)

        main_loop(term, engine, Config(), scripted_events(" ", "1", "q"))

        assert queues.todo.paths() == (b,)
        assert queues.bucket(Rating.R01).paths() == (a,)


class TestRunInteractiveUI:
    """Shutdown path: playback stops, then the playlists are written."""

    def test_quit_key_writes_playlists(
        self, tmp_path, term, scripted_events, make_track, make_playlists, sinks
    ):
        a, b = make_track("a.flac"), make_track("b.flac")
        engine = TriageEngine(make_playlists([a, b]), sinks)

        run_interactive_ui(engine, Config(), term, scripted_events("6", "q"))

        assert (tmp_path / "rating-06.m3u8").read_bytes() == f"{a}\n".encode()
        assert (tmp_path / "todo.m3u8").read_bytes() == f"{b}\n".encode()
        assert sinks.open_sinks() == []

    def test_ctrl_c_still_writes_and_stops_playback(
        self, tmp_path, term, scripted_events, make_track, make_playlists, sinks
    ):
        a, b, c = make_track("a.flac"), make_track("b.flac"), make_track("c.flac")
        engine = TriageEngine(make_playlists([a, b, c]), sinks)

        # Script runs out after one rating, which raises KeyboardInterrupt
        run_interactive_ui(engine, Config(), term, scripted_events("8"))

        assert (tmp_path / "rating-08.m3u8").read_bytes() == f"{a}\n".encode()
        assert (tmp_path / "todo.m3u8").read_bytes() == f"{b}\n{c}\n".encode()
        assert sinks.open_sinks() == []
        assert sinks.journal[-1] == ("close", b)

    def test_playback_stopped_before_write(
        self, term, scripted_events, make_track, make_playlists, sinks
    ):
        engine = TriageEngine(make_playlists([make_track("a.flac")]), sinks)
        write = engine.persist
        open_at_write = []

        def record_then_write():
            open_at_write.extend(sinks.open_sinks())
            write()

        with patch.object(engine, "persist", side_effect=record_then_write) as persist:
            run_interactive_ui(engine, Config(), term, scripted_events("q"))

        persist.assert_called_once()
        assert open_at_write == []

    def test_write_failure_propagates_after_teardown(
        self, term, scripted_events, make_track, make_playlists, sinks
    ):
        engine = TriageEngine(make_playlists([make_track("a.flac")]), sinks)

        with patch.object(engine, "persist", side_effect=QueueIOError("todo.m3u8")):
            with pytest.raises(QueueIOError):
                run_interactive_ui(engine, Config(), term, scripted_events("q"))

        assert sinks.open_sinks() == []


class TestRender:
    def test_layout_fits_terminal(self):
        layout = calculate_layout(24)
        assert layout["playlist_y"] + layout["playlist_height"] == layout["status_y"]
        assert layout["metadata_height"] >= 3

    def test_display_path_replaces_undecodable_bytes(self):
        assert display_path("caf\udce9.ogg") == "caf�.ogg"

    def test_stats_lines(self, make_track, make_playlists, sinks):
        engine = TriageEngine(make_playlists([make_track("a.flac")]), sinks)
        engine.toggle_pause()

        lines = stats_lines(engine)

        assert lines[0] == "Remaining: 1    State: paused"
        assert "rating-10: 0" in lines[1]
