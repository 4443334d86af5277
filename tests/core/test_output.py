"""Tests for log() routing between stdout and the UI status queue."""

import sys

from loguru import logger

from music_triage.core.output import (
    clear_ui_mode,
    drain_pending_messages,
    log,
    set_ui_mode,
    setup_loguru,
)


def test_cli_mode_prints(capsys):
    clear_ui_mode()

    log("hello")

    assert capsys.readouterr().out == "hello\n"
    assert drain_pending_messages() == []


def test_ui_mode_queues_with_color(capsys):
    set_ui_mode()
    try:
        log("saved", "success")
        log("broken", "error")
    finally:
        clear_ui_mode()

    assert capsys.readouterr().out == ""
    assert drain_pending_messages() == [("saved", "green"), ("broken", "red")]
    assert drain_pending_messages() == []


def test_setup_loguru_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "music-triage.log"
    try:
        setup_loguru(log_file, "DEBUG")
        logger.debug("file only")
    finally:
        logger.remove()
        logger.add(sys.stderr)

    content = log_file.read_text()
    assert "Loguru initialized" in content
    assert "file only" in content
