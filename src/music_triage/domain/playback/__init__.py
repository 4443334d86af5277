"""Playback domain - MPV integration and tag extraction.

This domain handles:
- One mpv process per session via JSON IPC
- Looping, pausable sessions bound to a single file
- Allow-listed tag metadata for the current item
"""

from .metadata import IMPORTANT_KEYS, TrackMetadata, extract_metadata, format_tag
from .session import PlaybackSession
from .sink import (
    AudioSink,
    MpvSink,
    SinkFactory,
    check_mpv_available,
    mpv_sink_factory,
)

__all__ = [
    "IMPORTANT_KEYS",
    "TrackMetadata",
    "extract_metadata",
    "format_tag",
    "PlaybackSession",
    "AudioSink",
    "MpvSink",
    "SinkFactory",
    "check_mpv_available",
    "mpv_sink_factory",
]
