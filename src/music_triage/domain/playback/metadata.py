"""
Tag extraction for the item being triaged.

Reads the container from in-memory bytes with Mutagen and keeps only the
descriptive tags worth showing while deciding on a rating.
"""

import io
from typing import Optional

from loguru import logger
from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.flac import FLACVorbisError
from mutagen.id3 import ID3
from mutagen.id3 import error as ID3Error
from mutagen.mp4 import MP4MetadataError, MP4Tags

from music_triage.exceptions import DecoderError, TagParseError

IMPORTANT_KEYS = (
    "ALBUM",
    "ALBUMARTIST",
    "TITLE",
    "SUBTITLE",
    "ARTIST",
    "album",
    "albumartist",
    "title",
    "subtitle",
    "artist",
)

# ID3 frames and MP4 atoms shown under their Vorbis names
ID3_FRAME_KEYS = {
    "TALB": "ALBUM",
    "TPE2": "ALBUMARTIST",
    "TIT2": "TITLE",
    "TIT3": "SUBTITLE",
    "TPE1": "ARTIST",
}

MP4_ATOM_KEYS = {
    "\xa9alb": "ALBUM",
    "aART": "ALBUMARTIST",
    "\xa9nam": "TITLE",
    "\xa9ART": "ARTIST",
}

TAG_ERRORS = (ID3Error, MP4MetadataError, FLACVorbisError)

KEY_WIDTH = 30

TrackMetadata = list[str]


def format_tag(key: str, value: str) -> str:
    return f"{key:<{KEY_WIDTH}}: {value}"


def _tag_pairs(tags) -> list[tuple[str, str]]:
    """Flatten a Mutagen tag container into (key, value) pairs in tag order."""
    if tags is None:
        return []

    if isinstance(tags, ID3):
        pairs = []
        for frame in tags.values():
            key = ID3_FRAME_KEYS.get(frame.FrameID)
            if key is None:
                continue
            for text in getattr(frame, "text", []):
                pairs.append((key, str(text)))
        return pairs

    if isinstance(tags, MP4Tags):
        pairs = []
        for atom, values in tags.items():
            key = MP4_ATOM_KEYS.get(atom)
            if key is None:
                continue
            for value in values if isinstance(values, list) else [values]:
                pairs.append((key, str(value)))
        return pairs

    # Vorbis comments are a list of (key, value) with original case;
    # slicing bypasses the dict-style lookup and keeps duplicates
    try:
        return [(str(key), str(value)) for key, value in tags[:]]
    except (TypeError, ValueError):
        logger.debug(f"Unsupported tag container: {type(tags).__name__}")
        return []


def filter_metadata(pairs: list[tuple[str, str]]) -> TrackMetadata:
    """Keep allow-listed keys, preserving order and duplicates."""
    return [format_tag(key, value) for key, value in pairs if key in IMPORTANT_KEYS]


def extract_metadata(data: bytes, path: Optional[str] = None) -> TrackMetadata:
    """Identify the container and return the display lines for its tags.

    Args:
        data: Full contents of the audio file
        path: Original path, used as a format hint and in error messages

    Raises:
        DecoderError: If the container is unrecognized or corrupt
        TagParseError: If the tag block is malformed
    """
    fileobj = io.BytesIO(data)
    if path:
        fileobj.name = path

    try:
        audio = MutagenFile(fileobj)
    except TAG_ERRORS as e:
        raise TagParseError(f"Malformed tags in {path}: {e}", path=path) from e
    except MutagenError as e:
        raise DecoderError(f"Corrupt audio file {path}: {e}", path=path) from e

    if audio is None:
        raise DecoderError(f"Unrecognized audio format: {path}", path=path)

    try:
        metadata = filter_metadata(_tag_pairs(audio.tags))
    except TAG_ERRORS as e:
        raise TagParseError(f"Malformed tags in {path}: {e}", path=path) from e

    logger.debug(f"Extracted {len(metadata)} tag lines from {path}")
    return metadata
