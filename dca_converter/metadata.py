"""Track metadata record and its JSON sources.

WHY: The DCA header needs a title, an artist, and the URL the audio came
from. Those arrive as a JSON file written either by yt-dlp (its
``--dump-json``/``--write-info-json`` output) or by an earlier run of a
songbird-style player that stores its own metadata record.

HOW: Metadata is a plain dataclass with every field optional. Two factory
methods map the two JSON shapes onto it; load_metadata() reads a file and
picks the right one by looking for yt-dlp-only keys.

RULES:
- from_ytdl_output: artist falls back to uploader, date to upload_date,
  source_url comes from webpage_url; channels=2 and sample_rate=48000
- from_dict: reads this record's own field names; durations may be a
  number of seconds or a {"secs": .., "nanos": ..} object
- Nothing here decides whether a field is required; the builder does
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dca_converter.config import OPUS_CHANNELS, OPUS_SAMPLE_RATE

YTDL_MARKER_KEYS = ("webpage_url", "uploader", "extractor", "release_date", "upload_date")
"""Keys that only appear in yt-dlp output, never in a stored Metadata record."""


def _str_or_none(obj: Dict[str, Any], key: str) -> Optional[str]:
    value = obj.get(key)
    return value if isinstance(value, str) else None


def _seconds_or_none(value: Any) -> Optional[float]:
    """Accept a number of seconds or a serialized {"secs", "nanos"} duration."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, dict) and "secs" in value:
        secs = value["secs"]
        nanos = value.get("nanos", 0)
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (secs, nanos)):
            return None
        return float(secs) + float(nanos) / 1e9
    return None


@dataclass
class Metadata:
    """Descriptive metadata for one audio stream.

    RULES:
    - title / artist: required later by the DCA builder, optional here
    - start_time_s / duration_s: float seconds
    - source_url: page the audio was fetched from (becomes origin.url)
    """

    track: Optional[str] = None
    artist: Optional[str] = None
    date: Optional[str] = None
    channels: Optional[int] = None
    channel: Optional[str] = None
    start_time_s: Optional[float] = None
    duration_s: Optional[float] = None
    sample_rate: Optional[int] = None
    source_url: Optional[str] = None
    title: Optional[str] = None
    thumbnail: Optional[str] = None

    @classmethod
    def from_ytdl_output(cls, value: Any) -> Metadata:
        """Map yt-dlp's JSON info dict onto a Metadata record.

        WHY: yt-dlp names things differently (webpage_url, uploader,
        release_date) and not every extractor fills every key.

        HOW: Direct lookups with string type checks; fallbacks for artist
        and date. A non-dict value produces an empty record with only the
        fixed channel count and sample rate.
        """
        obj: Dict[str, Any] = value if isinstance(value, dict) else {}

        artist = _str_or_none(obj, "artist")
        if artist is None:
            artist = _str_or_none(obj, "uploader")
        date = _str_or_none(obj, "release_date")
        if date is None:
            date = _str_or_none(obj, "upload_date")

        return cls(
            track=_str_or_none(obj, "track"),
            artist=artist,
            date=date,
            channels=OPUS_CHANNELS,
            channel=_str_or_none(obj, "channel"),
            duration_s=_seconds_or_none(obj.get("duration")),
            sample_rate=OPUS_SAMPLE_RATE,
            source_url=_str_or_none(obj, "webpage_url"),
            title=_str_or_none(obj, "title"),
            thumbnail=_str_or_none(obj, "thumbnail"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Metadata:
        """Parse a stored Metadata record (this dataclass's own field names)."""
        channels = data.get("channels")
        sample_rate = data.get("sample_rate")
        return cls(
            track=_str_or_none(data, "track"),
            artist=_str_or_none(data, "artist"),
            date=_str_or_none(data, "date"),
            channels=channels if isinstance(channels, int) else None,
            channel=_str_or_none(data, "channel"),
            start_time_s=_seconds_or_none(data.get("start_time", data.get("start_time_s"))),
            duration_s=_seconds_or_none(data.get("duration", data.get("duration_s"))),
            sample_rate=sample_rate if isinstance(sample_rate, int) else None,
            source_url=_str_or_none(data, "source_url"),
            title=_str_or_none(data, "title"),
            thumbnail=_str_or_none(data, "thumbnail"),
        )


def is_ytdl_output(data: Dict[str, Any]) -> bool:
    return any(key in data for key in YTDL_MARKER_KEYS)


def load_metadata(path: str | Path) -> Metadata:
    """Read a metadata JSON file written by yt-dlp or a songbird-style player.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a JSON object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("Metadata file {} does not contain a JSON object".format(path))
    if is_ytdl_output(data):
        return Metadata.from_ytdl_output(data)
    return Metadata.from_dict(data)
