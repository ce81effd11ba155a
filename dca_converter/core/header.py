"""ContainerHeader dataclasses and their JSON representation.

WHY: The DCA1 header is a nested JSON document with fixed field names.
Readers and writers both need the same typed structure so that a header
survives a write/read cycle unchanged and field mismatches are caught in
one place instead of scattered across dict literals.

HOW: Six dataclasses mirror the JSON nesting:
  ToolInfo        — dca.tool (name, version, url, author)
  DcaInfo         — dca (format version + tool identity)
  OpusInfo        — opus (codec parameters)
  TrackInfo       — info (title, artist, album, genre, cover)
  OriginInfo      — origin (where the audio came from)
  ContainerHeader — the whole document, plus the reserved ``extra`` object

to_dict() produces the exact key order written to disk; from_dict()
accepts both ``null`` and omitted optional fields and ignores unknown keys.

RULES:
- Key order on disk: dca, opus, info, origin, extra
- dca.version is always 1 (DCA_VERSION)
- Absent optional values serialize as null
- extra is always an object, empty unless a future field is defined
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dca_converter.core.errors import MalformedContainer

DCA_VERSION = 1
"""The only container version this package reads or writes."""


@dataclass(frozen=True)
class ToolInfo:
    """Identity of the program that wrote the container."""

    name: str
    version: str
    url: str
    author: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "url": self.url,
            "author": self.author,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ToolInfo:
        return cls(
            name=data["name"],
            version=data["version"],
            url=data["url"],
            author=data["author"],
        )


@dataclass(frozen=True)
class DcaInfo:
    """The ``dca`` block: format version and writer identity."""

    tool: ToolInfo
    version: int = DCA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "tool": self.tool.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DcaInfo:
        return cls(version=data["version"], tool=ToolInfo.from_dict(data["tool"]))


@dataclass(frozen=True)
class OpusInfo:
    """Opus codec parameters the audio frames were encoded with.

    RULES:
    - abr is the nominal bitrate in bits per second
    - frame_size is in samples per channel (960 = 20 ms at 48 kHz)
    """

    mode: str
    sample_rate: int
    frame_size: int
    abr: int
    vbr: bool
    channels: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "sample_rate": self.sample_rate,
            "frame_size": self.frame_size,
            "abr": self.abr,
            "vbr": self.vbr,
            "channels": self.channels,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OpusInfo:
        return cls(
            mode=data["mode"],
            sample_rate=data["sample_rate"],
            frame_size=data["frame_size"],
            abr=data["abr"],
            vbr=data["vbr"],
            channels=data["channels"],
        )


@dataclass(frozen=True)
class TrackInfo:
    """Descriptive track metadata. Only title and artist are ever filled by the builder."""

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    cover: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "genre": self.genre,
            "cover": self.cover,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TrackInfo:
        return cls(
            title=data.get("title"),
            artist=data.get("artist"),
            album=data.get("album"),
            genre=data.get("genre"),
            cover=data.get("cover"),
        )


@dataclass(frozen=True)
class OriginInfo:
    """Where the audio came from before it was re-encoded."""

    source: Optional[str] = None
    abr: Optional[int] = None
    channels: Optional[int] = None
    encoding: Optional[str] = None
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "abr": self.abr,
            "channels": self.channels,
            "encoding": self.encoding,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OriginInfo:
        return cls(
            source=data.get("source"),
            abr=data.get("abr"),
            channels=data.get("channels"),
            encoding=data.get("encoding"),
            url=data.get("url"),
        )


@dataclass
class ContainerHeader:
    """The complete JSON header of a DCA1 container.

    WHY: This is the stable contract between the writer and any reader.
    Keeping it as one dataclass value makes headers comparable, which is what
    the round-trip guarantee rests on.

    RULES:
    - info and origin may be None (serialized as null)
    - extra defaults to an empty dict and is never None
    """

    dca: DcaInfo
    opus: OpusInfo
    info: Optional[TrackInfo] = None
    origin: Optional[OriginInfo] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dca": self.dca.to_dict(),
            "opus": self.opus.to_dict(),
            "info": self.info.to_dict() if self.info is not None else None,
            "origin": self.origin.to_dict() if self.origin is not None else None,
            "extra": dict(self.extra),
        }

    def to_json_bytes(self) -> bytes:
        """Encode the header as compact UTF-8 JSON, exactly as written to disk."""
        text = json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        return text.encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ContainerHeader:
        """Build a header from a decoded JSON object.

        RULES:
        - dca and opus are required; a missing key raises MalformedContainer
        - dca.version must equal DCA_VERSION
        - info/origin may be null or omitted; extra may be null or omitted
        """
        if not isinstance(data, dict):
            raise MalformedContainer("DCA header is not a JSON object")
        try:
            dca = DcaInfo.from_dict(data["dca"])
            opus = OpusInfo.from_dict(data["opus"])
        except (KeyError, TypeError) as e:
            raise MalformedContainer("DCA header is missing field {}".format(e)) from e
        if isinstance(dca.version, bool) or dca.version != DCA_VERSION:
            raise MalformedContainer(
                "Unsupported DCA version {} (only {} is supported)".format(dca.version, DCA_VERSION)
            )

        info_data = data.get("info")
        origin_data = data.get("origin")
        extra = data.get("extra")
        if extra is None:
            extra = {}
        elif not isinstance(extra, dict):
            raise MalformedContainer("DCA header field 'extra' is not an object")
        return cls(
            dca=dca,
            opus=opus,
            info=TrackInfo.from_dict(info_data) if isinstance(info_data, dict) else None,
            origin=OriginInfo.from_dict(origin_data) if isinstance(origin_data, dict) else None,
            extra=dict(extra),
        )

    @classmethod
    def from_json_bytes(cls, raw: bytes) -> ContainerHeader:
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedContainer("DCA header is not valid UTF-8 JSON: {}".format(e)) from e
        return cls.from_dict(data)
