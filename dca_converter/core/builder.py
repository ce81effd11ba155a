"""DCA1 container builder.

WHY: Voice-streaming consumers read DCA1 because it can be forwarded
frame by frame without an Opus decoder or a streaming JSON parser. The
builder is the one place that knows the byte layout:

    offset 0    : b"DCA1"                   magic
    offset 4    : int32 little-endian       header length H
    offset 8    : H bytes UTF-8 JSON        ContainerHeader
    offset 8+H  : repeated int16 LE length L, then L payload bytes

HOW: DcaBuilder owns a growable bytearray. write_header() builds a
ContainerHeader from the profile plus the caller's metadata, validates it
against dca_header_schema.json with jsonschema, and appends the preamble
and JSON. write_audio_frame() appends one length-prefixed frame.
finalize() hands out an immutable copy of the buffer.

RULES:
- Header is written exactly once and before any frame (ContainerStateError)
- Title and artist are required (MissingRequiredField); source_url is not
- Frames larger than MAX_FRAME_SIZE are rejected before anything is appended
- The buffer is append-only; earlier offsets never move
- finalize() is idempotent and valid with zero frames
"""

from __future__ import annotations

import json
import struct
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

import jsonschema

from dca_converter.config import DEFAULT_PROFILE, MAX_FRAME_SIZE, ContainerProfile
from dca_converter.core.errors import (
    ContainerStateError,
    FrameTooLarge,
    MissingRequiredField,
    SerializationFailure,
)
from dca_converter.core.header import (
    ContainerHeader,
    DcaInfo,
    OriginInfo,
    TrackInfo,
)

if TYPE_CHECKING:
    from dca_converter.metadata import Metadata

DCA_MAGIC = b"DCA1"
HEADER_LENGTH_SIZE = 4
PREAMBLE_SIZE = len(DCA_MAGIC) + HEADER_LENGTH_SIZE
FRAME_LENGTH_SIZE = 2

_SCHEMA_PATH = Path(__file__).resolve().parent / "dca_header_schema.json"

_CACHED_SCHEMA: Dict[str, Any] | None = None


def get_header_schema() -> Dict[str, Any]:
    """Load the DCA header JSON schema, cached after the first call."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def encode_header(header: ContainerHeader) -> bytes:
    """Validate a header against the schema and encode it as compact UTF-8 JSON.

    Raises:
        SerializationFailure: If the header is not JSON-encodable or does
            not satisfy dca_header_schema.json.
    """
    try:
        document = header.to_dict()
        jsonschema.validate(instance=document, schema=get_header_schema())
        return header.to_json_bytes()
    except jsonschema.ValidationError as e:
        raise SerializationFailure("DCA header failed validation: {}".format(e.message)) from e
    except (TypeError, ValueError) as e:
        raise SerializationFailure("DCA header could not be encoded: {}".format(e)) from e


class DcaBuilder:
    """Accumulates a single DCA1 container in memory.

    WHY: The container is produced in one pass: header first, then every
    audio frame in stream order. Owning the buffer exclusively keeps the
    layout invariants checkable at every append.

    HOW: Construct with the caller's metadata and an optional profile,
    call write_header() once, write_audio_frame() per packet, then
    finalize() to obtain the bytes.

    Args:
        metadata: Record supplying title, artist and source_url.
        profile: Tool identity and codec constants. Defaults to
                 DEFAULT_PROFILE from config.
    """

    def __init__(
        self,
        metadata: Metadata,
        profile: ContainerProfile = DEFAULT_PROFILE,
    ) -> None:
        self.metadata = metadata
        self.profile = profile
        self._buffer = bytearray()
        self._header_size = 0
        self._header_written = False
        self._audio_written = False
        self._frame_count = 0

    @property
    def header_written(self) -> bool:
        return self._header_written

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def build_header(self) -> ContainerHeader:
        """Build the ContainerHeader for this builder's metadata and profile.

        RULES:
        - info carries title and artist; album, genre and cover stay None
        - origin.url is metadata.source_url, which may be None

        Raises:
            MissingRequiredField: If metadata.title or metadata.artist is None.
        """
        title = self.metadata.title
        if title is None:
            raise MissingRequiredField("title")
        artist = self.metadata.artist
        if artist is None:
            raise MissingRequiredField("artist")

        profile = self.profile
        return ContainerHeader(
            dca=DcaInfo(tool=profile.tool),
            opus=profile.opus,
            info=TrackInfo(title=title, artist=artist),
            origin=OriginInfo(
                source=profile.origin_source,
                abr=profile.opus.abr,
                channels=profile.opus.channels,
                encoding=profile.origin_encoding,
                url=self.metadata.source_url,
            ),
            extra={},
        )

    def write_header(self, header: Optional[ContainerHeader] = None) -> None:
        """Append the magic tag, header length and JSON header to the buffer.

        Args:
            header: An explicit header to write. When None, the header is
                    built from metadata and profile via build_header().

        Raises:
            ContainerStateError: If the header was already written.
            MissingRequiredField: If title or artist is missing.
            SerializationFailure: If the header cannot be encoded.
        """
        if self._header_written:
            raise ContainerStateError("DCA header has already been written")
        if header is None:
            header = self.build_header()
        encoded = encode_header(header)

        self._buffer += DCA_MAGIC
        self._buffer += struct.pack("<i", len(encoded))
        self._buffer += encoded
        self._header_size = len(encoded)
        self._header_written = True

    def write_audio_frame(self, frame: bytes) -> None:
        """Append one audio frame, prefixed with its signed 16-bit length.

        Raises:
            ContainerStateError: If the header has not been written yet.
            FrameTooLarge: If the frame is longer than MAX_FRAME_SIZE bytes.
        """
        if not self._header_written:
            raise ContainerStateError("DCA header must be written before audio frames")
        size = len(frame)
        if size > MAX_FRAME_SIZE:
            raise FrameTooLarge(size, MAX_FRAME_SIZE)

        self._buffer += struct.pack("<h", size)
        self._buffer += frame
        self._audio_written = True
        self._frame_count += 1

    def write_audio_frames(self, frames: Iterable[bytes]) -> int:
        """Append every frame from an iterable; return how many were written."""
        written = 0
        for frame in frames:
            self.write_audio_frame(frame)
            written += 1
        return written

    def header_slice(self) -> Optional[bytes]:
        """The JSON header bytes, or None before write_header()."""
        if not self._header_written:
            return None
        return bytes(self._buffer[PREAMBLE_SIZE:PREAMBLE_SIZE + self._header_size])

    def audio_slice(self) -> Optional[bytes]:
        """All length-prefixed frame bytes, or None before the first frame."""
        if not self._audio_written:
            return None
        return bytes(self._buffer[PREAMBLE_SIZE + self._header_size:])

    def finalize(self) -> bytes:
        """Return the complete container. May be called any number of times."""
        return bytes(self._buffer)
