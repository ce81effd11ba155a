"""DCA1 container reader.

WHY: Consumers locate the end of the JSON header by its declared length
and then forward frames without decoding them. The reader does exactly
that, which also lets the converter check its own output and lets tests
assert round-trip fidelity.

HOW: read_header() consumes the 8-byte preamble and the declared number
of header bytes from a binary stream. iter_frames() then lazily yields
each frame payload. read_container() is the in-memory convenience that
parses a whole buffer into a DcaContainer.

RULES:
- Magic must be b"DCA1"; header length must be non-negative
- Header JSON may use null or omit optional fields; unknown keys are ignored
- A frame length below zero, or a frame cut short by EOF, is MalformedContainer
- EOF exactly at a frame boundary ends the frame sequence cleanly
"""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Iterator, List

from dca_converter.core.builder import DCA_MAGIC, FRAME_LENGTH_SIZE, PREAMBLE_SIZE
from dca_converter.core.errors import MalformedContainer
from dca_converter.core.header import ContainerHeader


@dataclass
class DcaContainer:
    """A parsed DCA1 container: its header and its frame payloads in order."""

    header: ContainerHeader
    frames: List[bytes] = field(default_factory=list)


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise MalformedContainer(
            "Truncated {}: expected {} bytes, got {}".format(what, size, len(data))
        )
    return data


def read_header(stream: BinaryIO) -> ContainerHeader:
    """Read the preamble and JSON header, leaving the stream at the first frame.

    Raises:
        MalformedContainer: On a wrong magic tag, a negative or truncated
            header, or header JSON that is not a DCA version 1 header.
    """
    preamble = _read_exact(stream, PREAMBLE_SIZE, "DCA preamble")
    magic = preamble[:len(DCA_MAGIC)]
    if magic != DCA_MAGIC:
        raise MalformedContainer("Not a DCA1 container (magic {!r})".format(magic))
    (header_length,) = struct.unpack_from("<i", preamble, len(DCA_MAGIC))
    if header_length < 0:
        raise MalformedContainer("Negative DCA header length {}".format(header_length))
    raw = _read_exact(stream, header_length, "DCA header")
    return ContainerHeader.from_json_bytes(raw)


def iter_frames(stream: BinaryIO) -> Iterator[bytes]:
    """Yield frame payloads from a stream positioned just after the header."""
    while True:
        prefix = stream.read(FRAME_LENGTH_SIZE)
        if not prefix:
            return
        if len(prefix) != FRAME_LENGTH_SIZE:
            raise MalformedContainer("Truncated DCA frame length prefix")
        (size,) = struct.unpack("<h", prefix)
        if size < 0:
            raise MalformedContainer("Negative DCA frame length {}".format(size))
        yield _read_exact(stream, size, "DCA frame")


def read_container(data: bytes) -> DcaContainer:
    """Parse a complete DCA1 buffer into its header and frames."""
    stream = io.BytesIO(data)
    header = read_header(stream)
    return DcaContainer(header=header, frames=list(iter_frames(stream)))
