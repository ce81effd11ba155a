"""Ogg page codec (RFC 3533, section 6).

WHY: Packets are delivered inside pages, and a corrupt page must be
reported rather than silently turned into garbage audio. Parsing the
27-byte header and verifying the page CRC is the first line of that check.

HOW: OggPage holds the decoded header fields, lacing table and payload.
read_page() pulls exactly one page from a binary stream; to_bytes()
serializes a page and fills in its CRC.

    0-3    capture pattern "OggS"
    4      stream structure version (0)
    5      header type flags
    6-13   granule position (int64 LE)
    14-17  bitstream serial number
    18-21  page sequence number
    22-25  CRC-32 over the page with this field zeroed
    26     number of lacing values, followed by the lacing table

RULES:
- Capture pattern must be b"OggS" and version must be 0
- CRC-32 uses polynomial 0x04C11DB7, zero initial value, no reflection
- EOF before the first header byte is a clean end; anywhere else it is MalformedSource
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

from dca_converter.core.errors import MalformedSource

CAPTURE_PATTERN = b"OggS"
PAGE_HEADER_FORMAT = "<4sBBqIIIB"
PAGE_HEADER_SIZE = struct.calcsize(PAGE_HEADER_FORMAT)
MAX_LACING_VALUE = 255
_CRC_OFFSET = 22


def _make_crc_table() -> List[int]:
    table = []
    for i in range(256):
        crc = i << 24
        for _ in range(8):
            if crc & 0x80000000:
                crc = ((crc << 1) ^ 0x04C11DB7) & 0xFFFFFFFF
            else:
                crc = (crc << 1) & 0xFFFFFFFF
        table.append(crc)
    return table


_CRC_TABLE = _make_crc_table()


def ogg_crc32(data: bytes) -> int:
    """CRC-32 as defined for Ogg pages."""
    crc = 0
    for byte in data:
        crc = ((crc << 8) & 0xFFFFFFFF) ^ _CRC_TABLE[((crc >> 24) & 0xFF) ^ byte]
    return crc


class PageFlags(enum.IntFlag):
    CONTINUED = 0x01
    FIRST_PAGE = 0x02
    LAST_PAGE = 0x04


def lacing_for(size: int) -> List[int]:
    """Lacing values for one complete packet of ``size`` bytes."""
    return [MAX_LACING_VALUE] * (size // MAX_LACING_VALUE) + [size % MAX_LACING_VALUE]


@dataclass
class OggPage:
    """One Ogg page: header fields, lacing table and payload."""

    serial_number: int = 0
    sequence_number: int = 0
    flags: PageFlags = PageFlags(0)
    granule_position: int = 0
    segment_table: bytes = b""
    payload: bytes = field(default=b"", repr=False)
    version: int = 0

    @property
    def size(self) -> int:
        """Total encoded size of the page in bytes."""
        return PAGE_HEADER_SIZE + len(self.segment_table) + len(self.payload)

    @property
    def is_continued(self) -> bool:
        return bool(self.flags & PageFlags.CONTINUED)

    def to_bytes(self) -> bytes:
        """Serialize the page, computing its CRC."""
        header = struct.pack(
            PAGE_HEADER_FORMAT,
            CAPTURE_PATTERN,
            self.version,
            int(self.flags),
            self.granule_position,
            self.serial_number,
            self.sequence_number,
            0,
            len(self.segment_table),
        )
        data = header + bytes(self.segment_table) + self.payload
        checksum = ogg_crc32(data)
        return data[:_CRC_OFFSET] + struct.pack("<I", checksum) + data[_CRC_OFFSET + 4:]

    def __bytes__(self) -> bytes:
        return self.to_bytes()


def read_page(stream: BinaryIO, offset: int = 0) -> Optional[OggPage]:
    """Read one page from ``stream``; return None at a clean end of stream.

    Args:
        stream: Binary stream positioned at a page boundary.
        offset: Byte offset of that boundary, used in error messages only.

    Raises:
        MalformedSource: On a bad capture pattern, unknown version,
            truncated page, or CRC mismatch.
    """
    header = stream.read(PAGE_HEADER_SIZE)
    if not header:
        return None
    if len(header) < PAGE_HEADER_SIZE:
        raise MalformedSource("Truncated Ogg page header", offset)

    (
        capture_pattern,
        version,
        flags,
        granule_position,
        serial_number,
        sequence_number,
        checksum,
        segment_count,
    ) = struct.unpack(PAGE_HEADER_FORMAT, header)
    if capture_pattern != CAPTURE_PATTERN:
        raise MalformedSource("Missing Ogg capture pattern", offset)
    if version != 0:
        raise MalformedSource("Unsupported Ogg stream structure version {}".format(version), offset)

    segment_table = stream.read(segment_count)
    if len(segment_table) < segment_count:
        raise MalformedSource("Truncated Ogg segment table", offset)
    payload_size = sum(segment_table)
    payload = stream.read(payload_size)
    if len(payload) < payload_size:
        raise MalformedSource("Truncated Ogg page payload", offset)

    unchecked = header[:_CRC_OFFSET] + b"\x00\x00\x00\x00" + header[_CRC_OFFSET + 4:]
    if ogg_crc32(unchecked + segment_table + payload) != checksum:
        raise MalformedSource("Ogg page CRC mismatch", offset)

    return OggPage(
        serial_number=serial_number,
        sequence_number=sequence_number,
        flags=PageFlags(flags),
        granule_position=granule_position,
        segment_table=segment_table,
        payload=payload,
        version=version,
    )
