"""Shared test fixtures for the dca_converter test suite.

WHY: Builder, extractor, pipeline and CLI tests all need the same small
Opus-in-Ogg streams and metadata records. Centralizing the stream builder
here keeps every test's input byte-exact and readable.

HOW: make_ogg_stream() paginates a list of packets into valid Ogg pages
(correct lacing, flags and CRC) using the package's own page encoder.
Fixtures expose the canonical [OpusHead, OpusTags, A, B, C] stream and
the sample metadata used in the concrete DCA scenario.

RULES:
- OPUS_HEAD / OPUS_TAGS are real RFC 7845 header packets
- Audio packets are arbitrary bytes; nothing decodes them
- All file I/O in tests uses tmp_path
"""

import struct
from typing import List, Sequence

import pytest

from dca_converter.metadata import Metadata
from dca_converter.ogg.page import OggPage, PageFlags, lacing_for

SERIAL = 0x5EED

OPUS_HEAD = b"OpusHead" + struct.pack("<BBHIhB", 1, 2, 312, 48000, 0, 0)
OPUS_TAGS = (
    b"OpusTags"
    + struct.pack("<I", 6) + b"Lavf60"
    + struct.pack("<I", 0)
)

AUDIO_A = b"\xfc\x01\x02\x03"
AUDIO_B = b"\xfc" + bytes(range(200))
AUDIO_C = b"\xfc" * 300


def make_ogg_stream(
    packets: Sequence[bytes],
    serial: int = SERIAL,
    packets_per_page: int = 1,
) -> bytes:
    """Encode complete packets as an Ogg stream, packets_per_page to a page."""
    pages: List[bytes] = []
    groups = [
        list(packets[i:i + packets_per_page])
        for i in range(0, len(packets), packets_per_page)
    ]
    for index, group in enumerate(groups):
        flags = PageFlags(0)
        if index == 0:
            flags |= PageFlags.FIRST_PAGE
        if index == len(groups) - 1:
            flags |= PageFlags.LAST_PAGE
        table: List[int] = []
        for packet in group:
            table.extend(lacing_for(len(packet)))
        page = OggPage(
            serial_number=serial,
            sequence_number=index,
            flags=flags,
            granule_position=index * 960,
            segment_table=bytes(table),
            payload=b"".join(group),
        )
        pages.append(page.to_bytes())
    return b"".join(pages)


@pytest.fixture
def sample_metadata():
    """Metadata from the concrete DCA scenario: title, artist and source URL."""
    return Metadata(title="Song", artist="Artist", source_url="http://x")


@pytest.fixture
def opus_stream():
    """A five-packet Opus-in-Ogg stream: [OpusHead, OpusTags, A, B, C]."""
    return make_ogg_stream([OPUS_HEAD, OPUS_TAGS, AUDIO_A, AUDIO_B, AUDIO_C])
