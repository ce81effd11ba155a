"""Ogg packet demultiplexer.

WHY: A logical Ogg packet may be split across several pages, and one page
may carry several packets. Consumers of Opus data want whole packets in
stream order, independent of how the muxer happened to paginate them.

HOW: OggPacketReader reads pages one at a time and walks each lacing
table: lacing values of 255 continue the current packet, any smaller
value ends it. Completed packets are queued and handed out one per
read_packet() call. Unfinished packets are kept per serial number until a
continuation page completes them.

RULES:
- Packets are returned in the order their final segment appears
- A page flagged as continued requires a pending packet for its serial
- A page not flagged as continued must not interrupt a pending packet
- EOF with a pending packet is MalformedSource; EOF otherwise is a clean end
- Zero-length packets (a single 0 lacing value) are valid and returned
"""

from __future__ import annotations

import io
from collections import deque
from dataclasses import dataclass
from typing import BinaryIO, Deque, Dict, Iterator, Optional, Union

from dca_converter.core.errors import MalformedSource
from dca_converter.ogg.page import MAX_LACING_VALUE, OggPage, read_page


@dataclass
class OggPacket:
    """One reassembled logical packet."""

    data: bytes
    serial_number: int


class OggPacketReader:
    """Pulls logical packets out of an Ogg byte stream.

    Args:
        source: A readable binary stream, or the complete stream as bytes.
    """

    def __init__(self, source: Union[BinaryIO, bytes, bytearray]) -> None:
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))
        self._stream = source
        self._offset = 0
        self._ready: Deque[OggPacket] = deque()
        self._pending: Dict[int, bytearray] = {}
        self._eof = False

    def read_packet(self) -> Optional[OggPacket]:
        """Return the next packet, or None at the clean end of the stream.

        Raises:
            MalformedSource: If the page structure is invalid.
        """
        while not self._ready:
            if self._eof:
                return None
            page_offset = self._offset
            page = read_page(self._stream, page_offset)
            if page is None:
                self._eof = True
                if self._pending:
                    raise MalformedSource("Ogg stream ended inside a packet", page_offset)
                return None
            self._offset += page.size
            self._demux_page(page, page_offset)
        return self._ready.popleft()

    def __iter__(self) -> Iterator[OggPacket]:
        while True:
            packet = self.read_packet()
            if packet is None:
                return
            yield packet

    def _demux_page(self, page: OggPage, page_offset: int) -> None:
        serial = page.serial_number
        if page.is_continued:
            if serial not in self._pending:
                raise MalformedSource(
                    "Continued Ogg page without a pending packet", page_offset
                )
            current = self._pending.pop(serial)
        else:
            if serial in self._pending:
                raise MalformedSource(
                    "Ogg page starts a new packet while one is pending", page_offset
                )
            current = bytearray()

        position = 0
        for lacing in page.segment_table:
            current += page.payload[position:position + lacing]
            position += lacing
            if lacing < MAX_LACING_VALUE:
                self._ready.append(
                    OggPacket(
                        data=bytes(current),
                        serial_number=serial,
                    )
                )
                current = bytearray()

        table = page.segment_table
        if (table and table[-1] == MAX_LACING_VALUE) or (not table and page.is_continued):
            self._pending[serial] = current
