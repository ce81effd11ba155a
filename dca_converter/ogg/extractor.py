"""Opus frame extraction from an Ogg stream.

WHY: Every Opus-in-Ogg stream starts with two packets that carry no
audio: the identification header (OpusHead) and the comment header
(OpusTags). Forwarding them as DCA frames would feed non-audio bytes to
an Opus decoder downstream. Everything after them is one audio frame per
packet.

HOW: OpusFrameExtractor wraps an OggPacketReader, discards the first
HEADER_PACKET_COUNT packets without looking at them, and then hands out
the payload of every following packet verbatim. It is a one-shot
iterator: once exhausted, or once an error has been raised, it stays
finished.

RULES:
- The skip is a fixed count, not a signature check
- A stream with two or fewer packets yields no frames
- Structure errors propagate as MalformedSource and end the sequence
- Packets are never retried, merged, split or modified
"""

from __future__ import annotations

from typing import BinaryIO, Iterator, List, Optional, Union

from dca_converter.ogg.packets import OggPacketReader

HEADER_PACKET_COUNT = 2
"""Number of leading packets (OpusHead, OpusTags) that are never audio."""


class OpusFrameExtractor:
    """Lazy, finite, non-restartable sequence of Opus audio packets.

    Args:
        source: A readable binary stream of Ogg pages, or the whole stream as bytes.
    """

    def __init__(self, source: Union[BinaryIO, bytes, bytearray]) -> None:
        self._reader = OggPacketReader(source)
        self._to_skip = HEADER_PACKET_COUNT
        self._finished = False

    def next_packet(self) -> Optional[bytes]:
        """Return the next audio packet, or None once the stream has ended.

        Raises:
            MalformedSource: If the Ogg structure is invalid. The extractor
                is finished afterwards.
        """
        if self._finished:
            return None
        try:
            while True:
                packet = self._reader.read_packet()
                if packet is None:
                    self._finished = True
                    return None
                if self._to_skip > 0:
                    self._to_skip -= 1
                    continue
                return packet.data
        except Exception:
            self._finished = True
            raise

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        packet = self.next_packet()
        if packet is None:
            raise StopIteration
        return packet


def extract_opus_frames(source: Union[BinaryIO, bytes, bytearray]) -> List[bytes]:
    """Return every audio packet of an Opus-in-Ogg stream as a list."""
    return list(OpusFrameExtractor(source))
