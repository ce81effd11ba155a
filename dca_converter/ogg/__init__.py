"""Ogg bitstream handling: page codec, packet demultiplexer, Opus frame extractor.

WHY: ffmpeg emits Opus wrapped in Ogg pages. DCA1 wants the bare Opus
packets, one per frame, without the two Opus header packets.

HOW: page.py reads and writes single pages (RFC 3533), packets.py
reassembles logical packets across pages, extractor.py applies the
header-packet skip and exposes the audio packets as a lazy sequence.
"""

from dca_converter.ogg.extractor import OpusFrameExtractor, extract_opus_frames
from dca_converter.ogg.packets import OggPacket, OggPacketReader
from dca_converter.ogg.page import OggPage, PageFlags

__all__ = [
    "OggPacket",
    "OggPacketReader",
    "OggPage",
    "OpusFrameExtractor",
    "PageFlags",
    "extract_opus_frames",
]
