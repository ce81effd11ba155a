"""Unit tests for the Ogg page codec and packet demultiplexer.

WHY: Opus packets only reach the DCA builder intact if pages are parsed
correctly: lacing values, packets spanning pages, several packets on one
page, and corrupt pages must all be handled exactly.

HOW: Streams are built with make_ogg_stream() or hand-assembled OggPage
objects, then read back with read_page() and OggPacketReader.
"""

import io

import pytest

from conftest import SERIAL, make_ogg_stream
from dca_converter.core.errors import MalformedSource
from dca_converter.ogg.packets import OggPacketReader
from dca_converter.ogg.page import (
    PAGE_HEADER_SIZE,
    OggPage,
    PageFlags,
    lacing_for,
    ogg_crc32,
    read_page,
)


def _bitwise_crc(data):
    crc = 0
    for b in data:
        crc ^= b << 24
        for _ in range(8):
            crc = (crc << 1) ^ 0x104C11DB7 if (crc & 0x80000000) else crc << 1
    return crc


def _packets(data):
    return [p.data for p in OggPacketReader(data)]


class TestPageCodec:
    """Page encoding, decoding, lacing and CRC."""

    def test_lacing_values(self):
        assert lacing_for(0) == [0]
        assert lacing_for(254) == [254]
        assert lacing_for(255) == [255, 0]
        assert lacing_for(600) == [255, 255, 90]

    def test_crc_known_value(self):
        assert ogg_crc32(b"123456789") == 0x89A1897F

    def test_crc_matches_bitwise_reference(self):
        for data in (b"", b"OggS", bytes(range(256)), b"\xff" * 1000):
            assert ogg_crc32(data) == _bitwise_crc(data)

    def test_page_round_trip(self):
        page = OggPage(
            serial_number=7,
            sequence_number=3,
            flags=PageFlags.FIRST_PAGE,
            granule_position=-1,
            segment_table=bytes([5]),
            payload=b"hello",
        )
        encoded = page.to_bytes()

        decoded = read_page(io.BytesIO(encoded))

        assert decoded == page
        assert decoded.size == len(encoded) == PAGE_HEADER_SIZE + 1 + 5

    def test_clean_eof_returns_none(self):
        assert read_page(io.BytesIO(b"")) is None

    def test_crc_mismatch(self):
        encoded = bytearray(make_ogg_stream([b"\x01\x02\x03"]))
        encoded[-1] ^= 0xFF
        with pytest.raises(MalformedSource, match="CRC"):
            read_page(io.BytesIO(bytes(encoded)))

    def test_bad_capture_pattern(self):
        encoded = b"OggX" + make_ogg_stream([b"\x01"])[4:]
        with pytest.raises(MalformedSource, match="capture pattern"):
            read_page(io.BytesIO(encoded))

    def test_unsupported_version(self):
        encoded = OggPage(segment_table=b"\x01", payload=b"\x01", version=1).to_bytes()
        with pytest.raises(MalformedSource, match="version"):
            read_page(io.BytesIO(encoded))

    @pytest.mark.parametrize("cut", [10, PAGE_HEADER_SIZE, PAGE_HEADER_SIZE + 2])
    def test_truncated_page(self, cut):
        encoded = make_ogg_stream([b"\x01\x02\x03\x04"])
        with pytest.raises(MalformedSource, match="Truncated"):
            read_page(io.BytesIO(encoded[:cut]))


class TestPacketReader:
    """Packet reassembly across and within pages."""

    def test_one_packet_per_page(self):
        packets = [b"a", b"bb", b"ccc"]
        assert _packets(make_ogg_stream(packets)) == packets

    def test_several_packets_per_page(self):
        packets = [b"a" * 10, b"b" * 255, b"", b"c" * 300]
        assert _packets(make_ogg_stream(packets, packets_per_page=4)) == packets

    def test_packet_spanning_pages(self):
        packet = bytes(i % 256 for i in range(600))
        first = OggPage(
            serial_number=SERIAL,
            sequence_number=0,
            flags=PageFlags.FIRST_PAGE,
            granule_position=-1,
            segment_table=bytes([255]),
            payload=packet[:255],
        )
        second = OggPage(
            serial_number=SERIAL,
            sequence_number=1,
            flags=PageFlags.CONTINUED | PageFlags.LAST_PAGE,
            granule_position=960,
            segment_table=bytes([255, 90]),
            payload=packet[255:],
        )
        data = first.to_bytes() + second.to_bytes()

        result = list(OggPacketReader(data))

        assert [p.data for p in result] == [packet]
        assert result[0].serial_number == SERIAL

    def test_empty_continuation_page_keeps_pending_packet(self):
        first = OggPage(segment_table=bytes([255]), payload=b"x" * 255)
        middle = OggPage(flags=PageFlags.CONTINUED, sequence_number=1)
        last = OggPage(flags=PageFlags.CONTINUED, sequence_number=2,
                       segment_table=bytes([1]), payload=b"y")
        data = first.to_bytes() + middle.to_bytes() + last.to_bytes()
        assert _packets(data) == [b"x" * 255 + b"y"]

    def test_empty_stream(self):
        assert _packets(b"") == []

    def test_reads_from_file_object(self, tmp_path):
        path = tmp_path / "a.ogg"
        path.write_bytes(make_ogg_stream([b"one", b"two"]))
        with open(path, "rb") as f:
            assert _packets(f) == [b"one", b"two"]

    def test_eof_inside_packet(self):
        page = OggPage(segment_table=bytes([255]), payload=b"z" * 255)
        with pytest.raises(MalformedSource, match="ended inside a packet"):
            _packets(page.to_bytes())

    def test_continuation_without_pending_packet(self):
        page = OggPage(flags=PageFlags.CONTINUED, segment_table=bytes([3]), payload=b"abc")
        with pytest.raises(MalformedSource, match="without a pending packet"):
            _packets(page.to_bytes())

    def test_new_packet_while_pending(self):
        first = OggPage(segment_table=bytes([255]), payload=b"x" * 255)
        second = OggPage(sequence_number=1, segment_table=bytes([1]), payload=b"y")
        with pytest.raises(MalformedSource, match="while one is pending"):
            _packets(first.to_bytes() + second.to_bytes())

    def test_error_reports_offset(self):
        good = make_ogg_stream([b"abc"])
        with pytest.raises(MalformedSource) as exc_info:
            _packets(good + b"garbage" * 10)
        assert exc_info.value.offset == len(good)
