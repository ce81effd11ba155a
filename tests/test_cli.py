"""Tests for the command-line interface.

WHY: The CLI is what bots shell out to. It must fail with a non-zero
exit status and a readable message for every core error, and keep stdout
clean.

HOW: build_parser() is inspected directly; main() runs against tmp_path
files with --raw-ogg so no ffmpeg binary is needed.
"""

import json

import pytest

from conftest import AUDIO_A, AUDIO_B, AUDIO_C
from dca_converter.cli import build_parser, main
from dca_converter.core.reader import read_container


@pytest.fixture
def files(tmp_path, opus_stream):
    source = tmp_path / "song.ogg"
    source.write_bytes(opus_stream)
    meta = tmp_path / "song.json"
    meta.write_text(json.dumps({"title": "Song", "artist": "Artist", "source_url": "http://x"}),
                    encoding="utf-8")
    return source, meta, tmp_path / "song.dca"


class TestParser:
    def test_required_arguments(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["-i", "in.webm"])
        assert exc_info.value.code == 2

    def test_defaults(self):
        args = build_parser().parse_args(["-i", "a", "-o", "b", "-j", "c"])
        assert args.start is None
        assert args.time is None
        assert args.raw_ogg is False

    def test_seconds_parsed(self):
        args = build_parser().parse_args(["-i", "a", "-o", "b", "-j", "c", "-s", "15", "-t", "30"])
        assert (args.start, args.time) == (15, 30)

    @pytest.mark.parametrize("value", ["-3", "abc", "1.5"])
    def test_invalid_seconds(self, value):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-i", "a", "-o", "b", "-j", "c", "--start={}".format(value)])


class TestMain:
    def test_successful_conversion(self, files, capsys):
        source, meta, output = files

        with pytest.raises(SystemExit) as exc_info:
            main(["-i", str(source), "-o", str(output), "-j", str(meta), "--raw-ogg"])

        assert exc_info.value.code == 0
        assert read_container(output.read_bytes()).frames == [AUDIO_A, AUDIO_B, AUDIO_C]
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Done!" in captured.err

    def test_missing_title(self, files, capsys):
        source, meta, output = files
        meta.write_text(json.dumps({"artist": "Artist"}), encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main(["-i", str(source), "-o", str(output), "-j", str(meta), "--raw-ogg"])

        assert exc_info.value.code == 1
        assert "title" in capsys.readouterr().err
        assert not output.exists()

    def test_missing_input(self, files, capsys):
        _, meta, output = files

        with pytest.raises(SystemExit) as exc_info:
            main(["-i", "does-not-exist.webm", "-o", str(output), "-j", str(meta)])

        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().err

    def test_corrupt_ogg(self, files, capsys):
        source, meta, output = files
        source.write_bytes(b"definitely not an ogg stream, long enough to parse")

        with pytest.raises(SystemExit) as exc_info:
            main(["-i", str(source), "-o", str(output), "-j", str(meta), "--raw-ogg"])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_malformed_duration_in_metadata(self, files, capsys):
        source, meta, output = files
        meta.write_text(json.dumps({"title": "a", "artist": "b", "duration": {"secs": None}}),
                        encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main(["-i", str(source), "-o", str(output), "-j", str(meta), "--raw-ogg"])

        assert exc_info.value.code == 0
        assert output.exists()
