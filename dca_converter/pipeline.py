"""Conversion pipeline: Ogg bytes -> Opus frames -> DCA1 container.

WHY: The CLI and library callers both want "give me the .dca for this
input" without wiring the extractor and builder themselves.

HOW: build_dca() runs the two core components over an in-memory or
streamed Ogg source. convert_file() adds the ffmpeg step in front and
writes the finalized buffer to disk.

RULES:
- The header is written before the first packet is read
- Every extracted packet becomes exactly one frame, in order
- Any DcaError aborts the conversion; no partial output file is written
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Union

from dca_converter.config import DEFAULT_PROFILE, ContainerProfile
from dca_converter.core.builder import DcaBuilder
from dca_converter.metadata import Metadata
from dca_converter.ogg.extractor import OpusFrameExtractor
from dca_converter.transcode import transcode

logger = logging.getLogger(__name__)


def build_dca(
    ogg_source: Union[BinaryIO, bytes, bytearray],
    metadata: Metadata,
    profile: ContainerProfile = DEFAULT_PROFILE,
) -> bytes:
    """Wrap the audio packets of an Opus-in-Ogg stream in a DCA1 container.

    Raises:
        MissingRequiredField: If metadata lacks title or artist.
        FrameTooLarge: If a packet does not fit a DCA frame.
        MalformedSource: If the Ogg stream is corrupt.
    """
    builder = DcaBuilder(metadata, profile)
    builder.write_header()
    builder.write_audio_frames(OpusFrameExtractor(ogg_source))
    logger.info("Wrote %d audio frames", builder.frame_count)
    return builder.finalize()


def convert_file(
    input_path: str | Path,
    output_path: str | Path,
    metadata: Metadata,
    start: Optional[int] = None,
    duration: Optional[int] = None,
    profile: ContainerProfile = DEFAULT_PROFILE,
    transcode_input: bool = True,
) -> int:
    """Convert one audio file to a .dca file; return the number of bytes written.

    Args:
        input_path: Source audio. Read as raw Opus-in-Ogg when
                    transcode_input is False.
        output_path: Destination .dca path (overwritten).
        metadata: Title/artist/source URL for the header.
        start: Optional start offset in seconds passed to ffmpeg.
        duration: Optional duration in seconds passed to ffmpeg.
        profile: Tool identity and codec parameters.
        transcode_input: Run ffmpeg first (default) or not.
    """
    if transcode_input:
        ogg_bytes = transcode(input_path, start, duration, profile)
    else:
        ogg_bytes = Path(input_path).read_bytes()

    container = build_dca(ogg_bytes, metadata, profile)
    Path(output_path).write_bytes(container)
    logger.info("Saved %d bytes to %s", len(container), output_path)
    return len(container)
