"""Configuration constants, the container profile, and .env loading.

WHY: The DCA header advertises which tool wrote the file and which Opus
parameters the frames were encoded with. Those values must match the
arguments handed to ffmpeg, and deployments may want to stamp their own
tool identity. Keeping them in one immutable profile makes alternate
identities or codec settings a construction-time choice, not a code edit.

HOW: python-dotenv loads the .env file on import. ContainerProfile bundles
the tool identity, Opus parameters, and origin defaults; DEFAULT_PROFILE
is assembled from environment overrides with fixed fallbacks.
ffmpeg_args() derives the transcoder arguments from the same profile.

RULES:
- Opus defaults: voip mode, 48000 Hz, 960-sample frames, 64000 bps, VBR, stereo
- Tool identity may be overridden via DCA_TOOL_* environment variables
- The ffmpeg binary may be overridden via DCA_FFMPEG_PATH
- Profiles are frozen; build a new one with dataclasses.replace()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

from dca_converter import __version__
from dca_converter.core.header import OpusInfo, ToolInfo

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Container limits
# ---------------------------------------------------------------------------

MAX_FRAME_SIZE = 32767
"""Largest frame payload that fits the signed 16-bit little-endian length prefix."""

# ---------------------------------------------------------------------------
# Tool identity and codec defaults
# ---------------------------------------------------------------------------

DEFAULT_TOOL_NAME = "dca_converter"
DEFAULT_TOOL_URL = "https://github.com/Forte-NaoP/dca-rs"
DEFAULT_TOOL_AUTHOR = "Forte-NaoP"

OPUS_SAMPLE_RATE = 48000
OPUS_FRAME_SIZE = 960
OPUS_BITRATE = 64000
OPUS_CHANNELS = 2

FFMPEG_PATH = os.getenv("DCA_FFMPEG_PATH", "ffmpeg")


@dataclass(frozen=True)
class ContainerProfile:
    """Everything the builder writes into a header that does not come from metadata.

    WHY: Tool identity and codec parameters are global constants of a
    writer build. Passing them as one value keeps the builder free of
    literals and lets tests or alternate deployments swap them out.

    RULES:
    - tool: written to dca.tool
    - opus: written to opus, and also drives the ffmpeg arguments
    - origin_source / origin_encoding: written to origin.source / origin.encoding
    """

    tool: ToolInfo
    opus: OpusInfo
    origin_source: str = "file"
    origin_encoding: str = "Ogg"


def load_profile() -> ContainerProfile:
    """Build a ContainerProfile from the environment.

    HOW: Reads DCA_TOOL_NAME, DCA_TOOL_VERSION, DCA_TOOL_URL,
    DCA_TOOL_AUTHOR and DCA_OPUS_MODE, falling back to the module defaults.
    """
    tool = ToolInfo(
        name=os.getenv("DCA_TOOL_NAME", DEFAULT_TOOL_NAME),
        version=os.getenv("DCA_TOOL_VERSION", __version__),
        url=os.getenv("DCA_TOOL_URL", DEFAULT_TOOL_URL),
        author=os.getenv("DCA_TOOL_AUTHOR", DEFAULT_TOOL_AUTHOR),
    )
    opus = OpusInfo(
        mode=os.getenv("DCA_OPUS_MODE", "voip"),
        sample_rate=OPUS_SAMPLE_RATE,
        frame_size=OPUS_FRAME_SIZE,
        abr=OPUS_BITRATE,
        vbr=True,
        channels=OPUS_CHANNELS,
    )
    return ContainerProfile(tool=tool, opus=opus)


DEFAULT_PROFILE = load_profile()


def ffmpeg_args(profile: ContainerProfile) -> List[str]:
    """Return the ffmpeg output arguments that produce Opus-in-Ogg for a profile.

    RULES:
    - Channel count, sample rate and bitrate come from profile.opus
    - Output is always libopus in an Ogg ("opus" muxer) container
    """
    return [
        "-ac", str(profile.opus.channels),
        "-ar", str(profile.opus.sample_rate),
        "-ab", str(profile.opus.abr),
        "-acodec", "libopus",
        "-f", "opus",
    ]
