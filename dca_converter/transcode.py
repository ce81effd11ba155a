"""ffmpeg invocation producing Opus-in-Ogg bytes.

WHY: Input audio comes in whatever format the user has (webm, m4a, mp3,
...). DCA1 frames must be Opus packets encoded with the same parameters
the header advertises, so the input is re-encoded first.

HOW: build_ffmpeg_command() assembles ``ffmpeg [-ss S] -i IN [-t T]
<profile args> pipe:1``. transcode() runs it, reads stdout to completion
(blocking) and returns the bytes. stdin and stderr are discarded.

RULES:
- Encoding arguments always come from config.ffmpeg_args(profile)
- start and duration are whole seconds and optional
- A missing binary or a non-zero exit raises TranscodeError
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from dca_converter.config import DEFAULT_PROFILE, FFMPEG_PATH, ContainerProfile, ffmpeg_args
from dca_converter.core.errors import TranscodeError

logger = logging.getLogger(__name__)


def build_ffmpeg_command(
    input_path: str | Path,
    start: Optional[int] = None,
    duration: Optional[int] = None,
    profile: ContainerProfile = DEFAULT_PROFILE,
    ffmpeg: str = FFMPEG_PATH,
) -> List[str]:
    """Return the ffmpeg argument vector for one conversion."""
    cmd = [ffmpeg]
    if start is not None:
        cmd += ["-ss", str(start)]
    cmd += ["-i", str(input_path)]
    if duration is not None:
        cmd += ["-t", str(duration)]
    cmd += ffmpeg_args(profile)
    cmd.append("pipe:1")
    return cmd


def transcode(
    input_path: str | Path,
    start: Optional[int] = None,
    duration: Optional[int] = None,
    profile: ContainerProfile = DEFAULT_PROFILE,
    ffmpeg: str = FFMPEG_PATH,
) -> bytes:
    """Re-encode ``input_path`` to Opus-in-Ogg and return the whole output.

    Raises:
        TranscodeError: If ffmpeg cannot be started or exits non-zero.
    """
    cmd = build_ffmpeg_command(input_path, start, duration, profile, ffmpeg)
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        raise TranscodeError("Could not start ffmpeg ({}): {}".format(ffmpeg, e)) from e

    if result.returncode != 0:
        raise TranscodeError(
            "ffmpeg exited with status {} for {}".format(result.returncode, input_path),
            returncode=result.returncode,
        )
    logger.debug("ffmpeg produced %d bytes of Opus-in-Ogg", len(result.stdout))
    return result.stdout
