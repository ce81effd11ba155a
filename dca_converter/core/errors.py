"""Exception hierarchy for DCA container building and Ogg extraction.

WHY: Every failure in the conversion core is structural (bad input, bad
usage), never transient. Callers need typed exceptions to decide whether
to abort the whole conversion, skip a frame, or supply a default.

HOW: A single DcaError base with one subclass per failure kind. Each
subclass keeps the offending value (field name, frame size, offset) as an
attribute so callers can report it without parsing the message.

RULES:
- The core raises these and never logs or swallows them
- MissingRequiredField replaces any implicit "assume present" access
- FrameTooLarge is raised before a single byte of the frame is written
- MalformedSource covers every Ogg page/packet structure violation
"""

from __future__ import annotations


class DcaError(Exception):
    """Base class for all dca_converter errors."""


class MissingRequiredField(DcaError):
    """Raised when metadata lacks a field the header cannot be built without.

    WHY: Title and artist are required in the DCA header. An absent value
    must be surfaced to the caller instead of written as a silent default.

    RULES:
    - ``field`` is the metadata attribute name ("title" or "artist")
    """

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__("Metadata is missing required field '{}'".format(field))


class FrameTooLarge(DcaError):
    """Raised when an audio frame does not fit the signed 16-bit length prefix."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            "Audio frame of {} bytes exceeds the {} byte frame limit".format(size, limit)
        )


class MalformedSource(DcaError):
    """Raised when the Ogg byte stream violates page or packet structure.

    RULES:
    - ``offset`` is the byte offset of the offending page, if known
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = "{} (at byte offset {})".format(message, offset)
        super().__init__(message)


class SerializationFailure(DcaError):
    """Raised when the container header cannot be encoded as valid DCA JSON."""


class ContainerStateError(DcaError):
    """Raised when builder calls violate header-before-frames ordering."""


class MalformedContainer(DcaError):
    """Raised when a DCA1 buffer cannot be parsed."""


class TranscodeError(DcaError):
    """Raised when the external ffmpeg process cannot produce Opus-in-Ogg output.

    RULES:
    - ``returncode`` is None when the binary could not be started at all
    """

    def __init__(self, message: str, returncode: int | None = None) -> None:
        self.returncode = returncode
        super().__init__(message)
