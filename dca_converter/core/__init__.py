"""DCA1 container core: header model, builder, reader, and error types.

WHY: The container format is the only part of the converter with a
byte-exact contract. Keeping it in its own package means it can be used
without ffmpeg, argparse, or any file system access.

HOW: header.py defines the JSON header dataclasses, builder.py appends
the preamble, header and length-prefixed frames to an owned buffer, and
reader.py parses such a buffer back. errors.py holds the exception types
shared with the Ogg extractor.

RULES:
- Nothing in this package logs; every failure is raised as a DcaError
- The builder only needs an iterable of opaque byte packets
"""
