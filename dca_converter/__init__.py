"""DCA Converter — Opus-in-Ogg to DCA1 container conversion.

WHY: Voice-streaming consumers (Discord bots and similar) read audio as
DCA1: a small preamble, a JSON metadata header, and length-prefixed Opus
frames they can forward without decoding. Common tools emit Opus inside
Ogg instead, so this package re-wraps the packets.

HOW: Three-stage pipeline — transcode (ffmpeg to Opus-in-Ogg), extract
(Ogg demultiplexing with the two header packets skipped), build (DCA1
container writer). Each stage is independently testable.

RULES:
- The container core never decodes or validates Opus payloads
- Only container version 1 is read or written
- Header is always written before any audio frame
"""

__version__ = "0.1.0"
