"""vidscriber: speech and visual timeline compiler for video editing.

WHY: A speech-to-text engine and a vision model each describe the same
video, but in incompatible shapes: a flat stream of timestamped words
and a nested tree of visual events. Editing tools need one time-aligned
artifact that answers "what is said, and what is on screen meanwhile".

HOW: Four-stage core. Segment words into utterances, normalize the
visual tree, link the two by temporal overlap, compact into the
vidscriber.v1 document. Pluggable formatters, a CLI and an HTTP API sit
on top of the core.

RULES:
- The core never performs I/O; surfaces read and write the JSON
- The vidscriber.v1 document is the stable output contract
- Identical input always yields byte-identical output
"""

__version__ = "0.1.0"
