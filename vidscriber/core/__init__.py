"""Core compilation modules.

WHY: The core package contains the stable heart of the compiler: the
IR dataclasses and the four transformation stages. Every surface (CLI,
HTTP API, formatters) goes through compile_documents/compile_transcript.

HOW: ir.py defines the data structures, segmenter.py groups words into
utterances, normalizer.py canonicalizes the visual tree, linker.py
computes overlaps, compactor.py renders the output, and compiler.py
chains them. assembler.py turns raw Soniox tokens into words.

RULES:
- IR dataclasses are the contract; change with care
- No module here performs network or file I/O (schemas aside)
- Errors are raised as vidscriber.core.errors exceptions
"""

from vidscriber.core.compiler import compile_documents, compile_transcript
from vidscriber.core.errors import SchemaViolation, VidscriberError
from vidscriber.core.segmenter import SegmenterConfig

__all__ = [
    "SchemaViolation",
    "SegmenterConfig",
    "VidscriberError",
    "compile_documents",
    "compile_transcript",
]
