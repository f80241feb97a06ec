"""Transcript compilation: speech + visual annotation → one timeline.

WHY: The speech and vision collaborators run independently and return
differently-shaped documents. This module is the single entry point that
reconciles them, so the CLI, the HTTP API and library callers all get
exactly the same result for the same input.

HOW: Four steps, each a pure function from its own module:
  1. segment_words    : speech words → utterance segments
  2. normalize_visual : visual tree → canonical node forest
  3. link_timelines   : segments x nodes → cross-references
  4. compact          : linked structures → vidscriber.v1 dict
Steps 1 and 2 are independent. Step 2 runs first so a malformed visual
document fails fast before any speech work is done.

RULES:
- Synchronous, side-effect free, deterministic
- SchemaViolation from step 2 propagates; nothing is returned
- Speech input may be ``{words}`` or a raw Soniox ``{tokens}`` response
- Visual input may be None, a hierarchy document, or a multi-pass envelope
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from vidscriber.core.assembler import speech_document_words
from vidscriber.core.compactor import compact
from vidscriber.core.ir import Compilation
from vidscriber.core.linker import link_timelines
from vidscriber.core.normalizer import normalize_visual
from vidscriber.core.segmenter import SegmenterConfig, segment_words

logger = logging.getLogger(__name__)


def compile_documents(
    speech: Optional[Mapping[str, Any]],
    visual: Optional[Mapping[str, Any]],
    cfg: Optional[SegmenterConfig] = None,
) -> Compilation:
    """Segment, normalize and link, returning the IR for formatters.

    Raises:
        SchemaViolation: If the visual document is structurally invalid.
    """
    visual_doc = normalize_visual(visual)
    segments = segment_words(speech_document_words(speech), cfg)
    linked = link_timelines(segments, visual_doc.timeline)
    logger.info(
        "Compiled %d utterances against %d top-level visual nodes",
        len(linked), len(visual_doc.timeline),
    )
    return Compilation(segments=linked, visual=visual_doc)


def compile_transcript(
    speech: Optional[Mapping[str, Any]],
    visual: Optional[Mapping[str, Any]],
    cfg: Optional[SegmenterConfig] = None,
) -> Dict[str, Any]:
    """Compile both documents straight into the vidscriber.v1 dict.

    Args:
        speech: STT output (``{"words": [...]}`` or ``{"tokens": [...]}``).
        visual: Hierarchy v1 document, multi-pass envelope, or None.
        cfg: Segmentation thresholds; defaults to SegmenterConfig().

    Returns:
        The compact output document.

    Raises:
        SchemaViolation: If the visual document is structurally invalid.
    """
    return compact(compile_documents(speech, visual, cfg))
