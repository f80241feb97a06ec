"""Intermediate representation dataclasses for compiled transcripts.

WHY: The speech-to-text engine produces a flat list of timestamped words,
and the vision pipeline produces an arbitrarily nested tree of visual
events. Neither shape is useful to an editor on its own. The IR gives
both streams one well-typed, time-aligned form that the compactor and
every formatter consume.

HOW: Six frozen dataclasses:
  Word         : one spoken word with millisecond timing
  VideoNodeRef : link from an utterance to an overlapping visual node
  SpeechSegment: contiguous words forming one utterance
  VisualNode   : one canonical state/span/moment node of the visual tree
  VisualDocument: normalized visual annotation (summary + forest)
  Compilation  : linked segments plus the visual document

RULES:
- All times are integer (or float) milliseconds, never seconds
- Records are frozen; ordered collections are tuples
- speaker/language use None for "unknown", never ""
- A moment has start_ms == end_ms == t_ms
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple


KIND_STATE = "state"
KIND_SPAN = "span"
KIND_MOMENT = "moment"

NODE_KINDS = (KIND_STATE, KIND_SPAN, KIND_MOMENT)


@dataclass(frozen=True)
class Word:
    """A single spoken word with timing and attribution.

    RULES:
    - start_ms <= end_ms after lenient coercion
    - speaker / language: None when the STT engine did not provide them
    """

    text: str
    start_ms: float
    end_ms: float
    speaker: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class VideoNodeRef:
    """Reference from a speech segment to an overlapping visual node.

    WHY: Editors need to know which visual events happen while a given
    utterance is spoken, and exactly which part of the event overlaps.

    RULES:
    - Moment links carry t_ms; local_start_ms/local_end_ms are None
    - Interval links carry the intersection [local_start_ms, local_end_ms)
      of segment and node; t_ms is None
    """

    node_id: str
    is_moment: bool
    t_ms: Optional[float] = None
    local_start_ms: Optional[float] = None
    local_end_ms: Optional[float] = None


@dataclass(frozen=True)
class SpeechSegment:
    """A contiguous group of words forming one coherent utterance.

    HOW: Created by the segmenter with an empty video_nodes tuple. The
    linker returns a copy with video_nodes filled in.

    RULES:
    - id is "utt_N", sequential in creation order
    - start_ms is the first word's start; end_ms the greatest word end
    - text is the words joined by single spaces, trimmed
    - words is never empty
    """

    id: str
    start_ms: float
    end_ms: float
    speaker: Optional[str]
    language: Optional[str]
    text: str
    words: Tuple[Word, ...]
    video_nodes: Tuple[VideoNodeRef, ...] = ()

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class VisualNode:
    """One canonical node of the visual annotation tree.

    RULES:
    - id is path-derived ("state_0", "state_0.span_1", "state_0.moment_0")
      and unique across the whole tree
    - kind is "state", "span" or "moment"
    - is_moment is True exactly when kind == "moment"
    - label is None when the producer gave no (or an empty) label
    - tags keep first-seen order with duplicates dropped
    - children keep the producer's sibling order
    """

    id: str
    kind: str
    label: Optional[str]
    is_moment: bool
    start_ms: int
    end_ms: int
    tags: Tuple[str, ...] = ()
    children: Tuple["VisualNode", ...] = ()

    @property
    def t_ms(self) -> int:
        """The instant of a moment node (its start)."""
        return self.start_ms


@dataclass(frozen=True)
class VisualDocument:
    """Normalized visual annotation: summary text plus the node forest."""

    version: Optional[str]
    summary: Optional[str]
    timeline: Tuple[VisualNode, ...] = ()


@dataclass(frozen=True)
class Compilation:
    """Linked speech segments and the normalized visual document.

    WHY: This is the container that the compactor and every formatter
    receive, the equivalent of a finished transcript.
    """

    segments: Tuple[SpeechSegment, ...]
    visual: VisualDocument = field(default_factory=lambda: VisualDocument(None, None))

    @property
    def summary(self) -> Optional[str]:
        return self.visual.summary

    @property
    def timeline(self) -> Tuple[VisualNode, ...]:
        return self.visual.timeline


def iter_nodes(forest: Tuple[VisualNode, ...]) -> Iterator[VisualNode]:
    """Yield every node of the forest in pre-order (document order).

    Uses an explicit stack so arbitrarily deep trees never hit the
    interpreter's recursion limit.
    """
    stack = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
