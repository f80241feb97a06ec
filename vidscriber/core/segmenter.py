"""Utterance segmentation of a flat, timestamped word stream.

WHY: The STT engine returns one long list of words. Editors think in
utterances: short, coherent spoken units that can be cut, moved and
linked to what is on screen. This module groups words into those units
using simple, predictable boundary heuristics.

HOW: Words are coerced leniently into Word records, sorted by start time
(stable), and walked once. An open segment is extended until one of the
split rules fires, then closed and a new one opened with the current
word. Closing a segment joins its words into text and assigns the next
sequential id.

RULES:
- Split when ANY of:
  1. gap between this word's start and the previous word's end > gap threshold
  2. speaker differs from the open segment's speaker
  3. language differs from the open segment's language
  4. previous word ends in terminal punctuation AND the open segment has
     >= min words OR lasts >= min duration
  5. open segment lasts >= max duration
  6. open segment has >= max words
- Otherwise the segment's end_ms grows to the word's end if greater
- Ids are "utt_0", "utt_1", ... in creation order
- Every input word lands in exactly one segment; no segment is empty
- Missing/non-numeric/non-finite start_ms → 0; same for end_ms → start_ms
- Words that are not objects are skipped
- Absent or empty speaker/language → None
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from vidscriber import config
from vidscriber.core.ir import SpeechSegment, Word

logger = logging.getLogger(__name__)

SPLIT_GAP = "gap"
SPLIT_SPEAKER = "speaker"
SPLIT_LANGUAGE = "language"
SPLIT_PUNCTUATION = "punctuation"
SPLIT_MAX_DURATION = "max_duration"
SPLIT_MAX_WORDS = "max_words"


@dataclass(frozen=True)
class SegmenterConfig:
    """Thresholds for utterance boundary detection.

    Defaults come from vidscriber.config, which reads VIDSCRIBER_*
    environment overrides.
    """

    gap_threshold_ms: int = config.DEFAULT_GAP_THRESHOLD_MS
    min_words_per_segment: int = config.DEFAULT_MIN_WORDS_PER_SEGMENT
    min_duration_ms: int = config.DEFAULT_MIN_DURATION_MS
    max_duration_ms: int = config.DEFAULT_MAX_DURATION_MS
    max_words_per_segment: int = config.DEFAULT_MAX_WORDS_PER_SEGMENT

    def __post_init__(self) -> None:
        if self.gap_threshold_ms < 0:
            raise ValueError("gap_threshold_ms must be >= 0")
        for name in (
            "min_words_per_segment",
            "min_duration_ms",
            "max_duration_ms",
            "max_words_per_segment",
        ):
            if getattr(self, name) <= 0:
                raise ValueError("{} must be > 0".format(name))

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "SegmenterConfig":
        """Build a config from a partial mapping of overrides.

        Keys that are absent or None keep their default. Unknown keys
        raise ValueError so typos in CLI/API options are not ignored.
        """
        if not options:
            return cls()
        known = set(cls.__dataclass_fields__)
        unknown = sorted(k for k in options if k not in known)
        if unknown:
            raise ValueError(
                "Unknown segmenter option(s): {}".format(", ".join(unknown))
            )
        overrides = {k: v for k, v in options.items() if v is not None}
        return cls(**overrides)


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass but never a timestamp
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    # json.load accepts NaN and Infinity
    if not math.isfinite(value):
        return None
    return value


def _as_label(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def coerce_word(raw: Mapping[str, Any]) -> Word:
    """Turn one raw STT word dict into a Word, leniently.

    WHY: Upstream data is sometimes malformed (missing or string
    timestamps). Dropping such words would lose speech, so bad fields
    fall back to safe defaults instead.
    """
    start = _as_number(raw.get("start_ms"))
    end = _as_number(raw.get("end_ms"))
    if start is None or end is None:
        logger.debug("Defaulting timestamps for word %r", raw.get("text"))
    if start is None:
        start = 0
    if end is None:
        end = start
    text = raw.get("text")
    return Word(
        text="" if text is None else str(text),
        start_ms=start,
        end_ms=end,
        speaker=_as_label(raw.get("speaker")),
        language=_as_label(raw.get("language")),
    )


def coerce_words(raw_words: Sequence[Mapping[str, Any]]) -> List[Word]:
    """Coerce raw word dicts and sort them by start time (stable).

    Entries that are not objects carry no text or timing and are skipped.
    """
    words: List[Word] = []
    for raw in raw_words:
        if not isinstance(raw, Mapping):
            logger.debug("Skipping non-object word entry %r", raw)
            continue
        words.append(coerce_word(raw))
    # sorted() is stable: words sharing a start_ms keep input order
    return sorted(words, key=lambda w: w.start_ms)


class _OpenSegment:
    """Mutable accumulator for the segment currently being built."""

    def __init__(self, word: Word) -> None:
        self.start_ms = word.start_ms
        self.end_ms = word.end_ms
        self.speaker = word.speaker
        self.language = word.language
        self.words: List[Word] = [word]

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms

    def add(self, word: Word) -> None:
        self.words.append(word)
        if word.end_ms > self.end_ms:
            self.end_ms = word.end_ms

    def close(self, index: int) -> SpeechSegment:
        return SpeechSegment(
            id="utt_{}".format(index),
            start_ms=self.start_ms,
            end_ms=self.end_ms,
            speaker=self.speaker,
            language=self.language,
            text=" ".join(w.text for w in self.words).strip(),
            words=tuple(self.words),
        )


def split_reason(
    current: _OpenSegment,
    word: Word,
    cfg: SegmenterConfig,
) -> Optional[str]:
    """Return the first split rule that fires for ``word``, or None.

    Rules are checked in the documented order; any one is sufficient.
    """
    prev = current.words[-1]
    gap = word.start_ms - prev.end_ms
    if gap > cfg.gap_threshold_ms:
        return SPLIT_GAP
    if word.speaker != current.speaker:
        return SPLIT_SPEAKER
    if word.language != current.language:
        return SPLIT_LANGUAGE
    if prev.text.endswith(config.TERMINAL_PUNCTUATION) and (
        len(current.words) >= cfg.min_words_per_segment
        or current.duration_ms >= cfg.min_duration_ms
    ):
        return SPLIT_PUNCTUATION
    if current.duration_ms >= cfg.max_duration_ms:
        return SPLIT_MAX_DURATION
    if len(current.words) >= cfg.max_words_per_segment:
        return SPLIT_MAX_WORDS
    return None


def segment_words(
    raw_words: Sequence[Mapping[str, Any]],
    cfg: Optional[SegmenterConfig] = None,
) -> List[SpeechSegment]:
    """Group raw STT words into utterance segments.

    Args:
        raw_words: Word dicts ``{text, start_ms, end_ms, speaker?, language?}``
                   in any order.
        cfg: Segmentation thresholds; defaults to SegmenterConfig().

    Returns:
        Segments ordered by start time with video_nodes still empty.
    """
    if cfg is None:
        cfg = SegmenterConfig()

    words = coerce_words(raw_words)
    segments: List[SpeechSegment] = []
    if not words:
        return segments

    current = _OpenSegment(words[0])
    reasons: Dict[str, int] = {}

    for word in words[1:]:
        reason = split_reason(current, word, cfg)
        if reason is None:
            current.add(word)
            continue
        reasons[reason] = reasons.get(reason, 0) + 1
        segments.append(current.close(len(segments)))
        current = _OpenSegment(word)

    segments.append(current.close(len(segments)))

    logger.debug(
        "Segmented %d words into %d utterances (splits: %s)",
        len(words), len(segments), reasons,
    )
    return segments
