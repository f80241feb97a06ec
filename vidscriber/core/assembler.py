"""Sub-word token assembly from a raw Soniox transcript into words.

WHY: The STT collaborator may hand over Soniox's raw async transcript
instead of a word list. Soniox uses BPE tokenization, splitting words
like "fantastic" into [" fan", "tastic"], and with diarization enabled
tokens of different speakers may interleave. The segmenter needs whole
words with unified timing and attribution.

HOW: Tokens are walked once. Each speaker has its own accumulator so
interleaved speakers do not corrupt each other's words. A leading space
starts a new word (flushing that speaker's previous word), a trailing
space closes the current word, anything else continues it. Remaining
partial words are flushed at the end and the result is sorted by start.

RULES:
- Skip: non-object tokens, translation tokens, audio events, empty text
- Leading space → new word (strip the space from output text)
- Trailing space → word complete (strip the space)
- No surrounding space → continuation (extend end_ms)
- start_ms from the first token, end_ms from the last token; missing
  timestamps are passed on as None for the segmenter to default
- language is taken from the word's first token
- Output is sorted by start_ms (stable)
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from vidscriber.core.errors import VidscriberError
from vidscriber.core.segmenter import coerce_word


def filter_translation_tokens(tokens: List[Any]) -> List[Mapping[str, Any]]:
    """Remove translation tokens from the Soniox token array.

    WHY: When translation is enabled in the Soniox request, the token
    array contains interleaved translation tokens that have no audio
    alignment and must not be assembled into words.

    RULES:
    - Keep: translation_status is "original", "none", or missing
    - Discard: translation_status is "translation", and non-object entries
    """
    return [
        t for t in tokens
        if isinstance(t, Mapping)
        and t.get("translation_status", "none") != "translation"
    ]


class _SpeakerWord:
    """Accumulator for one speaker's word in progress."""

    def __init__(self, speaker: Optional[str]) -> None:
        self.speaker = speaker
        self.open = False
        self.text = ""
        self.start_ms: Any = None
        self.end_ms: Any = None
        self.language: Optional[str] = None

    def begin(self, token: Mapping[str, Any]) -> None:
        self.open = True
        self.text = ""
        self.start_ms = token.get("start_ms")
        self.language = token.get("language")

    def flush(self, words: List[Dict[str, Any]]) -> None:
        if self.open and self.text:
            words.append({
                "text": self.text,
                "start_ms": self.start_ms,
                "end_ms": self.end_ms,
                "speaker": self.speaker,
                "language": self.language,
            })
        self.open = False
        self.text = ""


def assemble_words(tokens: List[Any]) -> List[Dict[str, Any]]:
    """Assemble Soniox sub-word tokens into word dicts.

    Args:
        tokens: Flat list of Soniox token dicts from the async API response.

    Returns:
        Word dicts ``{text, start_ms, end_ms, speaker, language}`` sorted
        by start_ms, ready for the segmenter.
    """
    words: List[Dict[str, Any]] = []
    pending: Dict[Optional[str], _SpeakerWord] = {}

    for token in filter_translation_tokens(tokens):
        text = token.get("text") or ""
        if token.get("is_audio_event") is True or not isinstance(text, str) or not text:
            continue

        speaker = token.get("speaker")
        if speaker is not None and not isinstance(speaker, str):
            speaker = str(speaker)
        acc = pending.get(speaker)
        if acc is None:
            acc = pending[speaker] = _SpeakerWord(speaker)

        if text.startswith(" "):
            acc.flush(words)
            text = text[1:]
        if not acc.open:
            acc.begin(token)

        acc.text += text
        acc.end_ms = token.get("end_ms")

        if acc.text.endswith(" "):
            acc.text = acc.text[:-1]
            acc.flush(words)

    for acc in pending.values():
        acc.flush(words)

    # same leniency as the segmenter, so malformed timestamps sort as 0
    words.sort(key=lambda w: coerce_word(w).start_ms)
    return words


def speech_document_words(speech: Any) -> List[Any]:
    """Extract the raw word list from a speech document.

    RULES:
    - ``{"words": [...]}`` → the words as given
    - ``{"tokens": [...]}`` (raw Soniox response) → assembled words
    - a bare list → taken as the word list
    - None, empty, or an object with neither key → empty list
    - any other JSON value → VidscriberError
    """
    if speech is None:
        return []
    if isinstance(speech, list):
        return list(speech)
    if not isinstance(speech, Mapping):
        raise VidscriberError(
            "Speech document must be a JSON object or a list of words, got {}".format(
                type(speech).__name__)
        )
    words = speech.get("words")
    if isinstance(words, list):
        return list(words)
    tokens = speech.get("tokens")
    if isinstance(tokens, list):
        return assemble_words(tokens)
    return []
