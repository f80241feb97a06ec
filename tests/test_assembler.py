"""Tests for sub-word token assembly.

WHY: When the speech document is a raw Soniox response, every word the
segmenter sees comes from this assembly step. A wrong rule here splits
"fantastic" into two words or glues two speakers together.

HOW: Uses the verified two-speaker token fixture from conftest plus small
hand-written token lists for the individual rules.
"""

import pytest

from vidscriber.core.assembler import (
    assemble_words,
    filter_translation_tokens,
    speech_document_words,
)
from vidscriber.core.errors import VidscriberError
from vidscriber.core.segmenter import segment_words


def _tok(text, start, end, speaker="1", **extra):
    token = {"text": text, "start_ms": start, "end_ms": end, "speaker": speaker}
    token.update(extra)
    return token


class TestVerifiedTokens:
    """Assembly of the verified Soniox response."""

    def test_word_texts(self, verified_tokens):
        words = assemble_words(verified_tokens)
        assert [w["text"] for w in words] == [
            "How", "are", "you", "doing", "today?",
            "I", "am", "fantastic,", "thank", "you.",
        ]

    def test_subword_timing_is_unified(self, verified_tokens):
        words = {w["text"]: w for w in assemble_words(verified_tokens)}
        assert (words["doing"]["start_ms"], words["doing"]["end_ms"]) == (520, 720)
        assert (words["fantastic,"]["start_ms"], words["fantastic,"]["end_ms"]) == (1390, 1800)

    def test_speaker_and_language_kept(self, verified_tokens):
        words = assemble_words(verified_tokens)
        assert words[0]["speaker"] == "1"
        assert words[-1]["speaker"] == "2"
        assert all(w["language"] == "en" for w in words)

    def test_segments_into_two_utterances(self, verified_tokens):
        segments = segment_words(assemble_words(verified_tokens))
        assert [s.text for s in segments] == [
            "How are you doing today?",
            "I am fantastic, thank you.",
        ]
        assert (segments[0].start_ms, segments[0].end_ms) == (120, 940)
        assert (segments[1].start_ms, segments[1].end_ms) == (1200, 2120)


class TestAssemblyRules:
    """Individual token joining rules."""

    def test_interleaved_speakers_do_not_mix(self):
        tokens = [
            _tok(" Hel", 0, 100, "A"),
            _tok(" Yes", 50, 150, "B"),
            _tok("lo", 100, 200, "A"),
        ]
        words = assemble_words(tokens)
        assert [(w["text"], w["speaker"]) for w in words] == [("Hello", "A"), ("Yes", "B")]
        assert words[0]["end_ms"] == 200

    def test_trailing_space_closes_word(self):
        words = assemble_words([_tok("Hi ", 0, 100), _tok("there", 100, 200)])
        assert [w["text"] for w in words] == ["Hi", "there"]

    def test_audio_events_skipped(self):
        tokens = [
            _tok("Oh", 0, 100),
            _tok("<laugh>", 100, 300, is_audio_event=True),
            _tok(" no", 300, 400),
        ]
        assert [w["text"] for w in assemble_words(tokens)] == ["Oh", "no"]

    def test_empty_text_skipped(self):
        tokens = [_tok("Ok", 0, 100), _tok("", 100, 150), _tok(" go", 200, 300)]
        assert [w["text"] for w in assemble_words(tokens)] == ["Ok", "go"]

    def test_translation_tokens_skipped(self):
        tokens = [
            _tok("Hej", 0, 100, translation_status="original"),
            _tok(" Hello", 0, 0, translation_status="translation"),
            _tok(" då", 200, 300),
        ]
        assert [w["text"] for w in assemble_words(tokens)] == ["Hej", "då"]

    def test_language_from_first_token(self):
        tokens = [_tok("Ok", 0, 100, language="sv"), _tok("ej", 100, 200, language="en")]
        assert assemble_words(tokens)[0]["language"] == "sv"

    def test_no_tokens(self):
        assert assemble_words([]) == []

    def test_non_object_tokens_skipped(self):
        tokens = ["junk", 3, None, _tok("Ok", 0, 100)]
        assert [w["text"] for w in assemble_words(tokens)] == ["Ok"]

    def test_tokens_without_timestamps(self):
        tokens = [{"text": "Hi", "speaker": "1"}, _tok(" there", 100, 200)]
        words = assemble_words(tokens)
        assert [w["text"] for w in words] == ["Hi", "there"]
        assert (words[0]["start_ms"], words[0]["end_ms"]) == (None, None)

    def test_tokens_without_timestamps_segment_leniently(self):
        tokens = [{"text": "Hi", "speaker": "1"}, _tok(" there", 100, 200)]
        segments = segment_words(assemble_words(tokens))
        assert [(s.start_ms, s.text) for s in segments] == [(0, "Hi there")]


class TestFilterTranslationTokens:

    def test_missing_status_is_kept(self):
        tokens = [_tok("a", 0, 1), _tok("b", 1, 2, translation_status="none")]
        assert filter_translation_tokens(tokens) == tokens

    def test_translation_dropped(self):
        tokens = [_tok("a", 0, 1, translation_status="translation")]
        assert filter_translation_tokens(tokens) == []


class TestSpeechDocumentWords:
    """Accepted shapes of the speech document."""

    def test_words_document(self, speech_document):
        assert [w["text"] for w in speech_document_words(speech_document)] == [
            "Hello", "world", "Bye",
        ]

    def test_tokens_document(self, verified_tokens):
        words = speech_document_words({"tokens": verified_tokens})
        assert len(words) == 10

    def test_bare_list(self, speech_words):
        assert speech_document_words(speech_words) == speech_words

    def test_none_and_empty(self):
        assert speech_document_words(None) == []
        assert speech_document_words({}) == []

    def test_unrecognized_shape(self):
        assert speech_document_words({"words": "not a list"}) == []

    @pytest.mark.parametrize("speech", ["hello", 42, True])
    def test_scalar_document_rejected(self, speech):
        with pytest.raises(VidscriberError, match="Speech document must be"):
            speech_document_words(speech)
