"""Shared test fixtures for the vidscriber test suite.

WHY: Most test modules need the same small, hand-checked speech and
visual documents. Centralizing them here keeps every expected value in
one place and makes the end-to-end examples easy to recognise.

HOW: Plain module-level constants hold the raw documents; pytest
fixtures hand out fresh deep copies so no test can leak mutations into
another.

RULES:
- SPEECH_WORDS is the three-word, two-speaker example (Hello world / Bye)
- VERIFIED_TOKENS is a raw Soniox response for "How are you doing
  today? I am fantastic, thank you." with two speakers
- NESTED_VISUAL exercises every node kind at top level and nested
"""

import copy
from typing import Any, Dict, List

import pytest


SPEECH_WORDS: List[Dict[str, Any]] = [
    {"text": "Hello", "start_ms": 0,    "end_ms": 400,  "speaker": "A"},
    {"text": "world", "start_ms": 420,  "end_ms": 800,  "speaker": "A"},
    {"text": "Bye",   "start_ms": 2000, "end_ms": 2300, "speaker": "B"},
]

VERIFIED_TOKENS: List[Dict[str, Any]] = [
    {"text": "How",    "start_ms": 120,  "end_ms": 250,  "confidence": 0.97, "speaker": "1", "language": "en"},
    {"text": " are",   "start_ms": 260,  "end_ms": 380,  "confidence": 0.95, "speaker": "1", "language": "en"},
    {"text": " you",   "start_ms": 390,  "end_ms": 510,  "confidence": 0.96, "speaker": "1", "language": "en"},
    {"text": " do",    "start_ms": 520,  "end_ms": 600,  "confidence": 0.93, "speaker": "1", "language": "en"},
    {"text": "ing",    "start_ms": 600,  "end_ms": 720,  "confidence": 0.94, "speaker": "1", "language": "en"},
    {"text": " to",    "start_ms": 730,  "end_ms": 790,  "confidence": 0.91, "speaker": "1", "language": "en"},
    {"text": "day",    "start_ms": 790,  "end_ms": 920,  "confidence": 0.96, "speaker": "1", "language": "en"},
    {"text": "?",      "start_ms": 920,  "end_ms": 940,  "confidence": 0.99, "speaker": "1", "language": "en"},
    {"text": "I",      "start_ms": 1200, "end_ms": 1260, "confidence": 0.98, "speaker": "2", "language": "en"},
    {"text": " am",    "start_ms": 1270, "end_ms": 1380, "confidence": 0.97, "speaker": "2", "language": "en"},
    {"text": " fan",   "start_ms": 1390, "end_ms": 1520, "confidence": 0.90, "speaker": "2", "language": "en"},
    {"text": "tastic", "start_ms": 1520, "end_ms": 1780, "confidence": 0.93, "speaker": "2", "language": "en"},
    {"text": ",",      "start_ms": 1780, "end_ms": 1800, "confidence": 0.98, "speaker": "2", "language": "en"},
    {"text": " thank", "start_ms": 1810, "end_ms": 1950, "confidence": 0.96, "speaker": "2", "language": "en"},
    {"text": " you",   "start_ms": 1960, "end_ms": 2100, "confidence": 0.97, "speaker": "2", "language": "en"},
    {"text": ".",      "start_ms": 2100, "end_ms": 2120, "confidence": 0.99, "speaker": "2", "language": "en"},
]

# One state [0, 5000] holding one moment at 2500 ms.
STATE_WITH_MOMENT: Dict[str, Any] = {
    "version": "1.0.0",
    "summary": "A presenter introduces the product.",
    "timeline": [
        {
            "id": "intro",
            "kind": "state",
            "label": "Introduction",
            "start_ms": 0,
            "end_ms": 5000,
            "children": [
                {"id": "wave", "kind": "moment", "label": "Waves", "t_ms": 2500},
            ],
        },
    ],
}

NESTED_VISUAL: Dict[str, Any] = {
    "version": "1.0.0",
    "summary": "Desk demo.",
    "timeline": [
        {
            "id": "s1",
            "kind": "state",
            "label": "Desk",
            "start_ms": 0,
            "end_ms": 5000,
            "tags": ["speaker:onscreen", "gaze:camera", "speaker:onscreen"],
            "conf": 0.9,
            "children": [
                {"id": "a", "kind": "span", "label": "Typing", "start_ms": 0, "end_ms": 2000},
                {"id": "b", "kind": "moment", "label": "", "t_ms": 2500},
                {
                    "id": "c",
                    "kind": "span",
                    "label": "Holds phone",
                    "start_ms": 2000,
                    "end_ms": 5000,
                    "bbox": [0.1, 0.2, 0.5, 0.6],
                    "children": [
                        {"id": "d", "kind": "moment", "label": "Screen lights up", "t_ms": 3000},
                    ],
                },
            ],
        },
        {"id": "m", "kind": "moment", "label": "Cut", "t_ms": 5000},
        {"id": "x", "kind": "span", "label": "Outro", "start_ms": 5000, "end_ms": 8000},
        {"id": "s2", "kind": "state", "label": "Credits", "start_ms": 8000, "end_ms": 9000},
    ],
}


@pytest.fixture
def speech_words():
    """The three-word, two-speaker example as raw word dicts."""
    return copy.deepcopy(SPEECH_WORDS)


@pytest.fixture
def speech_document():
    return {"words": copy.deepcopy(SPEECH_WORDS)}


@pytest.fixture
def verified_tokens():
    """Raw Soniox token array with sub-word splits and two speakers."""
    return copy.deepcopy(VERIFIED_TOKENS)


@pytest.fixture
def state_with_moment():
    return copy.deepcopy(STATE_WITH_MOMENT)


@pytest.fixture
def nested_visual():
    """Visual document using every node kind, nested two levels deep."""
    return copy.deepcopy(NESTED_VISUAL)
