"""Pydantic models for the compiler API's bodies.

WHY: Pipeline integrations are generated from the OpenAPI document, so
every request and response shape is declared here. Bad option values
and unknown formats are then rejected before any compilation starts.

HOW: Each endpoint has its own model. The speech and visual documents
themselves stay free-form dicts: their structure is checked by the
compiler (jsonschema for the visual tree), which reports every problem
at once instead of pydantic's first-failure view.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Segmentation options mirror SegmenterConfig field names exactly
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class OutputFormat(str, Enum):
    """Available output format identifiers.

    RULES:
    - Values match keys in vidscriber.formatters.FORMATTERS exactly
    """

    compact_json = "compact_json"
    plain_text = "plain_text"


class SegmentationOptions(BaseModel):
    """Optional overrides for utterance segmentation thresholds.

    Omitted fields keep the server's configured defaults.
    """

    gap_threshold_ms: Optional[int] = Field(
        default=None, ge=0,
        description="Split when the silence between two words exceeds this (ms).",
    )
    min_words_per_segment: Optional[int] = Field(
        default=None, gt=0,
        description="Words needed before terminal punctuation may split.",
    )
    min_duration_ms: Optional[int] = Field(
        default=None, gt=0,
        description="Utterance duration after which terminal punctuation may split (ms).",
    )
    max_duration_ms: Optional[int] = Field(
        default=None, gt=0,
        description="Force a split once an utterance lasts this long (ms).",
    )
    max_words_per_segment: Optional[int] = Field(
        default=None, gt=0,
        description="Force a split once an utterance has this many words.",
    )


class CompileRequest(BaseModel):
    """Body of POST /compilations.

    RULES:
    - speech is required; visual may be null to compile speech alone
    - format defaults to compact_json
    """

    speech: Dict[str, Any] = Field(
        description="Speech document: {\"words\": [...]} or a raw Soniox transcript with tokens.",
    )
    visual: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Hierarchy v1 visual document, or a multi-pass envelope with finalPhase.",
    )
    options: Optional[SegmentationOptions] = Field(
        default=None,
        description="Segmentation threshold overrides.",
    )
    format: OutputFormat = Field(
        default=OutputFormat.compact_json,
        description="Output format. compact_json returns the document as JSON; "
                    "other formats return their file content as text.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "speech": {"words": [
                    {"text": "Hello", "start_ms": 0, "end_ms": 400, "speaker": "A"},
                    {"text": "world", "start_ms": 420, "end_ms": 800, "speaker": "A"},
                ]},
                "visual": {
                    "version": "1.0.0",
                    "summary": "A person greets the camera.",
                    "timeline": [
                        {"id": "s1", "kind": "state", "label": "Intro",
                         "start_ms": 0, "end_ms": 5000},
                    ],
                },
                "options": {"gap_threshold_ms": 500},
            }
        ]
    }}


class FormatInfo(BaseModel):
    """Description of an available output format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-vidscriber.json').")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    - errors lists every individual problem when more than one was found
    """

    detail: str = Field(description="Human-readable error description.")
    errors: Optional[List[str]] = Field(
        default=None,
        description="Individual validation errors, each prefixed with its JSON path.",
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
