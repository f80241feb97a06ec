"""Tests for the FastAPI compiler API.

WHY: Validates that all three API endpoints behave correctly: happy
paths, error cases, and the OpenAPI document the pipeline integrations
are generated from.

HOW: Uses the FastAPI TestClient for synchronous in-process requests.
The compiler runs for real; it has no external dependencies to mock.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Each test is independent; the app holds no state between requests
- Tests cover: happy paths, 422 schema violations, 422 bad options
"""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from vidscriber import __version__
from vidscriber.core.compiler import compile_transcript
from vidscriber.server.app import app


@pytest.fixture
def client():
    return TestClient(app)


# ---------------------------------------------------------------------------
# POST /compilations
# ---------------------------------------------------------------------------


class TestCreateCompilation:

    def test_compact_json(self, client, speech_document, state_with_moment):
        resp = client.post("/compilations", json={
            "speech": speech_document,
            "visual": state_with_moment,
        })
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.json() == compile_transcript(speech_document, state_with_moment)

    def test_body_matches_formatter_bytes(self, client, speech_document, state_with_moment):
        resp = client.post("/compilations", json={
            "speech": speech_document,
            "visual": state_with_moment,
        })
        expected = json.dumps(
            compile_transcript(speech_document, state_with_moment),
            indent=2, ensure_ascii=False,
        )
        assert resp.text == expected

    def test_without_visual(self, client, speech_document):
        resp = client.post("/compilations", json={"speech": speech_document})
        assert resp.status_code == 200
        assert resp.json()["video_timeline"] == []

    def test_raw_soniox_tokens(self, client, verified_tokens):
        resp = client.post("/compilations", json={"speech": {"tokens": verified_tokens}})
        assert [u["text"] for u in resp.json()["speech_timeline"]] == [
            "How are you doing today?",
            "I am fantastic, thank you.",
        ]

    def test_plain_text(self, client, speech_document, state_with_moment):
        resp = client.post("/compilations", json={
            "speech": speech_document,
            "visual": state_with_moment,
            "format": "plain_text",
        })
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert "[0.000->0.800] A: Hello world" in resp.text

    def test_segmentation_options(self, client, speech_document):
        resp = client.post("/compilations", json={
            "speech": speech_document,
            "options": {"max_words_per_segment": 1},
        })
        assert len(resp.json()["speech_timeline"]) == 3


class TestCompilationErrors:

    def test_schema_violation_returns_422(self, client, speech_document, state_with_moment):
        del state_with_moment["timeline"][0]["children"][0]["t_ms"]
        resp = client.post("/compilations", json={
            "speech": speech_document,
            "visual": state_with_moment,
        })
        assert resp.status_code == 422
        body = resp.json()
        assert body["detail"].startswith("Visual document is invalid")
        assert body["errors"] == [
            "timeline/0/children/0: 't_ms' is a required property",
        ]

    def test_invalid_option_value(self, client, speech_document):
        resp = client.post("/compilations", json={
            "speech": speech_document,
            "options": {"max_words_per_segment": 0},
        })
        assert resp.status_code == 422

    def test_unknown_format(self, client, speech_document):
        resp = client.post("/compilations", json={"speech": speech_document, "format": "docx"})
        assert resp.status_code == 422

    def test_missing_speech(self, client):
        resp = client.post("/compilations", json={"visual": None})
        assert resp.status_code == 422

    def test_non_object_words_skipped(self, client):
        resp = client.post("/compilations", json={"speech": {"words": [
            1, {"text": "Hi", "start_ms": 0, "end_ms": 300},
        ]}})
        assert resp.status_code == 200
        assert [u["text"] for u in resp.json()["speech_timeline"]] == ["Hi"]

    def test_non_string_final_phase(self, client, speech_document):
        resp = client.post("/compilations", json={
            "speech": speech_document,
            "visual": {"finalPhase": ["refine"]},
        })
        assert resp.status_code == 422
        assert resp.json()["errors"] == ["finalPhase: ['refine'] is not of type 'string'"]


# ---------------------------------------------------------------------------
# GET /formats, GET /health
# ---------------------------------------------------------------------------


class TestListFormats:

    def test_list_formats_returns_all(self, client):
        resp = client.get("/formats")
        assert resp.status_code == 200
        assert [f["key"] for f in resp.json()] == ["compact_json", "plain_text"]

    def test_format_info_structure(self, client):
        info = client.get("/formats").json()[0]
        assert info == {
            "key": "compact_json",
            "name": "Compact JSON",
            "suffix": "-vidscriber.json",
        }


class TestHealthCheck:

    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}


class TestOpenAPISchema:

    def test_all_endpoints_in_schema(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        assert "post" in paths["/compilations"]
        assert "get" in paths["/formats"]
        assert "get" in paths["/health"]
