"""
Tests for web/app.py, the HTTP surface.

The capture pipeline is a fake that writes straight into a real store; the
analyst is either the real one with a mocked Anthropic client or a fake.

Run with: pytest tests/test_app.py
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from config.settings import Settings
from frontpage.analyst import Analyst
from frontpage.errors import CaptureTimeoutError, ExternalServiceError, ModelResponseShapeError
from frontpage.models import AnalysisKind
from frontpage.store import CaptureStore
from web.app import create_app

FILENAME = "Mundo_2024-01-01_12-00-00.webp"


class FakePipeline:
    def __init__(self, store, error=None):
        self.store = store
        self.error = error
        self.requests = []

    def capture(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.store.persist(b"webp-bytes", request.service_label)


@pytest.fixture
def settings(tmp_path):
    return Settings(anthropic_api_key="test-key", screengrabs_dir=tmp_path)


@pytest.fixture
def store(settings):
    return CaptureStore(
        settings.screengrabs_dir,
        clock=lambda: datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def stored(store):
    store.persist(b"webp-bytes", "Mundo")
    return FILENAME


def make_client(settings, store, pipeline=None, analyst=None):
    app = create_app(
        settings,
        store=store,
        pipeline=pipeline or FakePipeline(store),
        analyst=analyst or MagicMock(spec=Analyst),
    )
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def client(settings, store):
    return make_client(settings, store)


# ── Meta ───────────────────────────────────────────────────────────────────────


class TestMeta:
    def test_health(self, client):
        assert client.get("/health").get_json() == {"status": "ok"}

    def test_services_grouped_by_region(self, client):
        regions = client.get("/api/services").get_json()["regions"]
        assert {"name": "Mundo", "url": "https://www.bbc.com/mundo"} in regions["Latin America"]

    def test_analysis_types_lists_all_kinds(self, client):
        ids = [t["id"] for t in client.get("/api/analysis-types").get_json()]
        assert ids == [
            "topFiveSummary", "socialMediaRewrite", "updatesFrequency",
            "sentimentAnalysis", "coverageAnalysis", "audienceFitAnalysis",
        ]


# ── Capture ────────────────────────────────────────────────────────────────────


class TestCapture:
    def test_success_returns_filename(self, client):
        resp = client.post("/api/capture", json={"url": "https://www.bbc.com/mundo", "serviceName": "Mundo"})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["filename"] == FILENAME
        assert body["message"] == "Screenshot captured successfully"

    @pytest.mark.parametrize("payload", [
        {"serviceName": "Mundo"},
        {"url": "https://www.bbc.com/mundo"},
        {"url": "  ", "serviceName": "Mundo"},
        {"url": 42, "serviceName": "Mundo"},
    ])
    def test_missing_fields_is_400(self, client, payload):
        resp = client.post("/api/capture", json=payload)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "URL and Service Name are required"}

    def test_non_json_body_is_400(self, client):
        resp = client.post("/api/capture", data="url=x", content_type="text/plain")
        assert resp.status_code == 400

    def test_timeout_is_500_with_message(self, settings, store):
        error = CaptureTimeoutError("Screenshot capture timed out after 120 seconds")
        client = make_client(settings, store, pipeline=FakePipeline(store, error=error))

        resp = client.post("/api/capture", json={"url": "https://slow.example", "serviceName": "Slow"})

        assert resp.status_code == 500
        assert "timed out" in resp.get_json()["error"]

    def test_unexpected_error_is_500(self, settings, store):
        client = make_client(settings, store, pipeline=FakePipeline(store, error=OSError("disk full")))
        resp = client.post("/api/capture", json={"url": "https://a.com", "serviceName": "A"})
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Internal server error", "details": "disk full"}


# ── Analysis ───────────────────────────────────────────────────────────────────


class TestAnalyze:
    def test_updates_frequency_end_to_end(self, settings, store, stored):
        with patch("frontpage.analyst.anthropic.Anthropic") as mock_cls:
            block = MagicMock(type="text", text='{"underOneHour":5,"underFourHours":3,"today":4,"yesterday":2,"older":6}')
            mock_cls.return_value.messages.create.return_value = MagicMock(content=[block])
            client = make_client(settings, store, analyst=Analyst(settings))

            resp = client.post("/api/analyze", json={"filename": stored, "analysisType": "updatesFrequency"})

        assert resp.status_code == 200
        assert resp.get_json() == {
            "success": True,
            "results": {
                "updatesFrequency": {
                    "underOneHour": 5, "underFourHours": 3, "today": 4, "yesterday": 2, "older": 6,
                }
            },
        }

    def test_top_five_summary_is_text(self, settings, store, stored):
        analyst = MagicMock(spec=Analyst)
        analyst.run.return_value = "**Article 1:**\nHeadline"
        client = make_client(settings, store, analyst=analyst)

        resp = client.post(
            "/api/analyze",
            json={"filename": stored, "analysisType": "topFiveSummary", "serviceName": "Mundo"},
        )

        assert resp.get_json()["results"] == {"topFiveSummary": "**Article 1:**\nHeadline"}
        image = analyst.run.call_args.args[1]
        assert image.filename == stored

    def test_request_parsed_into_kind_and_label(self, settings, store, stored):
        analyst = MagicMock(spec=Analyst)
        analyst.run.return_value = []
        client = make_client(settings, store, analyst=analyst)

        client.post(
            "/api/analyze",
            json={"filename": stored, "analysisType": "socialMediaRewrite", "serviceName": "Hausa"},
        )

        kind, image = analyst.run.call_args.args
        assert kind is AnalysisKind.SOCIAL_MEDIA_REWRITE
        assert analyst.run.call_args.kwargs == {"service_label": "Hausa"}

    @pytest.mark.parametrize("payload", [{"filename": FILENAME}, {"analysisType": "topFiveSummary"}, {}])
    def test_missing_fields_is_400(self, client, payload):
        resp = client.post("/api/analyze", json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Filename and analysis type are required"

    def test_unknown_type_is_400(self, client, stored):
        resp = client.post("/api/analyze", json={"filename": stored, "analysisType": "horoscope"})
        assert resp.status_code == 400
        assert "horoscope" in resp.get_json()["error"]

    def test_unknown_file_is_404(self, client):
        resp = client.post("/api/analyze", json={"filename": "nope.webp", "analysisType": "topFiveSummary"})
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Screenshot file not found"

    def test_superseded_file_is_404(self, client, store):
        first = store.persist(b"one", "Mundo").filename
        store._clock = lambda: datetime(2024, 1, 1, 12, 5, 0, tzinfo=timezone.utc)
        store.persist(b"two", "Hausa")

        resp = client.post("/api/analyze", json={"filename": first, "analysisType": "topFiveSummary"})
        assert resp.status_code == 404

    def test_shape_error_is_500_with_details(self, settings, store, stored):
        analyst = MagicMock(spec=Analyst)
        analyst.run.side_effect = ModelResponseShapeError("sentimentAnalysis", "invalid JSON: Expecting value")
        client = make_client(settings, store, analyst=analyst)

        resp = client.post("/api/analyze", json={"filename": stored, "analysisType": "sentimentAnalysis"})

        assert resp.status_code == 500
        assert resp.get_json() == {
            "error": "Failed to parse sentimentAnalysis response from model",
            "details": "invalid JSON: Expecting value",
        }


# ── Follow-up questions ────────────────────────────────────────────────────────


class TestAskFrontPage:
    def test_streams_text(self, settings, store, stored):
        analyst = MagicMock(spec=Analyst)
        analyst.ask_stream.return_value = iter(["The top ", "story is ", "about floods."])
        client = make_client(settings, store, analyst=analyst)

        resp = client.post("/api/ask-frontpage", json={"filename": stored, "question": "Top story?"})

        assert resp.status_code == 200
        assert resp.mimetype == "text/plain"
        assert resp.get_data(as_text=True) == "The top story is about floods."
        assert resp.headers["Cache-Control"] == "no-cache"

    def test_error_mid_stream_appends_marker(self, settings, store, stored):
        def failing():
            yield "Partial answer"
            raise ExternalServiceError("Follow-up question failed")

        analyst = MagicMock(spec=Analyst)
        analyst.ask_stream.return_value = failing()
        client = make_client(settings, store, analyst=analyst)

        resp = client.post("/api/ask-frontpage", json={"filename": stored, "question": "Q?"})

        assert resp.status_code == 200
        assert resp.get_data(as_text=True) == "Partial answer\n\n[Error: Follow-up question failed]"

    def test_missing_question_is_400(self, client, stored):
        resp = client.post("/api/ask-frontpage", json={"filename": stored, "question": " "})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Filename and question are required"

    def test_unknown_file_is_404_before_streaming(self, client):
        resp = client.post("/api/ask-frontpage", json={"filename": "gone.webp", "question": "Q?"})
        assert resp.status_code == 404
        assert json.loads(resp.get_data(as_text=True))["error"] == "Screenshot file not found"


# ── Static ─────────────────────────────────────────────────────────────────────


class TestScreengrabs:
    def test_serves_stored_file(self, client, stored):
        resp = client.get(f"/screengrabs/{stored}")
        assert resp.status_code == 200
        assert resp.data == b"webp-bytes"
        assert resp.mimetype == "image/webp"
        resp.close()

    def test_traversal_is_404(self, client, stored):
        assert client.get("/screengrabs/..%2F..%2Fetc%2Fpasswd").status_code == 404

    def test_missing_file_is_404(self, client):
        assert client.get("/screengrabs/nothing.webp").status_code == 404
