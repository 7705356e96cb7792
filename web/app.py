"""
Flask web server for the front-page tracker.

Routes
──────
GET  /health                     Liveness probe
GET  /api/services               BBC World Service front pages by region
GET  /api/analysis-types         The analyses the dashboard can request
POST /api/capture                Screenshot a front page into the store
POST /api/analyze                Run one analysis kind on a stored screenshot
POST /api/ask-frontpage          Stream a free-form answer as text/plain
GET  /screengrabs/<filename>     The stored screenshot itself
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, request, send_from_directory, stream_with_context
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

from config.settings import Settings
from frontpage import services
from frontpage.analyst import Analyst
from frontpage.errors import FrontPageError, RequestValidationError
from frontpage.models import AnalysisKind, AnalysisRequest, CaptureRequest, dump_result
from frontpage.pipeline import CapturePipeline
from frontpage.renderer import PageRenderer
from frontpage.store import CaptureStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

#: Dashboard labels and explainers for each analysis kind.
ANALYSIS_TYPES: dict[AnalysisKind, tuple[str, str]] = {
    AnalysisKind.TOP_FIVE_SUMMARY: (
        "Top 5 summary",
        "Extracts and summarizes the five most prominent stories visible on the captured front page.",
    ),
    AnalysisKind.SOCIAL_MEDIA_REWRITE: (
        "Rewrite for social media",
        "Finds top stories and rewrites headlines into more engaging social copy in English and the target language.",
    ),
    AnalysisKind.UPDATES_FREQUENCY: (
        "Updates frequency",
        "Reads visible timestamps and groups stories by recency to show how frequently the page is updated.",
    ),
    AnalysisKind.SENTIMENT_ANALYSIS: (
        "Sentiment analysis",
        "Classifies visible stories by sentiment and tone, then scores each one for a quick emotional overview.",
    ),
    AnalysisKind.COVERAGE_ANALYSIS: (
        "Coverage quality",
        "Identifies key themes, highlights strengths and gaps, and compares coverage breadth against likely trends.",
    ),
    AnalysisKind.AUDIENCE_FIT_ANALYSIS: (
        "Audience fit",
        "Estimates target audience fit, readability, and complexity, then suggests improvements for stronger alignment.",
    ),
}

STREAM_ERROR_MARKER = "\n\n[Error: {message}]"


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[CaptureStore] = None,
    pipeline: Optional[CapturePipeline] = None,
    analyst: Optional[Analyst] = None,
) -> Flask:
    """Wire the store, capture pipeline and analyst into a Flask app.

    Collaborators not passed in are built from *settings*.
    """
    settings = settings or Settings()
    store = store or CaptureStore(settings.screengrabs_dir, keep_latest=settings.keep_latest)
    pipeline = pipeline or CapturePipeline(PageRenderer(settings), store, settings)
    analyst = analyst or Analyst(settings)

    app = Flask(__name__)
    app.config["DEBUG"] = settings.debug
    app.config["PORT"] = settings.port

    # ── Errors ─────────────────────────────────────────────────────────────

    @app.errorhandler(FrontPageError)
    def handle_frontpage_error(exc: FrontPageError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error", "details": str(exc)}), 500

    # ── Meta ───────────────────────────────────────────────────────────────

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/services")
    def list_services():
        """Return the capture targets grouped by region."""
        return jsonify({"regions": services.as_dict()})

    @app.route("/api/analysis-types")
    def list_analysis_types():
        return jsonify(
            [
                {"id": kind.value, "label": label, "description": description}
                for kind, (label, description) in ANALYSIS_TYPES.items()
            ]
        )

    # ── Capture ────────────────────────────────────────────────────────────

    @app.route("/api/capture", methods=["POST"])
    def capture():
        """Screenshot ``url`` and store it under ``serviceName``.

        Body: ``{"url": ..., "serviceName": ...}``
        """
        data = _json_body()
        url = _text(data, "url")
        service_name = _text(data, "serviceName")
        if not url or not service_name:
            raise RequestValidationError("URL and Service Name are required")

        artifact = pipeline.capture(CaptureRequest(target_url=url, service_label=service_name))
        return jsonify(
            {
                "success": True,
                "message": "Screenshot captured successfully",
                "filename": artifact.filename,
            }
        )

    # ── Analysis ───────────────────────────────────────────────────────────

    @app.route("/api/analyze", methods=["POST"])
    def analyze():
        """Run one analysis kind against a stored screenshot.

        Body: ``{"filename": ..., "analysisType": ..., "serviceName"?: ...}``
        """
        data = _json_body()
        filename = _text(data, "filename")
        analysis_type = _text(data, "analysisType")
        service_name = _text(data, "serviceName") or "Unknown"
        if not filename or not analysis_type:
            raise RequestValidationError("Filename and analysis type are required")

        try:
            analysis = AnalysisRequest(
                filename=filename, analysis_kind=analysis_type, service_label=service_name
            )
        except ValidationError:
            raise RequestValidationError(f"Unknown analysis type: {analysis_type}") from None

        image = store.load(analysis.filename)
        result = analyst.run(analysis.analysis_kind, image, service_label=analysis.service_label)
        return jsonify(
            {"success": True, "results": {analysis.analysis_kind.value: dump_result(result)}}
        )

    @app.route("/api/ask-frontpage", methods=["POST"])
    def ask_frontpage():
        """Stream an answer to a question about a stored screenshot.

        Body: ``{"filename": ..., "question": ..., "serviceName"?: ...}``

        Validation and lookup errors are ordinary JSON errors.  Once the
        stream has started, a failure is appended inline as an error marker
        and the stream ends.
        """
        data = _json_body()
        filename = _text(data, "filename")
        question = _text(data, "question")
        service_name = _text(data, "serviceName") or "Unknown"
        if not filename or not question:
            raise RequestValidationError("Filename and question are required")

        image = store.load(filename)
        chunks = analyst.ask_stream(image, question, service_label=service_name)

        def generate():
            try:
                for chunk in chunks:
                    yield chunk
            except Exception as exc:
                logger.exception("Follow-up stream error for file=%r", filename)
                message = exc.message if isinstance(exc, FrontPageError) else str(exc)
                yield STREAM_ERROR_MARKER.format(message=message)
            finally:
                close = getattr(chunks, "close", None)
                if close is not None:
                    close()

        return Response(
            stream_with_context(generate()),
            mimetype="text/plain",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    # ── Static ─────────────────────────────────────────────────────────────

    @app.route("/screengrabs/<path:filename>")
    def screengrab(filename: str):
        path = store.resolve(filename)
        return send_from_directory(path.parent, path.name, mimetype="image/webp")

    return app


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    settings = Settings()
    settings.validate()
    app = create_app(settings)
    app.run(debug=settings.debug, host="0.0.0.0", port=settings.port, threaded=True)
