"""Screenshot analysis using the Claude API.

One method per analysis kind, each pairing a prompt template from
``frontpage.prompts`` with a strict output shape:

===================  ==========================  =====================
kind                 method                      result
===================  ==========================  =====================
topFiveSummary       ``top_five_summary``        ``str``
updatesFrequency     ``updates_frequency``       ``UpdateFrequency``
sentimentAnalysis    ``sentiment``               ``list[SentimentEntry]``
coverageAnalysis     ``coverage``                ``CoverageReport``
socialMediaRewrite   ``social_media_rewrite``    ``list[SocialRewrite]``
audienceFitAnalysis  ``audience_fit``            ``AudienceFitReport``
===================  ==========================  =====================

``ask_stream()`` answers a free-form question and yields the answer text
chunk by chunk as the model produces it.

The Anthropic client is lazy-initialised so that the class can be
instantiated in tests without requiring a live API key.  No call is ever
retried: every request either succeeds once or fails.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

import anthropic
import httpx

from frontpage import prompts
from frontpage.decoding import parse_response
from frontpage.errors import ExternalServiceError, ModelResponseShapeError, RequestValidationError
from frontpage.models import (
    AnalysisKind,
    AnalysisResult,
    ArtifactImage,
    AudienceFitReport,
    CoverageReport,
    SentimentEntry,
    SocialRewrite,
    UpdateFrequency,
)

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

#: Number of articles the summary and social rewrite prompts ask for.
EXPECTED_ARTICLES = 5

def _message_content(image: ArtifactImage, prompt: str) -> list[dict]:
    return [
        {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": image.media_type,
                "data": base64.b64encode(image.data).decode("ascii"),
            },
        },
        {"type": "text", "text": prompt},
    ]


class Analyst:
    """Runs vision analyses of front-page screenshots through the Claude API."""

    def __init__(self, settings: Settings) -> None:
        """Initialise the analyst.

        Args:
            settings: Application configuration.
        """
        self.settings = settings
        self._client: object = None  # Lazy-initialised anthropic.Anthropic

    @property
    def client(self) -> anthropic.Anthropic:
        """Lazy-initialise and return the Anthropic SDK client."""
        if self._client is None:
            self._client = anthropic.Anthropic(
                api_key=self.settings.anthropic_api_key,
                max_retries=0,
            )
        return self._client

    # ── Model call ─────────────────────────────────────────────────────────

    def _complete(self, kind: str, image: ArtifactImage, prompt: str, max_tokens: int = 2048) -> str:
        """Send one image + prompt and return the model's text output."""
        logger.info("Running %s on %s (%d bytes)", kind, image.filename, len(image.data))
        try:
            response = self.client.messages.create(
                model=self.settings.analysis_model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": _message_content(image, prompt)}],
            )
        except anthropic.APIError as exc:
            logger.error("Model call for %s failed: %s", kind, exc)
            raise ExternalServiceError(f"{kind} analysis failed", str(exc)) from exc

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    # ── Analyses ───────────────────────────────────────────────────────────

    def top_five_summary(self, image: ArtifactImage) -> str:
        """Summarise the five layout-positioned lead articles, in English.

        The text follows the ``**Article N:**`` marker structure from the
        prompt; it is returned as-is rather than JSON-decoded.

        Raises:
            ModelResponseShapeError: If the model returns no text.
            ExternalServiceError: On API failures.
        """
        kind = AnalysisKind.TOP_FIVE_SUMMARY.value
        text = self._complete(kind, image, prompts.TOP_FIVE_SUMMARY).strip()
        if not text:
            raise ModelResponseShapeError(kind, "empty response")
        markers = sum(1 for n in range(1, EXPECTED_ARTICLES + 1) if f"Article {n}:" in text)
        if markers != EXPECTED_ARTICLES:
            logger.warning("%s returned %d of %d article markers", kind, markers, EXPECTED_ARTICLES)
        return text

    def updates_frequency(self, image: ArtifactImage) -> UpdateFrequency:
        """Bucket visible article timestamps by recency."""
        kind = AnalysisKind.UPDATES_FREQUENCY.value
        text = self._complete(kind, image, prompts.UPDATES_FREQUENCY, max_tokens=512)
        return parse_response(kind, text, UpdateFrequency)

    def sentiment(self, image: ArtifactImage) -> list[SentimentEntry]:
        """Classify and score the sentiment of every visible headline."""
        kind = AnalysisKind.SENTIMENT_ANALYSIS.value
        text = self._complete(kind, image, prompts.SENTIMENT, max_tokens=4096)
        return parse_response(kind, text, list[SentimentEntry])

    def coverage(self, image: ArtifactImage) -> CoverageReport:
        """Compare covered themes against what is likely trending in the market."""
        kind = AnalysisKind.COVERAGE_ANALYSIS.value
        text = self._complete(kind, image, prompts.COVERAGE)
        return parse_response(kind, text, CoverageReport)

    def social_media_rewrite(self, image: ArtifactImage, target_language: str = "Unknown") -> list[SocialRewrite]:
        """Rewrite the five most prominent headlines for social media.

        A list of a different length is accepted, and logged, rather than
        rejected.

        Args:
            image: The screenshot to analyse.
            target_language: Language of the news service; the second
                rewrite of each headline is produced in it.
        """
        kind = AnalysisKind.SOCIAL_MEDIA_REWRITE.value
        text = self._complete(kind, image, prompts.social_media_rewrite(target_language))
        rewrites = parse_response(kind, text, list[SocialRewrite])
        if len(rewrites) != EXPECTED_ARTICLES:
            logger.warning(
                "%s returned %d entries, expected %d", kind, len(rewrites), EXPECTED_ARTICLES
            )
        return rewrites

    def audience_fit(self, image: ArtifactImage) -> AudienceFitReport:
        """Estimate the primary audience and how well the page serves it."""
        kind = AnalysisKind.AUDIENCE_FIT_ANALYSIS.value
        text = self._complete(kind, image, prompts.AUDIENCE_FIT)
        return parse_response(kind, text, AudienceFitReport)

    def run(self, kind: AnalysisKind, image: ArtifactImage, service_label: str = "Unknown") -> AnalysisResult:
        """Dispatch to the method implementing *kind*."""
        if kind is AnalysisKind.TOP_FIVE_SUMMARY:
            return self.top_five_summary(image)
        if kind is AnalysisKind.UPDATES_FREQUENCY:
            return self.updates_frequency(image)
        if kind is AnalysisKind.SENTIMENT_ANALYSIS:
            return self.sentiment(image)
        if kind is AnalysisKind.COVERAGE_ANALYSIS:
            return self.coverage(image)
        if kind is AnalysisKind.SOCIAL_MEDIA_REWRITE:
            return self.social_media_rewrite(image, target_language=service_label)
        if kind is AnalysisKind.AUDIENCE_FIT_ANALYSIS:
            return self.audience_fit(image)
        raise RequestValidationError(f"Unsupported analysis type: {kind}")

    # ── Follow-up questions ────────────────────────────────────────────────

    def ask_stream(self, image: ArtifactImage, question: str, service_label: str = "Unknown") -> Iterator[str]:
        """Answer a question about the screenshot, streaming the answer.

        Arguments are validated eagerly; the returned iterator is lazy and
        single-use, and opens the model stream on its first ``next()``.

        Args:
            image: The screenshot the question is about.
            question: Free-form user question.
            service_label: News service name, given to the model as context.

        Returns:
            An iterator of text chunks whose concatenation is the full answer.

        Raises:
            RequestValidationError: If the question is blank.
        """
        question = question.strip()
        if not question:
            raise RequestValidationError("Question must not be empty.")
        prompt = prompts.ask_front_page(question, service_label)
        return self._stream_answer(image, prompt)

    def _stream_answer(self, image: ArtifactImage, prompt: str) -> Iterator[str]:
        # The read timeout bounds the gap between consecutive chunks.
        client = self.client.with_options(timeout=self.settings.stream_idle_timeout)
        chunks = 0
        try:
            with client.messages.stream(
                model=self.settings.analysis_model,
                max_tokens=1024,
                messages=[{"role": "user", "content": _message_content(image, prompt)}],
            ) as stream:
                for text in stream.text_stream:
                    if text:
                        chunks += 1
                        yield text
        except (anthropic.APIError, httpx.TimeoutException) as exc:
            logger.error("Follow-up stream failed after %d chunks: %s", chunks, exc)
            raise ExternalServiceError("Follow-up question failed", str(exc)) from exc
        logger.info("Follow-up stream for %s finished after %d chunks", image.filename, chunks)
