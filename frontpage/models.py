"""
Pydantic models shared across the front-page tracker.

Analysis result models use snake_case attributes and validate/serialise
with the camelCase keys the model is instructed to produce (and the
dashboard consumes).  Numeric and string fields are strict: ``"5"`` is not
an integer and ``true`` is not a score.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, StringConstraints(strict=True, min_length=1)]
StrictStr = Annotated[str, Field(strict=True)]
Count = Annotated[int, Field(strict=True, ge=0)]


class AnalysisKind(str, Enum):
    """The six structured analyses, keyed by their wire identifiers."""

    TOP_FIVE_SUMMARY = "topFiveSummary"
    SOCIAL_MEDIA_REWRITE = "socialMediaRewrite"
    UPDATES_FREQUENCY = "updatesFrequency"
    SENTIMENT_ANALYSIS = "sentimentAnalysis"
    COVERAGE_ANALYSIS = "coverageAnalysis"
    AUDIENCE_FIT_ANALYSIS = "audienceFitAnalysis"


# ── Requests and artifacts ─────────────────────────────────────────────────


class CaptureRequest(BaseModel):
    """A user's request to screenshot one front page."""

    target_url: str
    service_label: str


class CaptureArtifact(BaseModel):
    """A screenshot persisted in the capture store."""

    filename: str
    filepath: Path
    created_at: datetime


class AnalysisRequest(BaseModel):
    """A request to run one analysis kind against a stored artifact."""

    filename: str
    analysis_kind: AnalysisKind
    service_label: str = "Unknown"


@dataclass(frozen=True)
class ArtifactImage:
    """Artifact bytes loaded from the store, ready for model submission."""

    filename: str
    data: bytes
    media_type: str


# ── Analysis results ───────────────────────────────────────────────────────


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UpdateFrequency(_CamelModel):
    """Counts of timestamped articles per recency bucket."""

    under_one_hour: Count
    under_four_hours: Count
    today: Count
    yesterday: Count
    older: Count

    @property
    def total(self) -> int:
        return (
            self.under_one_hour
            + self.under_four_hours
            + self.today
            + self.yesterday
            + self.older
        )


class SentimentEntry(_CamelModel):
    """Sentiment of a single visible headline."""

    headline: NonEmptyStr
    sentiment: Literal["Positive", "Negative", "Neutral", "Mixed"]
    score: Annotated[int, Field(strict=True, ge=1, le=10)]


class CoverageReport(_CamelModel):
    """Themes covered on the page versus what the market is talking about."""

    main_themes: list[StrictStr]
    coverage_strengths: list[StrictStr]
    coverage_gaps: list[StrictStr]
    trending_missing: list[StrictStr]
    overall_assessment: NonEmptyStr


class SocialRewrite(_CamelModel):
    """A prominent headline rewritten for social media in two languages."""

    original_headline: NonEmptyStr
    target_language: NonEmptyStr
    social_media_english: NonEmptyStr
    social_media_target: NonEmptyStr


class AudienceFitReport(_CamelModel):
    """How well the visible content suits its inferred audience."""

    primary_audience: NonEmptyStr
    readability_level: Literal["Beginner", "Intermediate", "Advanced"]
    complexity_level: Literal["Low", "Moderate", "High"]
    audience_fit_score: Annotated[int, Field(strict=True, ge=0, le=100)]
    fit_strengths: list[StrictStr]
    fit_gaps: list[StrictStr]
    recommendations: list[StrictStr]
    overall_assessment: NonEmptyStr


AnalysisResult = Union[
    str,
    UpdateFrequency,
    list[SentimentEntry],
    CoverageReport,
    list[SocialRewrite],
    AudienceFitReport,
]


def dump_result(result: AnalysisResult) -> object:
    """Convert an analysis result into JSON-ready data with camelCase keys."""
    if isinstance(result, BaseModel):
        return result.model_dump(by_alias=True)
    if isinstance(result, list):
        return [item.model_dump(by_alias=True) for item in result]
    return result
