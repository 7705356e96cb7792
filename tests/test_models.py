"""Tests for frontpage/models.py: request models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from frontpage.models import AnalysisKind, AnalysisRequest


class TestAnalysisRequest:
    def test_wire_identifier_becomes_kind(self):
        req = AnalysisRequest(filename="Mundo_2024-01-01_12-00-00.webp", analysis_kind="updatesFrequency")
        assert req.analysis_kind is AnalysisKind.UPDATES_FREQUENCY
        assert req.service_label == "Unknown"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            AnalysisRequest(filename="x.webp", analysis_kind="horoscope")
