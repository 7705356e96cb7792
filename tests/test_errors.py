"""Tests for frontpage/errors.py"""

from frontpage.errors import ArtifactNotFoundError, FrontPageError, ModelResponseShapeError


class TestFrontPageError:
    def test_str_includes_detail(self):
        exc = ModelResponseShapeError("updatesFrequency", "older: Field required")
        assert str(exc) == "Failed to parse updatesFrequency response from model: older: Field required"

    def test_str_without_detail(self):
        assert str(FrontPageError("Internal failure")) == "Internal failure"

    def test_to_dict_keeps_message_and_detail_apart(self):
        exc = ModelResponseShapeError("updatesFrequency", "older: Field required")
        assert exc.to_dict() == {
            "error": "Failed to parse updatesFrequency response from model",
            "details": "older: Field required",
        }

    def test_to_dict_omits_missing_detail(self):
        assert ArtifactNotFoundError("Screenshot file not found").to_dict() == {
            "error": "Screenshot file not found"
        }
        assert ArtifactNotFoundError.status_code == 404
