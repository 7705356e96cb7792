"""
Tests for frontpage/store.py

Every test uses its own tmp_path directory; a fake clock makes filenames
deterministic.

Run with: pytest tests/test_store.py
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from frontpage.errors import ArtifactNotFoundError
from frontpage.store import CaptureStore, format_timestamp, safe_label


class FakeClock:
    """Returns 2024-01-01 12:00:00 UTC, advancing one minute per call."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(minutes=1)
        return current


@pytest.fixture
def store(tmp_path) -> CaptureStore:
    return CaptureStore(tmp_path / "Screengrabs", clock=FakeClock())


def stored_names(store: CaptureStore) -> list[str]:
    return sorted(p.name for p in store.directory.iterdir())


class TestNaming:
    def test_timestamp_is_colon_free_and_sortable(self):
        moment = datetime(2024, 1, 1, 12, 0, 0)
        assert format_timestamp(moment) == "2024-01-01_12-00-00"

    def test_safe_label_keeps_simple_names(self):
        assert safe_label("Mundo") == "Mundo"

    def test_safe_label_replaces_unsafe_characters(self):
        assert safe_label("Asia (East)/Thai") == "Asia-East-Thai"

    def test_safe_label_never_empty(self):
        assert safe_label("../") == "capture"

    def test_filename_from_label_and_timestamp(self, store):
        artifact = store.persist(b"img", "Mundo")
        assert artifact.filename == "Mundo_2024-01-01_12-00-00.webp"
        assert artifact.filepath.read_bytes() == b"img"
        assert artifact.created_at == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestRetention:
    def test_sequential_captures_leave_only_the_latest(self, store):
        artifacts = [store.persist(f"img{i}".encode(), label) for i, label in
                     enumerate(["Mundo", "Hausa", "Mundo", "Thai"])]

        assert stored_names(store) == [artifacts[-1].filename]
        assert (store.directory / artifacts[-1].filename).read_bytes() == b"img3"

    def test_unrelated_files_are_also_removed(self, store):
        (store.directory / "notes.txt").write_text("old")
        artifact = store.persist(b"img", "Mundo")
        assert stored_names(store) == [artifact.filename]

    def test_keep_latest_two(self, tmp_path):
        store = CaptureStore(tmp_path, keep_latest=2, clock=FakeClock())
        names = [store.persist(b"x", "Mundo").filename for _ in range(4)]
        assert stored_names(store) == sorted(names[-2:])

    def test_keep_latest_must_be_positive(self, tmp_path):
        with pytest.raises(ValueError):
            CaptureStore(tmp_path, keep_latest=0)

    def test_list_artifacts_newest_first(self, tmp_path):
        store = CaptureStore(tmp_path, keep_latest=3, clock=FakeClock())
        names = [store.persist(b"x", "Mundo").filename for _ in range(3)]
        assert [p.name for p in store.list_artifacts()] == list(reversed(names))

    def test_list_artifacts_empty_store(self, store):
        assert store.list_artifacts() == []


class TestLoad:
    def test_load_returns_bytes_and_media_type(self, store):
        artifact = store.persist(b"webp-data", "Mundo")
        image = store.load(artifact.filename)
        assert image.data == b"webp-data"
        assert image.media_type == "image/webp"
        assert image.filename == artifact.filename

    def test_superseded_artifact_is_not_found(self, store):
        old = store.persist(b"old", "Mundo")
        store.persist(b"new", "Mundo")
        with pytest.raises(ArtifactNotFoundError):
            store.load(old.filename)

    def test_unknown_file_is_not_found(self, store):
        with pytest.raises(ArtifactNotFoundError):
            store.load("Mundo_1999-01-01_00-00-00.webp")

    @pytest.mark.parametrize("name", ["../secret.webp", "sub/file.webp", "", ".hidden.webp.tmp"])
    def test_paths_outside_store_rejected(self, store, name):
        with pytest.raises(ArtifactNotFoundError):
            store.resolve(name)

    def test_not_found_error_has_404_status(self, store):
        with pytest.raises(ArtifactNotFoundError) as info:
            store.resolve("missing.webp")
        assert info.value.status_code == 404
