"""
On-disk store for captured screenshots.

Layout
──────
<directory>/<label>_<YYYY-MM-DD_HH-MM-SS>.webp

Retention keeps the newest ``keep_latest`` files (1 by default): right after
a successful write every older file in the directory is deleted.  Writes,
retention and reads all happen under one lock, so ``load()`` either returns
the complete bytes of an artifact or raises ``ArtifactNotFoundError``; it
never observes a file mid-deletion.
"""

from __future__ import annotations

import logging
import os
import re
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from frontpage.encoder import EXTENSION, MEDIA_TYPE
from frontpage.errors import ArtifactNotFoundError
from frontpage.models import ArtifactImage, CaptureArtifact

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

_UNSAFE_LABEL_RE = re.compile(r"[^A-Za-z0-9_-]+")


def format_timestamp(moment: datetime) -> str:
    """Format *moment* as a sortable, colon-free string safe for filenames."""
    return moment.strftime(TIMESTAMP_FORMAT)


def safe_label(label: str) -> str:
    """Reduce a service label to characters safe in a filename."""
    cleaned = _UNSAFE_LABEL_RE.sub("-", label.strip()).strip("-")
    return cleaned or "capture"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CaptureStore:
    """Directory of screenshots with keep-latest-N retention."""

    def __init__(
        self,
        directory: Path,
        keep_latest: int = 1,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if keep_latest < 1:
            raise ValueError("keep_latest must be at least 1")
        self.directory = Path(directory)
        self.keep_latest = keep_latest
        self._clock = clock
        self._lock = threading.RLock()
        self.directory.mkdir(parents=True, exist_ok=True)

    # ── Writes ─────────────────────────────────────────────────────────────

    def persist(self, image_bytes: bytes, service_label: str) -> CaptureArtifact:
        """Write an encoded screenshot and apply the retention policy.

        Args:
            image_bytes: WebP-encoded screenshot.
            service_label: Name of the captured service, used in the filename.

        Returns:
            The descriptor of the newly stored artifact.
        """
        with self._lock:
            created_at = self._clock()
            filename = f"{safe_label(service_label)}_{format_timestamp(created_at)}{EXTENSION}"
            filepath = self.directory / filename

            tmp_path = self.directory / f".{filename}.tmp"
            tmp_path.write_bytes(image_bytes)
            os.replace(tmp_path, filepath)
            logger.info("Stored capture %s (%d bytes)", filename, len(image_bytes))

            self._apply_retention(keep=filepath)

        return CaptureArtifact(filename=filename, filepath=filepath, created_at=created_at)

    def _apply_retention(self, keep: Path) -> None:
        others = [p for p in self.list_artifacts() if p != keep]
        for stale in others[self.keep_latest - 1:]:
            try:
                stale.unlink()
                logger.info("Deleted superseded capture %s", stale.name)
            except FileNotFoundError:
                pass

    # ── Reads ──────────────────────────────────────────────────────────────

    def resolve(self, filename: str) -> Path:
        """Return the path of a stored artifact.

        Raises:
            ArtifactNotFoundError: If *filename* is not a plain file name in
                the store or no longer exists.
        """
        if not filename or Path(filename).name != filename or filename.startswith("."):
            raise ArtifactNotFoundError("Screenshot file not found", filename)
        path = self.directory / filename
        if not path.is_file():
            raise ArtifactNotFoundError("Screenshot file not found", filename)
        return path

    def load(self, filename: str) -> ArtifactImage:
        """Read a stored artifact's bytes while holding the store lock."""
        with self._lock:
            path = self.resolve(filename)
            data = path.read_bytes()
        return ArtifactImage(filename=filename, data=data, media_type=MEDIA_TYPE)

    def list_artifacts(self) -> list[Path]:
        """Return stored artifacts, newest first."""
        with self._lock:
            files = [
                p for p in self.directory.iterdir()
                if p.is_file() and not p.name.startswith(".")
            ]
            return sorted(files, key=lambda p: (p.stat().st_mtime_ns, p.name), reverse=True)
