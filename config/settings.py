"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.validate()   # raises ValueError if ANTHROPIC_API_KEY is missing
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them by patching ``os.environ``.
    """

    # ── API Keys ────────────────────────────────────────────────────────────
    anthropic_api_key: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", "")
    )

    # ── Flask ───────────────────────────────────────────────────────────────
    debug: bool = field(
        default_factory=lambda: os.environ.get("FLASK_DEBUG", "0") == "1"
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "5000"))
    )

    # ── Browser ─────────────────────────────────────────────────────────────
    #: Optional Chromium binary; empty means Playwright's bundled build.
    browser_executable_path: str = field(
        default_factory=lambda: os.environ.get("BROWSER_EXECUTABLE_PATH", "")
    )
    navigation_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("NAVIGATION_TIMEOUT_MS", "20000"))
    )
    capture_timeout: float = field(
        default_factory=lambda: float(os.environ.get("CAPTURE_TIMEOUT_SECONDS", "120"))
    )
    #: Settle time after navigation before cleanup starts.
    render_wait_ms: int = 1000
    #: Delay before the second ad-removal pass.
    ad_second_pass_delay_ms: int = 1500

    # ── Capture store ───────────────────────────────────────────────────────
    screengrabs_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SCREENGRABS_DIR", str(PROJECT_ROOT / "Screengrabs"))
        )
    )
    keep_latest: int = field(
        default_factory=lambda: int(os.environ.get("KEEP_LATEST_CAPTURES", "1"))
    )
    image_quality: int = field(
        default_factory=lambda: int(os.environ.get("IMAGE_QUALITY", "80"))
    )
    #: The model API rejects images longer than this on either side.
    max_image_dimension: int = 8000

    # ── AI Models ───────────────────────────────────────────────────────────
    #: Vision-capable model used for every analysis kind and the Q&A stream.
    analysis_model: str = "claude-haiku-4-5"
    stream_idle_timeout: float = field(
        default_factory=lambda: float(os.environ.get("STREAM_IDLE_TIMEOUT_SECONDS", "60"))
    )

    def validate(self) -> None:
        """Raise ``ValueError`` if any required setting is missing or invalid."""
        if not self.anthropic_api_key:
            raise ValueError(
                "ANTHROPIC_API_KEY environment variable is not set. "
                "Copy .env.example to .env and add your key."
            )
        if self.keep_latest < 1:
            raise ValueError("KEEP_LATEST_CAPTURES must be at least 1.")
        if not 1 <= self.image_quality <= 100:
            raise ValueError("IMAGE_QUALITY must be between 1 and 100.")
