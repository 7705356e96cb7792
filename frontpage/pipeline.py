"""Capture pipeline: renderer → encoder → store, under a ceiling timer.

Flow
────
received → browser-launching → navigating → rendering → banner/ad cleanup
         → encoding → stored → responded

The work runs on a worker thread.  The calling thread waits at most
``capture_timeout`` seconds; when the ceiling fires it raises
``CaptureTimeoutError`` and sets the request's cancel event.  The worker
checks that event at every stage boundary, so a timed-out capture closes
its browser at the next boundary and never writes to the store.
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING

from frontpage.encoder import encode_webp
from frontpage.errors import CaptureCancelledError, CaptureTimeoutError, RequestValidationError
from frontpage.models import CaptureArtifact, CaptureRequest
from frontpage.renderer import CaptureStage

if TYPE_CHECKING:
    from config.settings import Settings
    from frontpage.renderer import PageRenderer
    from frontpage.store import CaptureStore

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """Default a bare host to https and reject non-http(s) schemes.

    Examples:
        >>> normalize_url("www.bbc.com/mundo")
        'https://www.bbc.com/mundo'
    """
    url = url.strip()
    if "://" not in url:
        url = "https://" + url
    if not url.startswith(("http://", "https://")):
        raise RequestValidationError("URL must use http or https", url)
    return url


class CapturePipeline:
    """Runs capture requests end to end with a per-request time ceiling."""

    def __init__(
        self,
        renderer: PageRenderer,
        store: CaptureStore,
        settings: Settings,
        max_workers: int = 2,
    ) -> None:
        self.renderer = renderer
        self.store = store
        self.settings = settings
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="capture")

    def capture(self, request: CaptureRequest) -> CaptureArtifact:
        """Capture, encode and store one front page.

        Args:
            request: Target URL and service label.

        Returns:
            The stored artifact.

        Raises:
            RequestValidationError: If the URL is not an http(s) URL.
            CaptureTimeoutError: If the ceiling timer fires first.
            RenderInfrastructureError: If the browser cannot be driven.
        """
        request = request.model_copy(update={"target_url": normalize_url(request.target_url)})
        request_id = uuid.uuid4().hex[:8]
        cancel = threading.Event()
        logger.info(
            "[%s] stage=%s service=%s url=%s",
            request_id, CaptureStage.RECEIVED.value, request.service_label, request.target_url,
        )

        future = self._executor.submit(self._run, request_id, request, cancel)
        try:
            artifact = future.result(timeout=self.settings.capture_timeout)
        except FutureTimeoutError as exc:
            cancel.set()
            if future.cancel():
                logger.info("[%s] capture cancelled before it started", request_id)
            future.add_done_callback(lambda f: self._log_abandoned(request_id, f))
            logger.error(
                "[%s] TIMEOUT: capture exceeded %.0f seconds",
                request_id, self.settings.capture_timeout,
            )
            raise CaptureTimeoutError(
                f"Screenshot capture timed out after {self.settings.capture_timeout:.0f} seconds"
            ) from exc

        logger.info("[%s] stage=%s file=%s", request_id, CaptureStage.RESPONDED.value, artifact.filename)
        return artifact

    def _run(self, request_id: str, request: CaptureRequest, cancel: threading.Event) -> CaptureArtifact:
        def on_stage(stage: CaptureStage) -> None:
            logger.info("[%s] stage=%s", request_id, stage.value)

        self._check(cancel)
        raw = self.renderer.capture(request.target_url, cancel=cancel, on_stage=on_stage)

        self._check(cancel)
        on_stage(CaptureStage.ENCODING)
        encoded = encode_webp(
            raw,
            quality=self.settings.image_quality,
            max_dimension=self.settings.max_image_dimension,
        )

        self._check(cancel)
        artifact = self.store.persist(encoded, request.service_label)
        on_stage(CaptureStage.STORED)
        return artifact

    @staticmethod
    def _check(cancel: threading.Event) -> None:
        if cancel.is_set():
            raise CaptureCancelledError("Capture cancelled after timeout")

    @staticmethod
    def _log_abandoned(request_id: str, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            logger.warning("[%s] capture finished after timeout; result discarded", request_id)
        else:
            logger.info("[%s] abandoned capture ended: %s", request_id, exc)

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
