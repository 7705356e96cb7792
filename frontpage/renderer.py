"""Headless-browser rendering of news front pages.

Responsibilities:
- Launch an isolated Chromium context with a pinned user agent, viewport,
  locale and timezone so captures of the same page are comparable
- Abort requests to known advertising/tracking hosts before they load
- Navigate best-effort: a navigation timeout or error is logged and the
  capture continues against whatever the page managed to render
- Dismiss consent banners and strip ad placeholders (``frontpage.cleanup``)
- Return a full-page PNG screenshot

Only infrastructure failures (browser launch, context/page creation, the
screenshot itself) raise ``RenderInfrastructureError``.  The browser is
closed on every exit path.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from frontpage.cleanup import dismiss_consent, remove_ads
from frontpage.errors import CaptureCancelledError, RenderInfrastructureError

if TYPE_CHECKING:
    from playwright.sync_api import Page, Route

    from config.settings import Settings

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
VIEWPORT = {"width": 1024, "height": 768}
LOCALE = "en-GB"
TIMEZONE = "Europe/London"

#: Requests to these hosts (and their subdomains) are aborted.
BLOCKED_DOMAINS: frozenset[str] = frozenset([
    "doubleclick.net", "googlesyndication.com", "googleadservices.com",
    "googletagservices.com", "googletagmanager.com", "google-analytics.com",
    "adservice.google.com", "amazon-adsystem.com", "adnxs.com", "adsrvr.org",
    "criteo.com", "criteo.net", "taboola.com", "outbrain.com", "teads.tv",
    "rubiconproject.com", "pubmatic.com", "openx.net", "casalemedia.com",
    "indexww.com", "smartadserver.com", "3lift.com", "sharethrough.com",
    "bidswitch.net", "yieldmo.com", "moatads.com", "adsafeprotected.com",
    "doubleverify.com", "scorecardresearch.com", "quantserve.com",
    "chartbeat.com", "chartbeat.net", "hotjar.com", "permutive.com",
    "connect.facebook.net",
])


class CaptureStage(str, Enum):
    """States a capture request moves through, in order."""

    RECEIVED = "received"
    BROWSER_LAUNCHING = "browser-launching"
    NAVIGATING = "navigating"
    RENDERING = "rendering"
    CLEANUP = "banner/ad cleanup"
    ENCODING = "encoding"
    STORED = "stored"
    RESPONDED = "responded"


StageCallback = Callable[[CaptureStage], None]


def is_blocked_host(host: str, domains: frozenset[str] = BLOCKED_DOMAINS) -> bool:
    """Return True if *host* is one of *domains* or a subdomain of one.

    Examples:
        >>> is_blocked_host("securepubads.g.doubleclick.net")
        True
        >>> is_blocked_host("www.bbc.com")
        False
    """
    host = (host or "").lower().rstrip(".")
    if not host:
        return False
    parts = host.split(".")
    return any(".".join(parts[i:]) in domains for i in range(len(parts)))


def _check_cancelled(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise CaptureCancelledError("Capture cancelled after timeout")


class PageRenderer:
    """Captures full-page screenshots with Playwright's synchronous API.

    Each ``capture()`` call owns its own Playwright instance and browser, so
    a renderer can be shared across worker threads.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def capture(
        self,
        url: str,
        cancel: Optional[threading.Event] = None,
        on_stage: Optional[StageCallback] = None,
    ) -> bytes:
        """Render *url* and return a full-page PNG screenshot.

        Args:
            url: Page to capture.
            cancel: Set by the caller's ceiling timer; checked between stages.
            on_stage: Called with each ``CaptureStage`` as it begins.

        Returns:
            PNG bytes of the whole page.

        Raises:
            RenderInfrastructureError: If the browser cannot be launched or driven.
            CaptureCancelledError: If *cancel* was set before the capture finished.
        """
        notify = on_stage or (lambda stage: None)

        _check_cancelled(cancel)
        notify(CaptureStage.BROWSER_LAUNCHING)
        with sync_playwright() as p:
            try:
                browser = p.chromium.launch(
                    headless=True,
                    executable_path=self.settings.browser_executable_path or None,
                )
            except PlaywrightError as exc:
                logger.error("Browser launch failed: %s", exc)
                raise RenderInfrastructureError("Failed to launch browser", str(exc)) from exc

            try:
                return self._capture_page(browser, url, cancel, notify)
            except PlaywrightError as exc:
                logger.error("Capture of %s failed: %s", url, exc)
                raise RenderInfrastructureError("Failed to capture screenshot", str(exc)) from exc
            finally:
                browser.close()
                logger.info("Browser closed")

    def _capture_page(self, browser, url: str, cancel, notify: StageCallback) -> bytes:
        context = browser.new_context(
            user_agent=USER_AGENT,
            viewport=VIEWPORT,
            locale=LOCALE,
            timezone_id=TIMEZONE,
        )
        blocked = 0

        def block_ads(route: Route) -> None:
            nonlocal blocked
            if is_blocked_host(urlparse(route.request.url).hostname or ""):
                blocked += 1
                route.abort("blockedbyclient")
            else:
                route.continue_()

        context.route("**/*", block_ads)
        page = context.new_page()

        _check_cancelled(cancel)
        notify(CaptureStage.NAVIGATING)
        self._navigate(page, url)

        _check_cancelled(cancel)
        notify(CaptureStage.RENDERING)
        page.wait_for_timeout(self.settings.render_wait_ms)

        _check_cancelled(cancel)
        notify(CaptureStage.CLEANUP)
        dismiss_consent(page)
        remove_ads(page, self.settings.ad_second_pass_delay_ms)
        logger.info("Blocked %d ad/tracker request(s) for %s", blocked, url)

        _check_cancelled(cancel)
        return page.screenshot(full_page=True, type="png")

    def _navigate(self, page: Page, url: str) -> None:
        """Navigate to *url*; failures are logged and the capture proceeds."""
        try:
            page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.settings.navigation_timeout_ms,
            )
            logger.info("Navigation to %s completed", url)
        except PlaywrightError as exc:
            logger.warning("Navigation timeout/error for %s, proceeding: %s", url, exc)
