"""Consent-banner dismissal and advertisement removal for captured pages.

Each heuristic is a named ``CleanupStrategy`` returning a tagged
``StrategyOutcome`` (applied / not_found / failed).  Strategies are
best-effort: a Playwright error inside one becomes a ``failed`` outcome and
never propagates to the capture.

Consent strategies escalate in order and stop at the first one applied:

1. ``click-accept``: real click on a known accept button
2. ``script-click-accept``: ``element.click()`` from injected script
3. ``hide-banners``: force-hide anything that looks like a banner

Ad removal runs the same DOM pass twice, the second after a short delay to
catch placeholders injected late.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from playwright.sync_api import Error as PlaywrightError

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)


# ── Outcomes ───────────────────────────────────────────────────────────────


class Status(str, Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class StrategyOutcome:
    """What a single cleanup strategy did to the page."""

    strategy: str
    status: Status
    detail: str = ""

    @property
    def applied(self) -> bool:
        return self.status is Status.APPLIED


@dataclass(frozen=True)
class CleanupStrategy:
    name: str
    apply: Callable[["Page"], tuple[Status, str]]


def _first_line(exc: Exception) -> str:
    text = str(exc)
    return text.splitlines()[0] if text else repr(exc)


def run_strategy(strategy: CleanupStrategy, page: Page) -> StrategyOutcome:
    """Run one strategy, converting Playwright errors into a failed outcome."""
    try:
        status, detail = strategy.apply(page)
    except PlaywrightError as exc:
        status, detail = Status.FAILED, _first_line(exc)
    outcome = StrategyOutcome(strategy=strategy.name, status=status, detail=detail)
    log = logger.warning if status is Status.FAILED else logger.info
    log("Cleanup %s: %s %s", outcome.strategy, outcome.status.value, outcome.detail)
    return outcome


# ── Consent banners ────────────────────────────────────────────────────────

#: Accept buttons of the consent platforms commonly seen on news sites.
CONSENT_ACCEPT_SELECTORS: tuple[str, ...] = (
    "#bbccookies-continue-button",
    "button[data-testid='accept-button']",
    "#onetrust-accept-btn-handler",
    "#didomi-notice-agree-button",
    "button.fc-cta-consent",
    "button#accept-choices",
    ".qc-cmp2-summary-buttons button[mode='primary']",
    "button[aria-label*='Accept']",
    "button[aria-label*='accept']",
)

#: Containers that look like cookie/consent banners.
CONSENT_BANNER_SELECTOR = (
    '[id*="cookie"], [class*="cookie"], [id*="consent"], [class*="consent"], '
    '[id*="gdpr"], [class*="gdpr"], [id^="sp_message_container"]'
)

_SCRIPT_CLICK_JS = """(selectors) => {
    for (const sel of selectors) {
        const el = document.querySelector(sel);
        if (el) { el.click(); return sel; }
    }
    const buttons = document.querySelectorAll(
        '[class*="cookie"] button, [id*="cookie"] button, ' +
        '[class*="consent"] button, [id*="consent"] button, [class*="gdpr"] button'
    );
    for (const btn of buttons) {
        if ((btn.innerText || '').match(/accept|agree|allow|continue|got it|ok/i)) {
            btn.click();
            return 'text:' + btn.innerText.trim().slice(0, 40);
        }
    }
    return null;
}"""

_HIDE_BANNERS_JS = """(selector) => {
    let hidden = 0;
    document.querySelectorAll(selector).forEach(el => {
        if (el === document.body || el === document.documentElement) return;
        el.style.setProperty('display', 'none', 'important');
        hidden++;
    });
    if (hidden) {
        for (const el of [document.documentElement, document.body]) {
            if (el) el.style.setProperty('overflow', 'visible', 'important');
        }
    }
    return hidden;
}"""


def _click_accept(page: Page) -> tuple[Status, str]:
    last_error = ""
    for selector in CONSENT_ACCEPT_SELECTORS:
        button = page.locator(selector).first
        if button.count() == 0:
            continue
        try:
            button.click(timeout=2000)
            return Status.APPLIED, selector
        except PlaywrightError as exc:
            last_error = f"{selector}: {_first_line(exc)}"
    if last_error:
        return Status.FAILED, last_error
    return Status.NOT_FOUND, ""


def _script_click_accept(page: Page) -> tuple[Status, str]:
    clicked = page.evaluate(_SCRIPT_CLICK_JS, list(CONSENT_ACCEPT_SELECTORS))
    if clicked:
        return Status.APPLIED, str(clicked)
    return Status.NOT_FOUND, ""


def _hide_banners(page: Page) -> tuple[Status, str]:
    hidden = page.evaluate(_HIDE_BANNERS_JS, CONSENT_BANNER_SELECTOR)
    if hidden:
        return Status.APPLIED, f"{hidden} element(s) hidden"
    return Status.NOT_FOUND, ""


CONSENT_STRATEGIES: tuple[CleanupStrategy, ...] = (
    CleanupStrategy("click-accept", _click_accept),
    CleanupStrategy("script-click-accept", _script_click_accept),
    CleanupStrategy("hide-banners", _hide_banners),
)


def dismiss_consent(
    page: Page,
    strategies: tuple[CleanupStrategy, ...] = CONSENT_STRATEGIES,
) -> list[StrategyOutcome]:
    """Try consent strategies in order until one applies.

    Returns:
        The outcome of every strategy that ran, in order.
    """
    outcomes: list[StrategyOutcome] = []
    for strategy in strategies:
        outcome = run_strategy(strategy, page)
        outcomes.append(outcome)
        if outcome.applied:
            break
    return outcomes


# ── Advertisements ─────────────────────────────────────────────────────────

#: Ad slots and placeholders.  Kept specific: news pages are full of class
#: names like ``lead-article`` and ``headline`` that loose ``*="ad"``
#: patterns would match.
AD_SELECTORS: tuple[str, ...] = (
    "ins.adsbygoogle",
    "[id^='google_ads']",
    "[id^='div-gpt-ad']",
    "[id^='ad-']",
    "[id^='ad_']",
    "[class^='ad-']",
    "[class*=' ad-']",
    "[id*='advert']",
    "[class*='advert']",
    "[data-ad-slot]",
    "[data-testid*='advert']",
    "[data-e2e*='advert']",
    "[aria-label='Advertisement']",
    "iframe[src*='doubleclick']",
    "iframe[id^='google_ads_iframe']",
)

_REMOVE_ADS_JS = """(selectors) => {
    const CONTENT = 'img, picture, video, iframe, svg, canvas, a, button, input, select, textarea';
    const targets = new Set();
    for (const sel of selectors) {
        try { document.querySelectorAll(sel).forEach(el => targets.add(el)); } catch (e) {}
    }
    let removed = 0, parents = 0;
    targets.forEach(el => {
        if (!el.isConnected) return;
        const parent = el.parentElement;
        el.remove();
        removed++;
        if (parent && parent !== document.body && parent !== document.documentElement &&
                !parent.querySelector(CONTENT) &&
                (parent.innerText || '').trim().length < 20) {
            parent.remove();
            parents++;
        }
    });
    return {removed, parents};
}"""


def _remove_ads(page: Page) -> tuple[Status, str]:
    result = page.evaluate(_REMOVE_ADS_JS, list(AD_SELECTORS)) or {}
    removed = int(result.get("removed", 0))
    parents = int(result.get("parents", 0))
    if removed:
        return Status.APPLIED, f"{removed} ad(s), {parents} empty container(s)"
    return Status.NOT_FOUND, ""


AD_STRATEGIES: tuple[CleanupStrategy, ...] = (
    CleanupStrategy("remove-ads", _remove_ads),
    CleanupStrategy("remove-late-ads", _remove_ads),
)


def remove_ads(page: Page, second_pass_delay_ms: int = 1500) -> list[StrategyOutcome]:
    """Run both ad-removal passes with a pause in between."""
    first, late = AD_STRATEGIES
    outcomes = [run_strategy(first, page)]
    try:
        page.wait_for_timeout(second_pass_delay_ms)
    except PlaywrightError as exc:
        logger.warning("Wait before late ad pass failed: %s", exc)
    outcomes.append(run_strategy(late, page))
    return outcomes
