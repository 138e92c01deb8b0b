"""Base adapter classes for all event source scrapers."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from eventhub.config import Settings, get_settings
from eventhub.core.category_classifier import DEFAULT_TAG_VOCABULARY
from eventhub.core.event_model import EventBatch, EventSource, RawRecord
from eventhub.core.exceptions import ExtractionError, FetchError, NavigationError
from eventhub.core.selectors import SelectorChain, extract_fields, locate
from eventhub.logging import get_logger, log_adapter_run


# ============================================================
# BROWSER IDENTITY
# ============================================================

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
}

DEFAULT_VIEWPORT = {"width": 1366, "height": 768}

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


@dataclass
class AdapterConfig:
    """Runtime knobs for a browser-driven adapter."""

    headless: bool = True
    navigation_timeout_ms: int = 30000
    selector_timeout_ms: int = 5000
    settle_ms: int = 3000  # Pause for dynamic content after navigation
    scroll_step_px: int = 400
    scroll_pause_ms: int = 250
    max_scroll_steps: int = 100

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "AdapterConfig":
        settings = settings or get_settings()
        return cls(
            headless=settings.browser_headless,
            navigation_timeout_ms=settings.navigation_timeout_ms,
            selector_timeout_ms=settings.selector_timeout_ms,
        )


class BaseAdapter(ABC):
    """Abstract base class for all event source adapters.

    Subclasses implement `fetch_records()`. `scrape()` wraps it and never
    raises: failures are logged, recorded on the batch and replaced by
    `fallback_records()` (empty unless the source defines a fallback).
    """

    # Class-level attributes to be overridden by subclasses
    source_id: str = ""
    source_name: str = ""
    source: EventSource = EventSource.OTHER
    tag_vocabulary: tuple[str, ...] = DEFAULT_TAG_VOCABULARY

    def __init__(self) -> None:
        self.logger = get_logger(f"adapter.{self.source_id}")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "BaseAdapter":
        """Build the adapter with its settings-driven defaults."""
        return cls()

    # ==========================================
    # Abstract Methods (to implement per source)
    # ==========================================

    @abstractmethod
    async def fetch_records(self) -> list[RawRecord]:
        """Fetch raw records from the source.

        Raises:
            FetchError: when the source could not be read at all
        """

    def fallback_records(self) -> list[RawRecord]:
        """Placeholder records used when live extraction is exhausted."""
        return []

    async def close(self) -> None:
        """Release any resources held by the adapter."""

    # ==========================================
    # Main Scraping Method
    # ==========================================

    async def scrape(self) -> EventBatch:
        """Scrape the source.

        Returns:
            EventBatch with raw records, errors and whether the fallback was used
        """
        start_time = datetime.now()
        records: list[RawRecord] = []
        errors: list[str] = []
        used_fallback = False

        with log_adapter_run(self.source_id, self.source_name):
            self.logger.info("adapter_start")

            try:
                records = await self.fetch_records()
            except Exception as e:
                errors.append(f"Error fetching records: {e}")
                self.logger.warning("adapter_fetch_failed", error=str(e), error_type=type(e).__name__)
                records, used_fallback = self._safe_fallback(errors)
            finally:
                try:
                    await self.close()
                except Exception as e:
                    self.logger.warning("adapter_close_failed", error=str(e))

            elapsed = (datetime.now() - start_time).total_seconds()
            self.logger.info(
                "adapter_complete",
                records=len(records),
                errors=len(errors),
                used_fallback=used_fallback,
                elapsed_seconds=round(elapsed, 2),
            )

        return EventBatch(
            source_id=self.source_id,
            source_name=self.source_name,
            scraped_at=datetime.now().isoformat(),
            records=records,
            errors=errors,
            used_fallback=used_fallback,
        )

    def _safe_fallback(self, errors: list[str]) -> tuple[list[RawRecord], bool]:
        try:
            fallback = self.fallback_records()
        except Exception as e:
            errors.append(f"Error building fallback records: {e}")
            self.logger.error("fallback_failed", error=str(e))
            return [], False

        if fallback:
            self.logger.info("fallback_used", count=len(fallback))
        return fallback, bool(fallback)

    # ==========================================
    # Utility Methods
    # ==========================================

    async def __aenter__(self) -> "BaseAdapter":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit - cleanup resources."""
        await self.close()


class BrowserAdapter(BaseAdapter):
    """Adapter for JavaScript-rendered listings driven through Playwright.

    Each run owns one browser session. `urls` is the retry budget: the
    primary listing URL first, then alternates. The first URL that yields at
    least one record wins; when every URL fails or yields nothing the run
    raises FetchError and `scrape()` turns that into the fallback.
    """

    urls: tuple[str, ...] = ()
    card_chain: SelectorChain | None = None
    field_schema: Mapping[str, SelectorChain] = {}
    auto_scroll: bool = False
    # Visited once before retrying a URL whose navigation failed
    warmup_url: str | None = None

    def __init__(self, config: AdapterConfig | None = None) -> None:
        super().__init__()
        self.config = config or AdapterConfig.from_settings()
        self._playwright: Any = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "BrowserAdapter":
        return cls(AdapterConfig.from_settings(settings))

    # ==========================================
    # Playwright Browser Management
    # ==========================================

    async def get_browser(self) -> Browser:
        """Get or create the Playwright browser for this run."""
        if self._browser is None:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=LAUNCH_ARGS,
            )
        return self._browser

    async def get_page(self) -> Page:
        """Get a new page with a realistic browser identity."""
        browser = await self.get_browser()
        if self._context is None:
            self._context = await browser.new_context(
                viewport=DEFAULT_VIEWPORT,
                user_agent=DEFAULT_USER_AGENT,
                extra_http_headers=DEFAULT_HEADERS,
                locale="en-AU",
            )
        return await self._context.new_page()

    async def close_browser(self) -> None:
        """Close the Playwright session."""
        if self._context:
            await self._context.close()
            self._context = None
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def close(self) -> None:
        await self.close_browser()

    # ==========================================
    # Navigation
    # ==========================================

    async def navigate(self, page: Page, url: str) -> None:
        """Load a URL within the navigation timeout.

        Raises:
            NavigationError: the page did not load in time or the browser failed
        """
        try:
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.config.navigation_timeout_ms,
            )
        except PlaywrightError as e:
            raise NavigationError(url, str(e).splitlines()[0], source=self.source_id) from e

        await page.wait_for_timeout(self.config.settle_ms)

    async def _navigate_with_warmup(self, page: Page, url: str) -> None:
        try:
            await self.navigate(page, url)
        except NavigationError:
            if not self.warmup_url:
                raise
            self.logger.info("navigation_warmup", warmup_url=self.warmup_url, url=url)
            await self.navigate(page, self.warmup_url)
            await self.navigate(page, url)

    async def scroll_to_bottom(self, page: Page) -> int:
        """Scroll in steps until the end of the page to trigger lazy loading.

        The loop stops when the scroll position passes the current page height
        (re-read every step, so content appended while scrolling extends the
        loop) or after `max_scroll_steps`.

        Returns:
            Number of scroll steps taken
        """
        position = 0
        steps = 0
        try:
            while steps < self.config.max_scroll_steps:
                height = await page.evaluate(
                    "() => document.body.scrollHeight - window.innerHeight"
                )
                if position >= (height or 0):
                    break
                position += self.config.scroll_step_px
                await page.evaluate("(y) => window.scrollTo(0, y)", position)
                await page.wait_for_timeout(self.config.scroll_pause_ms)
                steps += 1

            await page.wait_for_timeout(self.config.settle_ms)
        except PlaywrightError as e:
            self.logger.warning("auto_scroll_failed", error=str(e)[:100], steps=steps)

        self.logger.debug("auto_scroll_done", steps=steps)
        return steps

    # ==========================================
    # Extraction
    # ==========================================

    def build_record(self, fields: dict[str, str], page_url: str) -> RawRecord | None:
        """Turn the extracted fields of one card into a raw record.

        Subclasses that use `card_chain` override this. Returns None for
        cards that are not usable events; the default keeps no card.
        """
        return None

    async def extract_cards(self, page: Page, page_url: str) -> list[RawRecord]:
        """Locate event cards with `card_chain` and extract `field_schema`.

        Raises:
            ExtractionError: no selector of the card chain matched
        """
        if self.card_chain is None:
            return []

        selector = await locate(page, self.card_chain, timeout_ms=self.config.selector_timeout_ms)
        if selector is None:
            raise ExtractionError(self.card_chain.role, url=page_url, source=self.source_id)

        if self.auto_scroll:
            await self.scroll_to_bottom(page)

        cards = await page.query_selector_all(selector)
        self.logger.info("cards_found", selector=selector, count=len(cards))

        records: list[RawRecord] = []
        for i, card in enumerate(cards):
            fields = await extract_fields(card, self.field_schema)
            try:
                record = self.build_record(fields, page_url)
            except ValueError as e:
                self.logger.debug("card_skipped", index=i, error=str(e))
                continue
            if record is not None:
                records.append(record)

        return records

    async def extract_page(self, page: Page, page_url: str) -> list[RawRecord]:
        """Extract records from a loaded listing page."""
        return await self.extract_cards(page, page_url)

    async def fetch_records(self) -> list[RawRecord]:
        """Walk the URL list until one yields records.

        Raises:
            FetchError: every URL failed or yielded nothing
        """
        if not self.urls:
            raise FetchError("No listing URLs configured", source=self.source_id)

        page = await self.get_page()
        failures: list[str] = []

        for attempt, url in enumerate(self.urls, start=1):
            self.logger.info("url_attempt", url=url, attempt=attempt, budget=len(self.urls))
            try:
                await self._navigate_with_warmup(page, url)
                records = await self.extract_page(page, url)
            except (FetchError, PlaywrightError) as e:
                failures.append(f"{url}: {e}")
                self.logger.warning("url_failed", url=url, attempt=attempt, error=str(e)[:200])
                continue

            if records:
                self.logger.info("url_succeeded", url=url, records=len(records))
                return records

            failures.append(f"{url}: no records extracted")
            self.logger.warning("url_empty", url=url, attempt=attempt)

        raise FetchError(
            f"All {len(self.urls)} listing URLs exhausted",
            source=self.source_id,
            details={"failures": failures},
        )
