"""Ordered selector fallback chains for hostile, frequently changing markup.

A SelectorChain lists candidate CSS selectors for one semantic role
("event card", "title", "link", ...). Selectors are tried in order and the
first one that matches wins. A chain that matches nothing is not an error:
page-level lookups return None and card-level lookups return "".

Usage:
    CARD = SelectorChain("card", ('[data-testid="event-card"]', "article"))
    FIELDS = {"title": SelectorChain("title", ("h2 a", "h3 a"))}

    selector = await locate(page, CARD)
    if selector:
        for card in await page.query_selector_all(selector):
            values = await extract_fields(card, FIELDS)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from playwright.async_api import Error as PlaywrightError

from eventhub.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PROBE_TIMEOUT_MS = 5000


@dataclass(frozen=True)
class SelectorChain:
    """Candidate selectors for one role, most specific first.

    `attribute` names the attribute to read from the matched element
    (e.g. "href", "src"); None reads its text content.
    """

    role: str
    selectors: tuple[str, ...]
    attribute: str | None = None

    def __post_init__(self) -> None:
        if not self.selectors:
            raise ValueError(f"SelectorChain '{self.role}' needs at least one selector")


async def locate(
    page: Any,
    chain: SelectorChain,
    timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
) -> str | None:
    """Return the first selector of the chain present on the page.

    Each selector gets its own bounded wait.

    Args:
        page: Playwright page
        chain: Candidate selectors
        timeout_ms: Wait per selector probe

    Returns:
        The matching selector, or None when no extraction point was found
    """
    for selector in chain.selectors:
        try:
            await page.wait_for_selector(selector, timeout=timeout_ms, state="attached")
        except PlaywrightError as e:
            logger.debug("selector_miss", role=chain.role, selector=selector, error=str(e)[:100])
            continue

        logger.info("selector_found", role=chain.role, selector=selector)
        return selector

    logger.warning("no_extraction_point", role=chain.role, tried=len(chain.selectors))
    return None


async def _read(element: Any, attribute: str | None) -> str:
    if attribute:
        value = await element.get_attribute(attribute)
    else:
        value = await element.text_content()
    return (value or "").strip()


async def extract(card: Any, chain: SelectorChain) -> str:
    """Read one field from inside a matched card.

    A selector that matches an element with an empty value does not stop the
    chain; the next selector is tried.

    Args:
        card: Playwright element handle for the card
        chain: Candidate selectors for the field

    Returns:
        Stripped text (or attribute value), "" when nothing matched
    """
    for selector in chain.selectors:
        try:
            element = await card.query_selector(selector)
            if element is None:
                continue
            value = await _read(element, chain.attribute)
        except PlaywrightError as e:
            logger.debug("field_probe_failed", role=chain.role, selector=selector, error=str(e)[:100])
            continue

        if value:
            return value

    return ""


async def extract_fields(card: Any, schema: Mapping[str, SelectorChain]) -> dict[str, str]:
    """Extract every field of a card; each field falls back independently."""
    return {field: await extract(card, chain) for field, chain in schema.items()}
