"""Price parsing for ticket price text."""

import re

from eventhub.core.event_model import Price

# "$45", "$45.50", "$1,200"
PRICE_PATTERN = re.compile(r"\$\s?(\d{1,3}(?:,\d{3})+|\d+)(\.\d{1,2})?")


def extract_amounts(price_str: str) -> list[float]:
    """Return every dollar amount found in the text, in order of appearance."""
    amounts = []
    for match in PRICE_PATTERN.finditer(price_str):
        whole, cents = match.groups()
        amounts.append(float(whole.replace(",", "") + (cents or "")))
    return amounts


def parse_price(price_str: str | None, currency: str = "AUD") -> Price:
    """Parse ticket price text into a price range.

    Empty text or text mentioning "free" is free. Otherwise the range spans
    every dollar amount found. Text with no dollar amount at all is also
    treated as free rather than unknown.

    Args:
        price_str: Price text (e.g., "Free", "$45 - $120", "From $35")
        currency: Currency code recorded on the result

    Returns:
        Price with min/max and the is_free flag
    """
    if not price_str or "free" in price_str.lower():
        return Price.free(currency)

    amounts = extract_amounts(price_str)
    if not amounts:
        return Price.free(currency)

    return Price(min=min(amounts), max=max(amounts), currency=currency, is_free=False)
