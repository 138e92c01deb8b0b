"""Keyword-based event categorization and tag extraction.

Flow:
1. Lower-case the title, description and (when known) the organizing group
2. Walk CATEGORY_RULES in order; the first rule with a matching keyword wins
3. Nothing matches -> Category.OTHER

Rule order is a priority: specific technology words are checked before the
generic business ones, health before music, and so on. Reordering the rules
changes classification results.
"""

import re
from collections.abc import Iterable, Sequence

from eventhub.core.event_model import Category

# ============================================================
# CATEGORY RULES - ordered, first match wins
# ============================================================

CATEGORY_RULES: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (
        Category.TECHNOLOGY,
        (
            "tech", "coding", "programming", "developer", "software",
            "machine learning", "artificial intelligence", "data science",
            "python", "javascript", "react", "hackathon", "cyber", "blockchain",
        ),
    ),
    (
        Category.BUSINESS,
        (
            "business", "entrepreneur", "startup", "networking", "conference",
            "marketing", "investor", "pitch",
        ),
    ),
    (
        Category.HEALTH,
        ("health", "fitness", "wellness", "yoga", "meditation", "pilates", "mindfulness"),
    ),
    (
        Category.ARTS,
        (
            "art", "gallery", "exhibition", "design", "creative", "photography",
            "theatre", "theater", "film", "dance",
        ),
    ),
    (
        Category.EDUCATION,
        ("education", "learning", "skill", "workshop", "course", "seminar", "lecture", "tutorial"),
    ),
    (
        Category.FOOD,
        ("food", "cooking", "wine", "dining", "restaurant", "culinary", "tasting", "brunch"),
    ),
    (
        Category.MUSIC,
        ("music", "band", "concert", "singing", "jazz", "orchestra", "symphony", "dj"),
    ),
    (
        Category.SPORTS,
        ("sport", "running", "run", "hiking", "cycling", "climb", "swim", "football", "marathon"),
    ),
)

DEFAULT_TAG_VOCABULARY: tuple[str, ...] = (
    "networking",
    "workshop",
    "conference",
    "exhibition",
    "festival",
    "seminar",
    "meetup",
    "community",
    "professional",
    "beginner",
    "advanced",
    "free",
)


def _keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    # Keywords must start a word: "art" matches "artist" but not "party"
    return re.compile("|".join(rf"\b{re.escape(keyword)}" for keyword in keywords))


_COMPILED_RULES = tuple((category, _keyword_pattern(keywords)) for category, keywords in CATEGORY_RULES)


def _combined_text(*parts: str | None) -> str:
    return " ".join(part for part in parts if part).lower()


def categorize(
    title: str,
    description: str | None = None,
    group: str | None = None,
    rules: Sequence[tuple[Category, tuple[str, ...]]] | None = None,
) -> Category:
    """Classify an event from its free text.

    Args:
        title: Event title
        description: Event description
        group: Organizing group name, where the source exposes one
        rules: Ordered (category, keywords) rules; defaults to CATEGORY_RULES

    Returns:
        The first matching category, or Category.OTHER
    """
    text = _combined_text(title, description, group)
    compiled = (
        _COMPILED_RULES
        if rules is None
        else tuple((category, _keyword_pattern(keywords)) for category, keywords in rules)
    )

    for category, pattern in compiled:
        if pattern.search(text):
            return category

    return Category.OTHER


def extract_tags(
    *texts: str | None,
    vocabulary: Sequence[str] = DEFAULT_TAG_VOCABULARY,
) -> list[str]:
    """Return every vocabulary keyword found in the texts, in vocabulary order."""
    text = _combined_text(*texts)
    return [keyword for keyword in vocabulary if keyword in text]
