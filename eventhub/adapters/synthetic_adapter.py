"""Synthetic event source.

Generates plausible upcoming events without touching the network. Useful for
demos, for exercising the store end to end, and as a guaranteed source of
records in every run.

Each generated record has a fixed original_url per index, so repeated runs
update the same records instead of adding new ones.
"""

import random
from collections.abc import Callable
from datetime import date, timedelta

from eventhub.adapters import register_adapter
from eventhub.core.base_adapter import BaseAdapter
from eventhub.core.event_model import Category, EventSource, RawRecord

DEFAULT_COUNT = 15
MAX_DAYS_AHEAD = 30
ORGANIZER_NAME = "Sydney Events Organizer"
URL_TEMPLATE = "https://www.eventbrite.com.au/e/sydney-tech-meetup-ai-machine-learning-{n}"
IMAGE_TEMPLATE = "https://picsum.photos/400/300?random={i}"

TEMPLATES: tuple[dict, ...] = (
    {
        "title": "Sydney Tech Meetup - AI & Machine Learning",
        "description": (
            "Join us for an exciting evening discussing the latest trends in AI and machine "
            "learning. Network with fellow tech enthusiasts and learn from industry experts."
        ),
        "category": Category.TECHNOLOGY,
        "venue": "The Sydney Startup Hub, 11 York Street, Sydney NSW",
        "price": "Free",
        "tags": ["networking", "workshop", "tech", "AI"],
    },
    {
        "title": "Sydney Symphony Orchestra - Classical Night",
        "description": (
            "Experience a magical evening with Sydney's premier orchestra performing classical "
            "masterpieces from Mozart, Beethoven, and Chopin."
        ),
        "category": Category.MUSIC,
        "venue": "Sydney Opera House, Bennelong Point, Sydney NSW",
        "price": "$45 - $120",
        "tags": ["concert", "classical", "music"],
    },
    {
        "title": "Business Networking Breakfast",
        "description": (
            "Connect with Sydney's business leaders over breakfast. Great opportunity for "
            "entrepreneurs and professionals to expand their network."
        ),
        "category": Category.BUSINESS,
        "venue": "Hilton Sydney, 488 George Street, Sydney NSW",
        "price": "$35",
        "tags": ["networking", "business", "breakfast"],
    },
    {
        "title": "Contemporary Art Exhibition Opening",
        "description": (
            "Discover emerging Australian artists in this curated contemporary art exhibition. "
            "Wine and canapés provided."
        ),
        "category": Category.ARTS,
        "venue": "Art Gallery of NSW, Art Gallery Road, The Domain NSW",
        "price": "Free",
        "tags": ["exhibition", "art", "opening"],
    },
    {
        "title": "Sydney Harbour Bridge Climb",
        "description": "Experience breathtaking 360-degree views of Sydney from the top of the iconic Harbour Bridge.",
        "category": Category.SPORTS,
        "venue": "BridgeClimb Sydney, 3 Cumberland Street, The Rocks NSW",
        "price": "$174 - $388",
        "tags": ["adventure", "tourism", "sports"],
    },
    {
        "title": "Cooking Class - Modern Australian Cuisine",
        "description": (
            "Learn to cook modern Australian dishes with native ingredients. "
            "Hands-on class with professional chef."
        ),
        "category": Category.FOOD,
        "venue": "Sydney Cooking School, 4 Glebe Point Road, Glebe NSW",
        "price": "$95",
        "tags": ["workshop", "cooking", "food"],
    },
    {
        "title": "Yoga in the Park",
        "description": (
            "Start your weekend with a peaceful yoga session in the beautiful Royal Botanic "
            "Gardens. All levels welcome."
        ),
        "category": Category.HEALTH,
        "venue": "Royal Botanic Gardens, Mrs Macquaries Road, Sydney NSW",
        "price": "Free",
        "tags": ["yoga", "wellness", "outdoor"],
    },
    {
        "title": "Digital Marketing Workshop",
        "description": (
            "Learn the latest digital marketing strategies and tools. Perfect for small "
            "business owners and marketing professionals."
        ),
        "category": Category.EDUCATION,
        "venue": "University of Technology Sydney, 15 Broadway, Ultimo NSW",
        "price": "$75",
        "tags": ["workshop", "education", "marketing"],
    },
    {
        "title": "Sydney Startup Pitch Night",
        "description": (
            "Watch innovative startups pitch their ideas to investors and vote for your "
            "favorite. Networking drinks included."
        ),
        "category": Category.BUSINESS,
        "venue": "Tank Stream Labs, 15 Blue Street, North Sydney NSW",
        "price": "$25",
        "tags": ["startup", "networking", "pitch"],
    },
    {
        "title": "Jazz Night at The Basement",
        "description": "Enjoy smooth jazz performances by local and international artists in Sydney's premier jazz venue.",
        "category": Category.MUSIC,
        "venue": "The Basement, 29 Reiby Place, Circular Quay NSW",
        "price": "$30 - $50",
        "tags": ["jazz", "music", "concert"],
    },
)


def format_time(hour: int, minute: int) -> str:
    """Format a 24h hour/minute as "H:MM AM/PM"."""
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour - 12 if hour > 12 else hour
    return f"{display_hour}:{minute:02d} {suffix}"


@register_adapter("synthetic")
class SyntheticAdapter(BaseAdapter):
    """Generated events spread over the next month."""

    source_id = "synthetic"
    source_name = "Synthetic events"
    source = EventSource.SYNTHETIC

    def __init__(
        self,
        count: int = DEFAULT_COUNT,
        seed: int | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        super().__init__()
        self.count = count
        self.seed = seed
        self.clock = clock

    def generate(self) -> list[RawRecord]:
        """Build `count` records cycling through TEMPLATES."""
        rng = random.Random(self.seed)
        today = self.clock()
        records = []

        for i in range(self.count):
            template = TEMPLATES[i % len(TEMPLATES)]
            cycle = i // len(TEMPLATES)
            title = template["title"] + (f" #{cycle + 1}" if cycle else "")

            event_date = today + timedelta(days=rng.randint(1, MAX_DAYS_AHEAD))
            hour = rng.randint(9, 20)
            minute = rng.choice((0, 30))
            original_url = URL_TEMPLATE.format(n=i + 1)

            records.append(
                RawRecord(
                    title=title,
                    original_url=original_url,
                    source=self.source,
                    date=event_date,
                    time=format_time(hour, minute),
                    venue=template["venue"],
                    price=template["price"],
                    description=template["description"],
                    image_url=IMAGE_TEMPLATE.format(i=i),
                    category=template["category"],
                    tags=list(template["tags"]),
                    organizer_name=ORGANIZER_NAME,
                )
            )

        return records

    async def fetch_records(self) -> list[RawRecord]:
        records = self.generate()
        self.logger.info("synthetic_generated", count=len(records))
        return records
