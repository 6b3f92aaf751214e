"""
Static cost figures for major cities, used when the Numbeo scrape fails.
Approximate USD/month values; lookup is exact-match on the normalized key.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FallbackRecord:
    housing: float
    outside: float
    meal: float
    transport: float
    utilities: float

    def to_categories(self) -> dict[str, float]:
        """Same shape as the scraper's category map."""
        return {
            "housingCenter": self.housing,
            "housingOutside": self.outside,
            "mealRestaurant": self.meal,
            "transportation": self.transport,
            "utilities": self.utilities,
        }


def fallback_key(city: Optional[str]) -> str:
    """
    Flattened lookup key: lowercase, no whitespace, no commas.
    The state code is kept, so "Los Angeles, CA" -> "losangelesca" and
    "Los Angeles" -> "losangeles" are separate keys.
    """
    if not city or not isinstance(city, str):
        return ""
    return "".join(city.lower().split()).replace(",", "")


# (display name, aliases, record). Every alias is registered through fallback_key.
_SEED_CITIES = [
    ("New York", ("new york", "newyork", "New York City", "NYC"),
     FallbackRecord(housing=3500, outside=2500, meal=20, transport=127, utilities=150)),
    ("London", ("london",),
     FallbackRecord(housing=2200, outside=1600, meal=18, transport=165, utilities=200)),
    ("Tokyo", ("tokyo",),
     FallbackRecord(housing=1200, outside=700, meal=10, transport=70, utilities=150)),
    ("Paris", ("paris",),
     FallbackRecord(housing=1400, outside=1000, meal=15, transport=75, utilities=180)),
    ("Singapore", ("singapore",),
     FallbackRecord(housing=2800, outside=2000, meal=10, transport=100, utilities=150)),
    ("Mountain View", ("mountain view", "mountainview", "Mountain View, CA", "mountainviewca"),
     FallbackRecord(housing=3200, outside=2600, meal=18, transport=100, utilities=120)),
    ("Los Angeles", ("los angeles", "losangeles", "Los Angeles, CA", "LA"),
     FallbackRecord(housing=2500, outside=1800, meal=18, transport=100, utilities=140)),
    ("San Francisco", ("san francisco", "sanfrancisco", "San Francisco, CA"),
     FallbackRecord(housing=3600, outside=2800, meal=20, transport=98, utilities=130)),
    ("Seattle", ("seattle", "Seattle, WA"),
     FallbackRecord(housing=2300, outside=1700, meal=17, transport=99, utilities=160)),
    ("Austin", ("austin", "Austin, TX"),
     FallbackRecord(housing=1700, outside=1300, meal=15, transport=75, utilities=150)),
    ("Boston", ("boston", "Boston, MA"),
     FallbackRecord(housing=2900, outside=2100, meal=18, transport=90, utilities=170)),
    ("Chicago", ("chicago", "Chicago, IL"),
     FallbackRecord(housing=1900, outside=1400, meal=16, transport=105, utilities=140)),
]


def build_fallback_table(seed=None) -> Mapping[str, FallbackRecord]:
    """Read-only key -> record mapping built from (name, aliases, record) tuples."""
    table: dict[str, FallbackRecord] = {}
    for name, aliases, record in seed if seed is not None else _SEED_CITIES:
        for alias in (name,) + tuple(aliases):
            key = fallback_key(alias)
            if key:
                table[key] = record
    return MappingProxyType(table)


FALLBACK_CITIES = build_fallback_table()

FALLBACK_CITY_NAMES = tuple(name for name, _aliases, _record in _SEED_CITIES)


def get_fallback_data(city: str, table: Optional[Mapping[str, FallbackRecord]] = None) -> Optional[FallbackRecord]:
    """Fallback record for a city, or None when the key is not registered."""
    table = FALLBACK_CITIES if table is None else table
    key = fallback_key(city)
    record = table.get(key) if key else None
    if record is None:
        logger.info("No fallback data for %r (key=%r)", city, key)
    return record
