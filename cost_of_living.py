"""
Cost of living assembly: Numbeo scrape + Reddit search in parallel, fallback
table when the scrape has no housing data, then estimates and defaults so every
category is always filled.
"""

import logging
import math
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from fallback_data import FallbackRecord, get_fallback_data
from numbeo_scraper import (
    HOUSING_CENTER,
    HOUSING_OUTSIDE,
    MEAL_RESTAURANT,
    TRANSPORTATION,
    UTILITIES,
    scrape_numbeo,
)
from reddit_search import search_reddit

try:
    from config import SCRAPE_ENABLED, DISCUSSIONS_ENABLED
except ImportError:
    SCRAPE_ENABLED = os.environ.get("SCRAPE_ENABLED", "true").strip().lower() in ("1", "true", "yes")
    DISCUSSIONS_ENABLED = os.environ.get("DISCUSSIONS_ENABLED", "true").strip().lower() in ("1", "true", "yes")

logger = logging.getLogger(__name__)

CURRENCY = "USD"
MAX_DISCUSSIONS = 5

DEFAULT_GROCERIES = 400
DEFAULT_MEAL_PRICE = 15
# Groceries ~ 60 meals a month at a third of the restaurant price
MEALS_PER_MONTH = 60
GROCERY_DISCOUNT = 3
ENTERTAINMENT_MEALS = 10

# Used only when a category is still missing after scrape/fallback
CATEGORY_DEFAULTS = {
    HOUSING_CENTER: 1200,
    HOUSING_OUTSIDE: 800,
    TRANSPORTATION: 70,
    UTILITIES: 150,
}

CATEGORY_LABELS = {
    "housing": "Housing (1-bedroom apt)",
    "food": "Food & Groceries",
    "transportation": "Transportation",
    "utilities": "Utilities",
    "entertainment": "Entertainment",
}

LIVE_SOURCES = ["Numbeo.com (live)", "Reddit discussions"]
ESTIMATED_SOURCES = ["Estimated data", "Reddit discussions"]

EXAMPLE_CITIES_HINT = (
    "Try major cities like: New York, Los Angeles, San Francisco, Seattle, Chicago, Boston, Austin, "
    "or international cities like London, Tokyo, Paris"
)
STATE_CODE_TIP = 'For US cities, try without the state code (e.g., "Los Angeles" instead of "Los Angeles, CA")'


class CityNotFoundError(LookupError):
    """Neither the scrape nor the fallback table had data for the city."""

    def __init__(self, city: str):
        self.city = city
        if "mountain" in (city or "").lower():
            self.suggestion = 'Try: "Mountain View" without CA'
        else:
            self.suggestion = EXAMPLE_CITIES_HINT
        self.tip = STATE_CODE_TIP
        self.message = (
            f'Could not find cost of living data for "{city}". '
            "The city might not be in Numbeo's database."
        )
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {
            "error": "City not found",
            "message": self.message,
            "suggestion": self.suggestion,
            "tip": self.tip,
        }


def round_half_up(x) -> int:
    """Round to nearest integer, .5 away from zero for positives (not banker's rounding)."""
    return int(math.floor(float(x) + 0.5))


def estimate_groceries(meal_price: Optional[float]) -> int:
    if not meal_price:
        return DEFAULT_GROCERIES
    return round_half_up(meal_price * MEALS_PER_MONTH / GROCERY_DISCOUNT)


def estimate_entertainment(meal_price: Optional[float]) -> int:
    return round_half_up((meal_price or DEFAULT_MEAL_PRICE) * ENTERTAINMENT_MEALS)


def _monthly(categories: Mapping[str, Any], key: str) -> int:
    return round_half_up(categories.get(key) or CATEGORY_DEFAULTS[key])


def _last_updated(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"{now.month}/{now.day}/{now.year}"


def build_cost_result(
    city: str,
    categories: Mapping[str, Any],
    live: bool,
    discussions: Optional[list] = None,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Final response shape. All five categories are always present and rounded."""
    meal = categories.get(MEAL_RESTAURANT)
    return {
        "city": city,
        "currency": CURRENCY,
        "lastUpdated": _last_updated(now),
        "categories": {
            "housing": {
                "label": CATEGORY_LABELS["housing"],
                "cityCenter": _monthly(categories, HOUSING_CENTER),
                "outside": _monthly(categories, HOUSING_OUTSIDE),
            },
            "food": {
                "label": CATEGORY_LABELS["food"],
                "monthly": estimate_groceries(meal),
            },
            "transportation": {
                "label": CATEGORY_LABELS["transportation"],
                "monthly": _monthly(categories, TRANSPORTATION),
            },
            "utilities": {
                "label": CATEGORY_LABELS["utilities"],
                "monthly": _monthly(categories, UTILITIES),
            },
            "entertainment": {
                "label": CATEGORY_LABELS["entertainment"],
                "monthly": estimate_entertainment(meal),
            },
        },
        "sources": list(LIVE_SOURCES if live else ESTIMATED_SOURCES),
        "redditDiscussions": list(discussions or [])[:MAX_DISCUSSIONS],
    }


def _safe_call(label: str, fn: Callable, city: str, default):
    try:
        return fn(city)
    except Exception as e:
        logger.warning("%s failed for %r: %s", label, city, e)
        return default


def fetch_sources(
    city: str,
    scraper: Optional[Callable] = None,
    searcher: Optional[Callable] = None,
) -> tuple[Optional[dict], list]:
    """
    Run the Numbeo scrape and the Reddit search in parallel and wait for both.
    Either side failing degrades to None / [] instead of raising.
    """
    scraper = scraper or (scrape_numbeo if SCRAPE_ENABLED else None)
    searcher = searcher or (search_reddit if DISCUSSIONS_ENABLED else None)
    with ThreadPoolExecutor(max_workers=2) as executor:
        scrape_future = executor.submit(_safe_call, "Numbeo scrape", scraper, city, None) if scraper else None
        search_future = executor.submit(_safe_call, "Reddit search", searcher, city, []) if searcher else None
        scraped = scrape_future.result() if scrape_future else None
        discussions = search_future.result() if search_future else []
    return scraped, discussions or []


def get_cost_of_living(
    city: str,
    scraper: Optional[Callable] = None,
    searcher: Optional[Callable] = None,
    fallback_table: Optional[Mapping[str, FallbackRecord]] = None,
) -> dict[str, Any]:
    """
    Cost of living for a city. Prefers live Numbeo data when it includes city-centre
    housing; otherwise the fallback table. Raises CityNotFoundError when neither has data.
    """
    scraped, discussions = fetch_sources(city, scraper=scraper, searcher=searcher)

    if scraped and scraped.get("categories", {}).get(HOUSING_CENTER):
        logger.info("Using scraped Numbeo data for %r", city)
        return build_cost_result(city, scraped["categories"], live=True, discussions=discussions)

    logger.info("Scrape unusable for %r; checking fallback data", city)
    record = get_fallback_data(city, table=fallback_table)
    if record is None:
        raise CityNotFoundError(city)

    logger.info("Using fallback data for %r", city)
    return build_cost_result(city, record.to_categories(), live=False, discussions=discussions)
