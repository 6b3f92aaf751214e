"""
Numbeo cost-of-living scraper.

Fetches numbeo.com/cost-of-living/in/<slug>, walks every price table and maps
row labels onto our five cost categories. Tolerant of layout changes: tries the
known table classes first, then every <table> on the page.
Set SCRAPER_DEBUG=1 for verbose logs and a /tmp HTML dump.
"""

import logging
import math
import os
import re
from typing import Any, Optional

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

try:
    from config import NUMBEO_BASE_URL, SCRAPER_TIMEOUT, SCRAPER_DEBUG
except ImportError:
    NUMBEO_BASE_URL = os.environ.get("NUMBEO_BASE_URL", "https://www.numbeo.com").rstrip("/")
    SCRAPER_TIMEOUT = int(os.environ.get("SCRAPER_TIMEOUT", "15"))
    SCRAPER_DEBUG = os.environ.get("SCRAPER_DEBUG", "").strip().lower() in ("1", "true", "yes")

# Numbeo rejects requests without a browser-like fingerprint
REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
}

# 50 states + DC. Numbeo city pages never carry the state suffix.
US_STATE_CODES = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
    "DC",
)
_STATE_SUFFIX = re.compile(r",\s*(?:" + "|".join(US_STATE_CODES) + r")\b", re.IGNORECASE)

# Category keys (CategoryMap)
HOUSING_CENTER = "housingCenter"
HOUSING_OUTSIDE = "housingOutside"
MEAL_RESTAURANT = "mealRestaurant"
TRANSPORTATION = "transportation"
UTILITIES = "utilities"
CATEGORY_KEYS = (HOUSING_CENTER, HOUSING_OUTSIDE, MEAL_RESTAURANT, TRANSPORTATION, UTILITIES)

# Table classes Numbeo has used for the price grid; any <table> is the last resort
TABLE_SELECTORS = ("table.data_wide_table", "table.table_indices")

_PRICE_RUN = re.compile(r"\d*\.?\d+")


def city_slug(city: Optional[str]) -> str:
    """
    URL slug for the Numbeo city page.
    "Los Angeles, CA" -> "Los-Angeles", "Mountain View" -> "Mountain-View".
    """
    if not city or not isinstance(city, str):
        return ""
    formatted = _STATE_SUFFIX.sub("", city.strip(), count=1)
    slug = formatted.split(",")[0].strip()
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"[^A-Za-z0-9-]", "", slug)


def city_page_url(slug: str) -> str:
    return f"{NUMBEO_BASE_URL}/cost-of-living/in/{slug}"


def parse_price(text: Optional[str]) -> Optional[float]:
    """Parse '$1,234.50' -> 1234.5. Returns None when no number is present."""
    if not text:
        return None
    cleaned = re.sub(r"[,$]", "", str(text)).strip()
    match = _PRICE_RUN.search(cleaned)
    if not match:
        return None
    try:
        value = float(match.group(0))
    except ValueError:
        return None
    # Absurdly long digit runs overflow to inf
    return value if math.isfinite(value) else None


# ---------- Label classification ----------

_ONE_BEDROOM = re.compile(
    r"apartment.*\b1\b.*bed|\b1\b[\s-]*bed(?:room)?.*apartment|rent.*\b1\b.*bed", re.IGNORECASE
)
_CITY_CENTRE = re.compile(r"city\s*cent(?:re|er)", re.IGNORECASE)
# Short rent form: "Rent 1 bed in center" carries no "city"
_RENT_CENTRE = re.compile(r"rent.*\b1\b.*bed.*\bcent(?:re|er)\b", re.IGNORECASE)
_OUTSIDE_CENTRE = re.compile(r"outside\s+(?:of\s+)?(?:the\s+)?(?:city\s+)?cent(?:re|er)", re.IGNORECASE)


def _has(pattern: str, label: str) -> bool:
    return re.search(pattern, label, re.IGNORECASE) is not None


def _is_housing_center(label: str) -> bool:
    if _OUTSIDE_CENTRE.search(label):
        return False
    if _RENT_CENTRE.search(label):
        return True
    return bool(_ONE_BEDROOM.search(label)) and bool(_CITY_CENTRE.search(label))


def _is_housing_outside(label: str) -> bool:
    return bool(_ONE_BEDROOM.search(label)) and bool(_OUTSIDE_CENTRE.search(label))


def _is_meal_restaurant(label: str) -> bool:
    return _has(r"meal", label) and _has(r"inexpensive|cheap", label) and _has(r"restaurant", label)


def _is_transportation(label: str) -> bool:
    return _has(r"monthly\s*pass", label) or _has(r"public\s*transport", label)


def _is_utilities(label: str) -> bool:
    if _has(r"basic\s*utilities", label):
        return True
    return _has(r"electricity", label) and _has(r"heating", label) and _has(r"cooling", label)


# Evaluated in order, first match wins. Order is the tie-break.
CATEGORY_RULES = [
    (HOUSING_CENTER, _is_housing_center),
    (HOUSING_OUTSIDE, _is_housing_outside),
    (MEAL_RESTAURANT, _is_meal_restaurant),
    (TRANSPORTATION, _is_transportation),
    (UTILITIES, _is_utilities),
]


def classify_label(label: Optional[str]) -> Optional[str]:
    """Map a Numbeo row label to a category key, or None if unclassified."""
    if not label:
        return None
    for category, matches in CATEGORY_RULES:
        if matches(label):
            return category
    return None


# ---------- Table scanning ----------

def find_price_tables(soup) -> list:
    """Known Numbeo price tables, or every <table> when none carry the expected class."""
    tables = soup.select(", ".join(TABLE_SELECTORS))
    if tables:
        return tables
    return soup.find_all("table")


def scan_tables(document) -> dict[str, Any]:
    """
    Walk all price tables and collect (label, price) rows.

    Accepts a BeautifulSoup document (or tag) or raw HTML. Returns
    {"tables_found": int, "categories": {key: price}, "raw_data": [{"label", "price"}]}.
    tables_found == 0 means the page had no tables at all, which callers report
    separately from "tables present but nothing matched".
    """
    soup = document if hasattr(document, "select") else BeautifulSoup(document or "", "html.parser")
    result: dict[str, Any] = {"tables_found": 0, "categories": {}, "raw_data": []}

    tables = find_price_tables(soup)
    result["tables_found"] = len(tables)
    if not tables:
        return result

    for table in tables:
        for row in table.find_all("tr"):
            cells = row.find_all("td")
            if len(cells) < 2:
                continue
            label = cells[0].get_text(" ", strip=True)
            price = parse_price(cells[1].get_text(" ", strip=True))
            if not label or price is None:
                continue
            result["raw_data"].append({"label": label, "price": price})
            category = classify_label(label)
            if category:
                # Later rows win when a page lists a category twice
                result["categories"][category] = price
                logger.debug("Matched %s: %s (%s)", category, price, label)
    return result


# ---------- Fetch ----------

def fetch_city_page(slug: str, timeout: Optional[int] = None) -> Optional[str]:
    """GET the Numbeo city page. Returns HTML text or None on any transport failure."""
    url = city_page_url(slug)
    logger.info("Scraping %s", url)
    try:
        response = requests.get(url, headers=REQUEST_HEADERS, timeout=timeout or SCRAPER_TIMEOUT)
    except requests.Timeout:
        logger.error("Numbeo request timed out after %ss: %s", timeout or SCRAPER_TIMEOUT, url)
        return None
    except requests.RequestException as e:
        logger.error("Numbeo request failed: %s", e)
        return None
    if response.status_code != 200:
        logger.error("Numbeo HTTP %s: %s", response.status_code, response.reason)
        return None
    if SCRAPER_DEBUG:
        try:
            with open("/tmp/numbeo_debug.html", "w", encoding="utf-8") as f:
                f.write(response.text)
            logger.debug("Wrote /tmp/numbeo_debug.html")
        except OSError:
            pass
    return response.text


def scrape_numbeo(city: str, timeout: Optional[int] = None) -> Optional[dict[str, Any]]:
    """
    Scrape Numbeo for a city. Returns a scrape result dict or None when the
    page could not be fetched or held no price rows. Never raises.
    """
    slug = city_slug(city)
    if not slug:
        logger.warning("Could not build a Numbeo slug for %r; skipping scrape", city)
        return None

    html = fetch_city_page(slug, timeout=timeout)
    if html is None:
        return None

    try:
        scan = scan_tables(html)
    except Exception as e:
        logger.warning("Numbeo parse error for %s: %s", slug, e)
        return None

    if scan["tables_found"] == 0:
        logger.warning("No tables found on Numbeo page for %s", slug)
        return None
    logger.debug("Found %s tables for %s", scan["tables_found"], slug)

    if not scan["raw_data"]:
        logger.warning("Could not extract any pricing data for %s", slug)
        return None

    logger.info("Extracted %s categories (%s rows) for %s", len(scan["categories"]), len(scan["raw_data"]), slug)
    return {
        "source": "Numbeo",
        "city": city,
        "slug": slug,
        "url": city_page_url(slug),
        "tables_found": scan["tables_found"],
        "categories": scan["categories"],
        "raw_data": scan["raw_data"],
    }
