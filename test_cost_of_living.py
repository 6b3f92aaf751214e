"""Assembly: estimates, defaults, live vs fallback selection and not-found errors."""

from datetime import datetime

import pytest

from cost_of_living import (
    ESTIMATED_SOURCES,
    LIVE_SOURCES,
    CityNotFoundError,
    build_cost_result,
    estimate_entertainment,
    estimate_groceries,
    fetch_sources,
    get_cost_of_living,
    round_half_up,
)
from fallback_data import FallbackRecord, build_fallback_table


def no_scrape(city):
    return None


def no_discussions(city):
    return []


def scraped(categories):
    return lambda city: {"source": "Numbeo", "city": city, "categories": dict(categories), "raw_data": []}


def _numbers(result):
    cats = result["categories"]
    return (
        cats["housing"]["cityCenter"],
        cats["housing"]["outside"],
        cats["food"]["monthly"],
        cats["transportation"]["monthly"],
        cats["utilities"]["monthly"],
        cats["entertainment"]["monthly"],
    )


# ---------- estimator ----------

def test_estimates_from_meal_price():
    assert estimate_groceries(18) == 360
    assert estimate_entertainment(18) == 180


def test_estimates_without_meal_price():
    assert estimate_groceries(None) == 400
    assert estimate_entertainment(None) == 150
    assert estimate_groceries(0) == 400


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(1234.49) == 1234
    assert estimate_entertainment(12.25) == 123


# ---------- build_cost_result ----------

def test_build_cost_result_fills_defaults():
    result = build_cost_result("Somewhere", {}, live=True, now=datetime(2024, 3, 7))
    assert _numbers(result) == (1200, 800, 400, 70, 150, 150)
    assert result["lastUpdated"] == "3/7/2024"
    assert result["currency"] == "USD"


def test_build_cost_result_rounds_and_labels():
    result = build_cost_result(
        "Lisbon",
        {"housingCenter": 1234.5, "housingOutside": 899.4, "mealRestaurant": 12.5,
         "transportation": 40.0, "utilities": 120.6},
        live=True,
    )
    assert _numbers(result) == (1235, 899, 250, 40, 121, 125)
    labels = {key: value["label"] for key, value in result["categories"].items()}
    assert labels == {
        "housing": "Housing (1-bedroom apt)",
        "food": "Food & Groceries",
        "transportation": "Transportation",
        "utilities": "Utilities",
        "entertainment": "Entertainment",
    }


def test_build_cost_result_truncates_discussions():
    posts = [{"title": f"post {i}"} for i in range(10)]
    result = build_cost_result("Austin", {}, live=False, discussions=posts)
    assert len(result["redditDiscussions"]) == 5
    assert result["redditDiscussions"][0]["title"] == "post 0"


# ---------- get_cost_of_living ----------

def test_new_york_fallback_when_scrape_fails():
    result = get_cost_of_living("new york", scraper=no_scrape, searcher=no_discussions)
    assert result["city"] == "new york"
    assert _numbers(result) == (3500, 2500, 400, 127, 150, 200)
    assert result["sources"] == ESTIMATED_SOURCES


def test_live_data_used_when_housing_center_scraped():
    scraper = scraped({"housingCenter": 2100.0, "mealRestaurant": 18.0, "transportation": 65.0})
    result = get_cost_of_living("Nowhereville", scraper=scraper, searcher=no_discussions)
    assert result["sources"] == LIVE_SOURCES
    # missing categories come from defaults, not the fallback table
    assert _numbers(result) == (2100, 800, 360, 65, 150, 180)


def test_scrape_without_housing_center_falls_back():
    scraper = scraped({"mealRestaurant": 99.0, "transportation": 10.0})
    result = get_cost_of_living("London", scraper=scraper, searcher=no_discussions)
    assert result["sources"] == ESTIMATED_SOURCES
    assert result["categories"]["housing"]["cityCenter"] == 2200
    assert result["categories"]["transportation"]["monthly"] == 165


def test_unknown_city_raises_not_found():
    with pytest.raises(CityNotFoundError) as excinfo:
        get_cost_of_living("Nowhereville", scraper=no_scrape, searcher=no_discussions)
    body = excinfo.value.to_dict()
    assert body["error"] == "City not found"
    assert "Nowhereville" in body["message"]
    assert body["suggestion"]
    assert body["tip"]
    assert "Mountain View" not in body["suggestion"]


def test_mountain_suggestion():
    with pytest.raises(CityNotFoundError) as excinfo:
        get_cost_of_living("Mountain Home, ID", scraper=no_scrape, searcher=no_discussions)
    assert excinfo.value.suggestion == 'Try: "Mountain View" without CA'


def test_injected_fallback_table():
    table = build_fallback_table([("Porto", (), FallbackRecord(900, 700, 8, 30, 90))])
    result = get_cost_of_living("Porto", scraper=no_scrape, searcher=no_discussions, fallback_table=table)
    assert _numbers(result) == (900, 700, 160, 30, 90, 80)
    with pytest.raises(CityNotFoundError):
        get_cost_of_living("New York", scraper=no_scrape, searcher=no_discussions, fallback_table=table)


def test_discussion_failure_does_not_fail_request():
    def broken_search(city):
        raise RuntimeError("reddit down")

    result = get_cost_of_living("Tokyo", scraper=no_scrape, searcher=broken_search)
    assert result["redditDiscussions"] == []
    assert result["categories"]["housing"]["cityCenter"] == 1200


def test_scraper_exception_degrades_to_fallback():
    def broken_scrape(city):
        raise RuntimeError("parser exploded")

    result = get_cost_of_living("Paris", scraper=broken_scrape, searcher=no_discussions)
    assert result["sources"] == ESTIMATED_SOURCES
    assert result["categories"]["housing"]["cityCenter"] == 1400


def test_fetch_sources_runs_both():
    seen = []

    def scraper(city):
        seen.append(("scrape", city))
        return {"categories": {}}

    def searcher(city):
        seen.append(("search", city))
        return [{"title": "x"}]

    scraped_data, posts = fetch_sources("Austin", scraper=scraper, searcher=searcher)
    assert scraped_data == {"categories": {}}
    assert posts == [{"title": "x"}]
    assert sorted(seen) == [("scrape", "Austin"), ("search", "Austin")]


def test_repeated_calls_are_identical():
    first = get_cost_of_living("Seattle", scraper=no_scrape, searcher=no_discussions)
    second = get_cost_of_living("Seattle", scraper=no_scrape, searcher=no_discussions)
    first.pop("lastUpdated")
    second.pop("lastUpdated")
    assert first == second
