"""
Cost of Living API.

GET /api/cost-of-living/<city> combines a live Numbeo scrape with Reddit
discussion links, falling back to built-in estimates for major cities.
Set FLASK_DEBUG=true for dev (also enables the /debug scrape route); PORT and config via environment.
"""

import logging
import os
from datetime import datetime

from flask import Flask, jsonify
from flask_cors import CORS

from cost_of_living import CityNotFoundError, get_cost_of_living
from fallback_data import fallback_key
from numbeo_scraper import city_page_url, city_slug, fetch_city_page, scan_tables

try:
    from config import PORT, FLASK_DEBUG, API_VERSION
except ImportError:
    PORT = int(os.environ.get("PORT", "3001"))
    FLASK_DEBUG = os.environ.get("FLASK_DEBUG", "false").strip().lower() in ("1", "true", "yes")
    API_VERSION = "2.0"

logging.basicConfig(
    level=logging.DEBUG if FLASK_DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

SUPPORTED_CITIES = [
    "New York", "Los Angeles", "San Francisco", "Seattle", "Austin", "Boston", "Chicago",
    "Mountain View, CA", "London", "Tokyo", "Paris", "Singapore", "and many more",
]


# ---------- Routes ----------

@app.route("/api/cost-of-living/<city>")
def get_city_cost_of_living(city):
    """Cost of living for one city. 404 with suggestions when unknown; never a raw 500 page."""
    logger.info("Request for: %s", city)
    try:
        result = get_cost_of_living(city)
        logger.info("Prepared response for %s (sources=%s)", city, result["sources"][0])
        return jsonify(result)
    except CityNotFoundError as e:
        logger.warning("No data available for %s", city)
        return jsonify(e.to_dict()), 404
    except Exception as e:
        logger.exception("Cost of living endpoint: %s", e)
        return jsonify({
            "error": "Server error",
            "message": "An unexpected error occurred. Please try again.",
            "details": str(e),
        }), 500


@app.route("/health")
def health():
    return jsonify({
        "status": "ok",
        "message": "Cost of Living API is running",
        "timestamp": datetime.now().isoformat(),
        "version": API_VERSION,
    })


@app.route("/")
def index():
    return jsonify({
        "message": "Cost of Living API",
        "version": API_VERSION,
        "endpoints": {
            "health": "GET /health",
            "getCityData": "GET /api/cost-of-living/:city",
        },
        "supportedCities": SUPPORTED_CITIES,
        "example": "/api/cost-of-living/New York",
    })


def _register_debug_routes(target=None):
    """Register /api/cost-of-living/<city>/debug only when FLASK_DEBUG is set."""
    target = target or app

    @target.route("/api/cost-of-living/<city>/debug")
    def debug_city(city):
        slug = city_slug(city)
        debug_info = {
            "timestamp": datetime.now().isoformat(),
            "city": city,
            "slug": slug,
            "fallback_key": fallback_key(city),
            "url": city_page_url(slug) if slug else None,
            "steps": [],
        }
        if not slug:
            debug_info["steps"].append({"test": "Slug", "status": "failed", "error": "empty slug"})
            return jsonify(debug_info)
        html = fetch_city_page(slug)
        if html is None:
            debug_info["steps"].append({"test": "Numbeo HTTP Request", "status": "failed"})
            return jsonify(debug_info)
        debug_info["steps"].append({
            "test": "Numbeo HTTP Request",
            "status": "success",
            "response_length": len(html),
        })
        try:
            scan = scan_tables(html)
            debug_info["steps"].append({
                "test": "Table Scan",
                "status": "success" if scan["raw_data"] else "failed",
                "tables_found": scan["tables_found"],
                "categories": scan["categories"],
                "raw_data": scan["raw_data"],
            })
        except Exception as e:
            logger.warning("Debug table scan for %s: %s", slug, e)
            debug_info["steps"].append({"test": "Table Scan", "status": "failed", "error": str(e)})
        return jsonify(debug_info)


if FLASK_DEBUG:
    _register_debug_routes()


def _log_startup_banner(port):
    logger.info("=" * 50)
    logger.info("Cost of Living API v%s is running", API_VERSION)
    logger.info("Server:  http://localhost:%s", port)
    logger.info("Health:  http://localhost:%s/health", port)
    logger.info("Example: http://localhost:%s/api/cost-of-living/New%%20York", port)
    logger.info("=" * 50)


if __name__ == "__main__":
    _log_startup_banner(PORT)
    app.run(host="0.0.0.0", port=PORT, debug=FLASK_DEBUG)
