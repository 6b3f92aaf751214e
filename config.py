"""
Application configuration from environment variables.
Use .env for local overrides; set env in production.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Base paths
BASE_DIR = Path(__file__).resolve().parent

# Server
PORT = int(os.environ.get("PORT", "3001"))
FLASK_DEBUG = os.environ.get("FLASK_DEBUG", "false").strip().lower() in ("1", "true", "yes")
API_VERSION = "2.0"

# Numbeo scraper
NUMBEO_BASE_URL = os.environ.get("NUMBEO_BASE_URL", "https://www.numbeo.com").rstrip("/")
SCRAPER_TIMEOUT = int(os.environ.get("SCRAPER_TIMEOUT", "15"))
SCRAPER_DEBUG = os.environ.get("SCRAPER_DEBUG", "false").strip().lower() in ("1", "true", "yes")
# Set SCRAPE_ENABLED=false to serve fallback data only (offline / tests)
SCRAPE_ENABLED = os.environ.get("SCRAPE_ENABLED", "true").strip().lower() in ("1", "true", "yes")

# Reddit discussion search
REDDIT_SEARCH_URL = os.environ.get("REDDIT_SEARCH_URL", "https://www.reddit.com/search.json")
DISCUSSION_TIMEOUT = int(os.environ.get("DISCUSSION_TIMEOUT", "5"))
DISCUSSION_LIMIT = int(os.environ.get("DISCUSSION_LIMIT", "10"))
DISCUSSIONS_ENABLED = os.environ.get("DISCUSSIONS_ENABLED", "true").strip().lower() in ("1", "true", "yes")
