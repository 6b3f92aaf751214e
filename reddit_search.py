"""
Reddit discussion search: public search.json for "<city> cost of living".
Links only; never affects pricing. Any failure returns [].
"""

import logging
import os
from typing import Optional

import requests

logger = logging.getLogger(__name__)

try:
    from config import REDDIT_SEARCH_URL, DISCUSSION_TIMEOUT, DISCUSSION_LIMIT
except ImportError:
    REDDIT_SEARCH_URL = os.environ.get("REDDIT_SEARCH_URL", "https://www.reddit.com/search.json")
    DISCUSSION_TIMEOUT = int(os.environ.get("DISCUSSION_TIMEOUT", "5"))
    DISCUSSION_LIMIT = int(os.environ.get("DISCUSSION_LIMIT", "10"))

REDDIT_BASE = "https://reddit.com"
USER_AGENT = "CostOfLivingResearch/1.0 (Educational Project)"


def discussion_query(city: str) -> str:
    return f"{city} cost of living"


def _parse_posts(payload) -> list[dict]:
    """Listing JSON -> [{title, subreddit, url, score, comments}]. Skips children without a title."""
    if not isinstance(payload, dict):
        return []
    listing = payload.get("data")
    if not isinstance(listing, dict):
        return []
    children = listing.get("children")
    if not isinstance(children, list):
        return []
    posts = []
    for child in children:
        post = child.get("data") if isinstance(child, dict) else None
        if not isinstance(post, dict) or not post.get("title"):
            continue
        posts.append({
            "title": post.get("title"),
            "subreddit": post.get("subreddit"),
            "url": f"{REDDIT_BASE}{post.get('permalink') or ''}",
            "score": post.get("score"),
            "comments": post.get("num_comments"),
        })
    return posts


def search_reddit(city: str, limit: Optional[int] = None, timeout: Optional[int] = None) -> list[dict]:
    """Top Reddit posts about living costs in a city, sorted by relevance."""
    query = discussion_query(city)
    logger.info("Searching Reddit for %r", query)
    try:
        r = requests.get(
            REDDIT_SEARCH_URL,
            params={"q": query, "limit": limit or DISCUSSION_LIMIT, "sort": "relevance"},
            headers={"User-Agent": USER_AGENT},
            timeout=timeout or DISCUSSION_TIMEOUT,
        )
        r.raise_for_status()
        data = r.json()
    except requests.Timeout:
        logger.warning("Reddit search timed out for %r", query)
        return []
    except (requests.RequestException, ValueError) as e:
        logger.warning("Reddit API error: %s", e)
        return []

    posts = _parse_posts(data)
    if not posts:
        logger.info("No Reddit discussions returned for %r", query)
    else:
        logger.info("Found %s Reddit discussions", len(posts))
    return posts
