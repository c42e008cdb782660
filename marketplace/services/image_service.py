# marketplace/services/image_service.py
from urllib.parse import quote

import requests
from flask import current_app

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
FALLBACK_IMAGE = "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=800"


def _search_query(name, description=None, limit=None):
    q = f"{name or ''} {description or ''}".strip()
    return q[:limit] if limit else q


def lookup_stock_image(name, description=None) -> str:
    """Best matching stock photo for a product, FALLBACK_IMAGE when none."""
    key = current_app.config.get("UNSPLASH_ACCESS_KEY")
    if not key:
        return FALLBACK_IMAGE

    query = _search_query(name, description, limit=100)
    try:
        resp = requests.get(
            UNSPLASH_SEARCH_URL,
            params={"query": query, "per_page": 1},
            headers={"Authorization": f"Client-ID {key}"},
            timeout=current_app.config.get("HTTP_TIMEOUT", 10),
        )
        resp.raise_for_status()
        results = resp.json().get("results") or []
        if results:
            return results[0]["urls"]["regular"]
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        current_app.logger.warning("Stock image lookup failed for %r: %s", query, e)
    return FALLBACK_IMAGE


def search_image_url(name, description=None) -> str:
    return f"https://source.unsplash.com/800x600/?{quote(_search_query(name, description))}"
