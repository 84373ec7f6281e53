"""
Google Places API integration for place search.
"""

import logging
from typing import Any

import requests

from tripplanner.core.settings import Settings

logger = logging.getLogger(__name__)

PLACES_API_BASE = "https://maps.googleapis.com/maps/api/place"


class PlacesService:
    """Service for interacting with Google Places API."""

    def __init__(self, settings: Settings):
        if not settings.google_maps_api_key:
            raise ValueError("GOOGLE_MAPS_API_KEY not found in environment variables")
        self.api_key = settings.google_maps_api_key
        self.timeout = settings.places_timeout_seconds

    def text_search(
        self, query: str, location: str, language: str = "en", limit: int = 8
    ) -> list[dict[str, Any]]:
        """
        Search for places using Text Search API.

        Args:
            query: Search query (e.g., "pho", "rooftop bars")
            location: City/destination name appended to the query
            language: Result language
            limit: Maximum number of places returned

        Returns:
            List of place dictionaries, empty on any failure
        """
        params = {
            "query": f"{query} in {location}",
            "language": language,
            "key": self.api_key,
        }
        try:
            response = requests.get(
                f"{PLACES_API_BASE}/textsearch/json", params=params, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            logger.error(f"Error searching places: {e}")
            return []

        status = data.get("status")
        if status not in ("OK", "ZERO_RESULTS"):
            logger.warning(f"Places search failed: {status}")
            return []

        places = []
        for place in data.get("results", [])[:limit]:
            location_data = (place.get("geometry") or {}).get("location") or {}
            photos = place.get("photos") or []
            places.append(
                {
                    "id": place.get("place_id"),
                    "name": place.get("name") or "",
                    "address": place.get("formatted_address") or "",
                    "rating": place.get("rating"),
                    "user_ratings_total": place.get("user_ratings_total") or 0,
                    "coordinates": {
                        "latitude": location_data.get("lat"),
                        "longitude": location_data.get("lng"),
                    },
                    "photo_ref": photos[0].get("photo_reference") if photos else None,
                    "price_level": place.get("price_level"),
                }
            )
        return places
