"""
Google Play rating lookup tool.
What it does:
- Searches the Play Store for an app by free-text name
- Fetches the top match's details
- Normalizes them into a RatingRecord

And, the main purpose:
Single source of app ratings for the agent and the scheduled rating check.
"""


import asyncio
from datetime import datetime, timezone
from typing import Any

from google_play_scraper import app as gplay_app, search as gplay_search
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from playstore_agent.core.config import settings
from playstore_agent.core.logging import get_logger
from playstore_agent.tools.registry import register

log = get_logger("tools.playstore")

UNKNOWN = "Unknown"


class RatingLookupError(RuntimeError):
    pass


class RatingRecord(BaseModel):
    """Normalized app-metrics snapshot. Serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    app_id: str = Field(..., min_length=1)
    title: str
    rating: float = Field(..., ge=0.0, le=5.0)
    ratings_count: int = Field(..., ge=0)
    reviews: int = Field(..., ge=0)
    installs: str
    price: str
    developer: str
    last_updated: str
    version: str
    url: str

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


def _format_price(details: dict[str, Any]) -> str:
    if details.get("free"):
        return "Free"
    price_text = details.get("priceText")
    if price_text:
        return str(price_text)
    price = details.get("price")
    if isinstance(price, (int, float)) and price > 0:
        currency = details.get("currency") or "USD"
        return f"{price:.2f} {currency}"
    return UNKNOWN


def _format_updated(updated: Any) -> str:
    # google-play-scraper reports `updated` as unix seconds
    if isinstance(updated, (int, float)) and updated > 0:
        dt = datetime.fromtimestamp(updated, tz=timezone.utc)
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return UNKNOWN


def normalize_app_details(details: dict[str, Any]) -> RatingRecord:
    app_id = details.get("appId") or ""
    rating = float(details.get("score") or 0)
    return RatingRecord(
        app_id=app_id,
        title=details.get("title") or UNKNOWN,
        rating=min(max(rating, 0.0), 5.0),
        ratings_count=int(details.get("ratings") or 0),
        reviews=int(details.get("reviews") or 0),
        installs=details.get("installs") or UNKNOWN,
        price=_format_price(details),
        developer=details.get("developer") or UNKNOWN,
        last_updated=_format_updated(details.get("updated")),
        version=details.get("version") or UNKNOWN,
        url=details.get("url") or f"https://play.google.com/store/apps/details?id={app_id}",
    )


class PlayStoreClient:
    def __init__(self, lang: str | None = None, country: str | None = None):
        self.lang = lang or settings.PLAYSTORE_LANG
        self.country = country or settings.PLAYSTORE_COUNTRY

    async def _search_app_id(self, app_name: str) -> str:
        results = await asyncio.to_thread(
            gplay_search, app_name, n_hits=1, lang=self.lang, country=self.country
        )
        for hit in results or []:
            if hit.get("appId"):
                return hit["appId"]
        raise RatingLookupError(f"No app found with name: {app_name}")

    async def lookup(self, app_name: str) -> RatingRecord:
        """
        Resolve a free-text app name to its current Play Store rating record.
        Every failure (no match, scraper/network error, bad payload) surfaces
        as RatingLookupError.
        """
        try:
            app_id = await self._search_app_id(app_name)
            details = await asyncio.to_thread(
                gplay_app, app_id, lang=self.lang, country=self.country
            )
            return normalize_app_details(details)
        except Exception as e:
            log.warning(f"Lookup failed for '{app_name}': {e}")
            raise RatingLookupError(f"Failed to fetch app details: {e}") from e


_default_client: PlayStoreClient | None = None


def get_default_client() -> PlayStoreClient:
    global _default_client
    if _default_client is None:
        _default_client = PlayStoreClient()
    return _default_client


@register(
    "get-playstore-rating",
    description="Get current ratings and information for an app from Google Play Store",
    parameters={
        "type": "object",
        "properties": {
            "app_name": {"type": "string", "description": "Name of the app to search for"},
        },
        "required": ["app_name"],
    },
)
async def get_playstore_rating(app_name: str) -> dict:
    record = await get_default_client().lookup(app_name)
    return record.to_wire()
