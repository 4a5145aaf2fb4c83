import random
from typing import Any, Dict, List, Optional, Tuple
import httpx
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.access_control import Subject, check
from app.core.config import settings
from app.core.database import unit_of_work
from app.core.errors import UpstreamError
from app.core.logger import logger
from app.models.trips.trip_model import Trip, TripPoint
from app.models.user.user import UserRole
from app.services.preferences.preference_service import ensure_preferences

TOURISM_TYPES = ("attraction", "museum", "viewpoint", "gallery", "theme_park", "zoo", "aquarium", "artwork")

PREFERENCES_BY_TYPE: Dict[str, List[str]] = {
    "attraction": ["Sightseeing", "Photography", "Culture", "History"],
    "museum": ["Education", "Culture", "History", "Art"],
    "viewpoint": ["Photography", "Sightseeing", "Nature"],
    "gallery": ["Art", "Culture", "Photography"],
    "theme_park": ["Family", "Entertainment", "Adventure"],
    "zoo": ["Family", "Education", "Nature"],
    "aquarium": ["Family", "Education", "Marine Life"],
    "artwork": ["Art", "Culture", "Photography"],
}

PRICE_RANGES: Dict[str, Tuple[float, float]] = {
    "museum": (15000, 50000),
    "theme_park": (100000, 300000),
    "zoo": (30000, 80000),
    "aquarium": (50000, 150000),
    "attraction": (0, 25000),
    "viewpoint": (0, 15000),
    "gallery": (10000, 40000),
    "artwork": (0, 10000),
}

# minutes
DURATION_RANGES: Dict[str, Tuple[int, int]] = {
    "museum": (60, 180),
    "theme_park": (240, 480),
    "zoo": (120, 300),
    "aquarium": (90, 240),
    "attraction": (30, 120),
    "viewpoint": (20, 60),
    "gallery": (45, 120),
    "artwork": (10, 30),
}

COVER_IMAGES: Dict[str, str] = {
    "museum": "https://images.unsplash.com/photo-1566127992631-137a642a90f4?w=800",
    "theme_park": "https://images.unsplash.com/photo-1544552866-d3ed42536cfd?w=800",
    "zoo": "https://images.unsplash.com/photo-1564760055775-d63b17a55c44?w=800",
    "aquarium": "https://images.unsplash.com/photo-1544551763-46a013bb70d5?w=800",
    "viewpoint": "https://images.unsplash.com/photo-1477959858617-67f85cf4f1df?w=800",
    "gallery": "https://images.unsplash.com/photo-1578662996442-48f60103fc96?w=800",
    "artwork": "https://images.unsplash.com/photo-1578662996442-48f60103fc96?w=800",
    "attraction": "https://images.unsplash.com/photo-1539650116574-75c0c6d73f6e?w=800",
}

POINTS_PER_TRIP = 3
POINT_SPREAD = 0.001


def build_overpass_query(bbox: str) -> str:
    pattern = "|".join(TOURISM_TYPES)
    lines = ["[out:json][timeout:25];", "("]
    for element in ("node", "way", "relation"):
        lines.append(f'  {element}["tourism"~"{pattern}"]["name"]({bbox});')
    lines += [");", "out center meta;"]
    return "\n".join(lines)


def describe(tags: Dict[str, str]) -> str:
    parts = ["Explore this amazing attraction."]
    if tags.get("addr:full"):
        parts.append(f"Located at {tags['addr:full']}.")
    if tags.get("website"):
        parts.append("Visit their website for more information.")
    if tags.get("phone"):
        parts.append(f"Contact: {tags['phone']}.")
    parts.append("Perfect for photography and sightseeing!")
    return " ".join(parts)


def price_and_duration(tourism_type: str, rng: random.Random) -> Tuple[float, int]:
    low, high = PRICE_RANGES.get(tourism_type, PRICE_RANGES["attraction"])
    min_minutes, max_minutes = DURATION_RANGES.get(tourism_type, DURATION_RANGES["attraction"])
    price = round(low + rng.random() * (high - low), 2)
    duration = max(1, int(min_minutes + rng.random() * (max_minutes - min_minutes)))
    return price, duration


def _coordinates(element: Dict[str, Any]) -> Optional[Tuple[float, float]]:
    center = element.get("center")
    if center:
        return center["lat"], center["lon"]
    if "lat" in element and "lon" in element:
        return element["lat"], element["lon"]
    return None


async def fetch_attractions(client: httpx.AsyncClient) -> List[Dict[str, Any]]:
    query = build_overpass_query(settings.SEED_BBOX)
    try:
        response = await client.post(settings.OVERPASS_URL, data={"data": query})
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error(f"Overpass request failed: {exc!r}")
        raise UpstreamError("Failed to query OpenStreetMap") from exc
    return payload.get("elements", [])


async def seed_trips(
    db: AsyncSession,
    subject: Optional[Subject],
    client: httpx.AsyncClient,
    rng: Optional[random.Random] = None,
) -> int:
    """Create demo trips for the caller from OpenStreetMap tourism data.

    Returns how many trips were created; all of them are written in one
    transaction.
    """
    subject = check(subject, "create trips", roles=(UserRole.trip_owner,))
    rng = rng or random.Random()

    elements = await fetch_attractions(client)

    candidates = []
    for element in elements:
        if len(candidates) >= settings.SEED_LIMIT:
            break
        tags = element.get("tags") or {}
        name = tags.get("name")
        coords = _coordinates(element)
        if not name or coords is None:
            continue
        candidates.append((name, tags, coords))

    if not candidates:
        logger.info("Seed found no suitable attractions")
        return 0

    async with unit_of_work(db, "seed trips"):
        for name, tags, (lat, lon) in candidates:
            tourism_type = tags.get("tourism", "attraction")
            price, duration = price_and_duration(tourism_type, rng)
            preferences = await ensure_preferences(db, PREFERENCES_BY_TYPE.get(tourism_type, []))
            points = [
                TripPoint(
                    latitude=lat + (rng.random() - 0.5) * POINT_SPREAD,
                    longitude=lon + (rng.random() - 0.5) * POINT_SPREAD,
                )
                for _ in range(POINTS_PER_TRIP)
            ]
            db.add(Trip(
                name=name,
                description=describe(tags),
                cover_image=COVER_IMAGES.get(tourism_type, COVER_IMAGES["attraction"]),
                price=price,
                duration=duration,
                start_latitude=lat,
                start_longitude=lon,
                end_latitude=lat,
                end_longitude=lon,
                user_id=subject.id,
                points=points,
                preferences=preferences,
            ))
        await db.flush()

    logger.info(f"Seeded {len(candidates)} trips for user {subject.id}")
    return len(candidates)
