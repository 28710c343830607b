import json
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from loguru import logger

from buzzpulse.core.config import BUILDINGS_GEOJSON


@dataclass(frozen=True)
class Building:
    slug: str
    name: str
    lat: float
    lng: float


# Campus buildings the server can place on the map without any footprint file
BUILDINGS: dict[str, Building] = {
    "eng-quad": Building("eng-quad", "Engineering Quad", 37.42805, -122.1723),
    "main-quad": Building("main-quad", "Main Quad", 37.42745, -122.1701),
}

_NON_SLUG = re.compile(r"[^a-z0-9_-]+")


def slugify(name: str) -> str:
    return _NON_SLUG.sub("-", name.strip().lower()).strip("-")


def _outer_ring(geometry: dict) -> list:
    kind = geometry.get("type")
    coords = geometry.get("coordinates") or []
    if kind == "Polygon" and coords:
        return coords[0]
    if kind == "MultiPolygon" and coords and coords[0]:
        return coords[0][0]
    return []


def _ring_center(ring: list) -> tuple[float, float]:
    # GeoJSON rings repeat the first vertex at the end
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    # vertex average is fine for building-sized polygons
    lng = sum(p[0] for p in ring) / len(ring)
    lat = sum(p[1] for p in ring) / len(ring)
    return lat, lng


def buildings_from_geojson(data: dict) -> dict[str, Building]:
    """
    Build a registry from a GeoJSON FeatureCollection of footprints.
    Features without a usable polygon or id are skipped.
    """
    out: dict[str, Building] = {}
    for feature in data.get("features") or []:
        props = feature.get("properties") or {}
        name = props.get("name") or ""
        slug = props.get("id") or props.get("slug") or slugify(name)
        slug = str(slug).lower()
        if not slug or _NON_SLUG.search(slug):
            logger.warning(f"Skipping building with unusable id: {slug!r}")
            continue

        ring = _outer_ring(feature.get("geometry") or {})
        if not ring:
            logger.warning(f"Skipping building without polygon: {slug}")
            continue

        lat, lng = _ring_center(ring)
        out[slug] = Building(slug, name or slug, lat, lng)
    return out


def load_buildings_geojson(path: str | Path) -> dict[str, Building]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    buildings = buildings_from_geojson(data)
    logger.info(f"Loaded {len(buildings)} buildings from {path}")
    return buildings


@lru_cache(maxsize=1)
def get_buildings() -> dict[str, Building]:
    registry = dict(BUILDINGS)
    if BUILDINGS_GEOJSON:
        registry.update(load_buildings_geojson(BUILDINGS_GEOJSON))
    return registry
