import re
from dataclasses import dataclass
from typing import Union

from buzzpulse.core.errors import InvalidCell
from buzzpulse.core.pulse_config import BUILDING_RADIUS_METERS
from buzzpulse.geo import geohash
from buzzpulse.geo.buildings import Building

GEOHASH_RE = re.compile(r"^[0-9b-hjkmnp-z]{5,12}$", re.IGNORECASE)
BUILDING_RE = re.compile(r"^b:([a-z0-9_-]+)$")


@dataclass(frozen=True)
class GeohashCell:
    geohash: str

    @property
    def cell_id(self) -> str:
        return self.geohash


@dataclass(frozen=True)
class BuildingCell:
    slug: str

    @property
    def cell_id(self) -> str:
        return f"b:{self.slug}"


CellRef = Union[GeohashCell, BuildingCell]


@dataclass(frozen=True)
class ResolvedPoint:
    lat: float
    lng: float
    radius: float


def parse_cell_id(raw) -> CellRef:
    cell_id = str(raw or "").strip()
    if not cell_id:
        raise InvalidCell("Missing cellId")

    m = BUILDING_RE.match(cell_id)
    if m:
        return BuildingCell(m.group(1))
    if GEOHASH_RE.match(cell_id):
        return GeohashCell(cell_id.lower())
    raise InvalidCell("Invalid cellId")


def resolve_point(cell: CellRef, buildings: dict[str, Building]) -> ResolvedPoint | None:
    """Map a cell to a map point, or None if it cannot be placed."""
    if isinstance(cell, BuildingCell):
        building = buildings.get(cell.slug)
        if building is None:
            return None
        return ResolvedPoint(building.lat, building.lng, BUILDING_RADIUS_METERS)

    lat, lng = geohash.decode(cell.geohash)
    return ResolvedPoint(lat, lng, geohash.cell_radius_meters(len(cell.geohash)))
