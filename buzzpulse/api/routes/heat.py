import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger

from buzzpulse.api.deps import get_store
from buzzpulse.core.clock import Clock, get_clock
from buzzpulse.core.errors import InvalidBBox, InvalidInput
from buzzpulse.core.pulse_config import DEFAULT_HEAT_MIN, DEFAULT_HEAT_WINDOW_MINUTES
from buzzpulse.geo.buildings import get_buildings
from buzzpulse.geo.cells import parse_cell_id, resolve_point
from buzzpulse.schemas.pulse import HeatPoint, HeatResponse
from buzzpulse.services.pulse_store import PulseStore

router = APIRouter()


# ------------------------------------------------------------------
# Query parsing
# ------------------------------------------------------------------

def parse_bbox(raw: Optional[str]) -> tuple[float, float, float, float]:
    if not raw:
        raise InvalidBBox("Missing bbox")
    try:
        parts = [float(p.strip()) for p in raw.split(",")]
    except ValueError:
        raise InvalidBBox("Invalid bbox format") from None
    if len(parts) != 4 or not all(math.isfinite(p) for p in parts):
        raise InvalidBBox("Invalid bbox format")
    west, south, east, north = parts
    return west, south, east, north


def parse_floor_int(raw: Optional[str], default: int, name: str) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        raise InvalidInput(f"Invalid {name}") from None
    if not math.isfinite(value):
        raise InvalidInput(f"Invalid {name}")
    return max(1, math.floor(value))


# ------------------------------------------------------------------
# HEAT
# ------------------------------------------------------------------

@router.get("/heat", response_model=HeatResponse, response_model_exclude_none=True)
def heat(
    bbox: Optional[str] = None,
    min_count: Optional[str] = Query(default=None, alias="min"),
    window: Optional[str] = None,
    debug: Optional[str] = None,
    store: PulseStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    west, south, east, north = parse_bbox(bbox)
    min_k = parse_floor_int(min_count, DEFAULT_HEAT_MIN, "min")
    window_minutes = parse_floor_int(window, DEFAULT_HEAT_WINDOW_MINUTES, "window")
    show_ids = debug == "1"

    now = clock.now()
    since = now - window_minutes * 60
    buildings = get_buildings()

    points: list[HeatPoint] = []
    for cell_state in store.heat_candidates(since, now, min_k):
        try:
            cell = parse_cell_id(cell_state.cell_id)
            point = resolve_point(cell, buildings)
        except InvalidInput:
            logger.warning(f"[heat] skipping undecodable cell {cell_state.cell_id!r}")
            continue
        if point is None:
            continue

        # point-in-box on the resolved centre, not a cell/box intersection
        if not (west <= point.lng <= east and south <= point.lat <= north):
            continue

        points.append(
            HeatPoint(
                lat=point.lat,
                lng=point.lng,
                score=store.current_score(cell_state, now),
                radius=point.radius,
                cellId=cell_state.cell_id if show_ids else None,
            )
        )

    return HeatResponse(count=len(points), data=points)
