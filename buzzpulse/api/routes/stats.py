from typing import Optional

from fastapi import APIRouter, Depends
from loguru import logger

from buzzpulse.api.deps import get_store
from buzzpulse.core.auth import optional_device, require_device
from buzzpulse.core.clock import Clock, get_clock
from buzzpulse.core.errors import InvalidCellType, InvalidInput, NotPresent
from buzzpulse.core.pulse_config import MAX_VIBE_LENGTH
from buzzpulse.geo.cells import BuildingCell, parse_cell_id
from buzzpulse.schemas.pulse import StatsResponse, VibeRequest, VibeResponse
from buzzpulse.services.pulse_store import HOUR_SECONDS, PulseStore

router = APIRouter()


# ------------------------------------------------------------------
# STATS
# ------------------------------------------------------------------

@router.get("/stats", response_model=StatsResponse)
def stats(
    cellId: Optional[str] = None,
    device_id: Optional[str] = Depends(optional_device),
    store: PulseStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    cell = parse_cell_id(cellId)
    now = clock.now()
    hour_ago = now - HOUR_SECONDS

    state = store.get_cell(cell.cell_id)
    last_hour = store.hits_between(cell.cell_id, hour_ago, now)
    typical = store.typical_hour_hits(cell.cell_id, now)

    return StatsResponse(
        cellId=cell.cell_id,
        score=store.current_score(state, now),
        lastTs=state.last_ts if state else None,
        lastHourHits=last_hour,
        typicalHourHits=typical,
        delta=last_hour - typical,
        currentPresence=store.presence_count(cell.cell_id, now),
        vibes=store.vibe_tallies(cell.cell_id, hour_ago),
        myVibe=store.my_vibe(cell.cell_id, device_id, now) if device_id else None,
    )


# ------------------------------------------------------------------
# VIBE
# ------------------------------------------------------------------

@router.post("/vibe", response_model=VibeResponse)
def vibe(
    payload: VibeRequest,
    device_id: str = Depends(require_device),
    store: PulseStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    value = (payload.vibe or "").strip()
    if not value or len(value) > MAX_VIBE_LENGTH:
        raise InvalidInput("Invalid vibe")

    now = clock.now()

    # the client's cellId claim is not trusted; presence decides the cell
    presence = store.get_presence(device_id)
    if not store.is_present(presence, now):
        raise NotPresent("Device is not currently present in a building")

    cell = parse_cell_id(presence.cell_id)
    if not isinstance(cell, BuildingCell):
        raise InvalidCellType("Vibes are only accepted for buildings")

    store.upsert_vibe(cell.cell_id, device_id, value, now)
    store.commit()

    logger.debug(f"[vibe] cell={cell.cell_id} vibe={value}")
    return VibeResponse(cellId=cell.cell_id, vibe=value)
