from fastapi import APIRouter, Depends
from loguru import logger

from buzzpulse.api.deps import get_store, resolve_ts
from buzzpulse.core.auth import require_device
from buzzpulse.core.clock import Clock, get_clock
from buzzpulse.geo.cells import parse_cell_id
from buzzpulse.schemas.pulse import IngestRequest, IngestResponse
from buzzpulse.services.pulse_store import PulseStore

router = APIRouter()


@router.post("/ingest", response_model=IngestResponse)
def ingest(
    payload: IngestRequest,
    device_id: str = Depends(require_device),
    store: PulseStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    cell = parse_cell_id(payload.cell_id)
    now = clock.now()
    ts = resolve_ts(payload.ts, now, store.settings)

    score = store.record_hit(cell.cell_id, ts)
    # presence is server-timed; the signed request is already known to be fresh
    store.upsert_presence(device_id, cell.cell_id, now)
    store.commit()

    presence = store.presence_count(cell.cell_id, now)
    logger.debug(f"[ingest] cell={cell.cell_id} ts={ts} score={score:.3f} presence={presence}")

    return IngestResponse(cellId=cell.cell_id, ts=ts, score=score, presence=presence)
