import math

from fastapi import Depends
from sqlalchemy.orm import Session

from buzzpulse.core.db import get_db
from buzzpulse.core.errors import InvalidInput
from buzzpulse.core.pulse_config import PulseSettings, get_settings
from buzzpulse.services.pulse_store import DAY_SECONDS, PulseStore


def get_store(
    db: Session = Depends(get_db),
    settings: PulseSettings = Depends(get_settings),
) -> PulseStore:
    return PulseStore(db, settings)


def resolve_ts(value, now: int, settings: PulseSettings) -> int:
    """
    Floor a client-supplied epoch timestamp, or use server time.

    Accepted timestamps lie between the start of the typical-hour lookback
    and the replay window ahead of now; anything else is rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return now
    if not math.isfinite(value):
        return now

    earliest = now - settings.typical_lookback_days * DAY_SECONDS
    latest = now + settings.replay_window_sec
    if not earliest <= value <= latest:
        raise InvalidInput("ts out of range")
    return int(math.floor(value))
