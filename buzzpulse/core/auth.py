import hashlib
import hmac
from typing import Optional

from fastapi import Depends, Header, Request
from loguru import logger
from sqlalchemy.orm import Session

from buzzpulse.core.clock import Clock, get_clock
from buzzpulse.core.db import get_db
from buzzpulse.core.errors import Unauthorized
from buzzpulse.core.pulse_config import PulseSettings, get_settings
from buzzpulse.models.device import Device

# One message for every failure so callers cannot tell which part was wrong.
_UNAUTHORIZED = "Unauthorized"


# ------------------------------------------------------------
# Signing
# ------------------------------------------------------------
def compute_signature(device_id: str, timestamp: str, body: str, secret: str) -> str:
    message = f"{device_id}.{timestamp}.{body}.{secret}"
    return hashlib.sha256(message.encode("utf-8")).hexdigest()


def _reject(reason: str) -> Unauthorized:
    logger.debug(f"[auth] rejected: {reason}")
    return Unauthorized(_UNAUTHORIZED)


# ------------------------------------------------------------
# Verification
# ------------------------------------------------------------
def authenticate(
    db: Session,
    settings: PulseSettings,
    now: int,
    device_id: Optional[str],
    timestamp: Optional[str],
    signature: Optional[str],
    body: str,
) -> str:
    """
    Verify a signed request and return the device id.

    Updates ``last_seen`` on success. Raises ``Unauthorized`` otherwise.
    """
    if not device_id or not timestamp or not signature:
        raise _reject("missing headers")

    try:
        ts = int(timestamp)
    except ValueError:
        raise _reject("non-integer timestamp") from None

    if abs(now - ts) > settings.replay_window_sec:
        raise _reject(f"timestamp skew {now - ts}s")

    device = db.get(Device, device_id)
    if device is None:
        raise _reject("unknown device")
    if device.disabled:
        raise _reject(f"disabled device {device_id}")

    expected = compute_signature(device_id, timestamp, body, device.secret)
    provided = signature.strip().lower().encode("utf-8")
    if not hmac.compare_digest(expected.encode("ascii"), provided):
        raise _reject(f"bad signature for {device_id}")

    device.last_seen = now
    db.commit()
    return device_id


# ------------------------------------------------------------
# FastAPI dependencies
# ------------------------------------------------------------
async def _raw_body(request: Request) -> str:
    body = await request.body()
    return body.decode("utf-8", errors="replace")


async def require_device(
    request: Request,
    x_device_id: Optional[str] = Header(default=None),
    x_timestamp: Optional[str] = Header(default=None),
    x_signature: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    settings: PulseSettings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> str:
    body = await _raw_body(request)
    return authenticate(
        db, settings, clock.now(), x_device_id, x_timestamp, x_signature, body
    )


async def optional_device(
    request: Request,
    x_device_id: Optional[str] = Header(default=None),
    x_timestamp: Optional[str] = Header(default=None),
    x_signature: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    settings: PulseSettings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> Optional[str]:
    if not x_device_id:
        return None
    body = await _raw_body(request)
    try:
        return authenticate(
            db, settings, clock.now(), x_device_id, x_timestamp, x_signature, body
        )
    except Unauthorized:
        return None
