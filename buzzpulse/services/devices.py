import base64
import secrets
import uuid
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.orm import Session

from buzzpulse.core.errors import NotFound
from buzzpulse.models.device import Device


@dataclass(frozen=True)
class DeviceCredentials:
    device_id: str
    secret: str


# ---------- REGISTRATION ----------

def register_device(db: Session, now: int) -> DeviceCredentials:
    device_id = str(uuid.uuid4())
    secret = base64.b64encode(secrets.token_bytes(32)).decode("ascii")

    db.add(
        Device(
            device_id=device_id,
            secret=secret,
            created_at=now,
            last_seen=now,
            disabled=False,
        )
    )
    db.commit()

    logger.info(f"[devices] registered {device_id}")
    return DeviceCredentials(device_id=device_id, secret=secret)


# ---------- KILL-SWITCH ----------

def set_device_disabled(db: Session, device_id: str, disabled: bool) -> Device:
    device = db.get(Device, device_id)
    if not device:
        raise NotFound(f"Device not found: {device_id}")

    device.disabled = disabled
    db.commit()

    logger.info(f"[devices] {device_id} disabled={disabled}")
    return device


def disable_device(db: Session, device_id: str) -> Device:
    return set_device_disabled(db, device_id, True)


def enable_device(db: Session, device_id: str) -> Device:
    return set_device_disabled(db, device_id, False)
