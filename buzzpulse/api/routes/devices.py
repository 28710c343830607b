from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from buzzpulse.core.clock import Clock, get_clock
from buzzpulse.core.db import get_db
from buzzpulse.schemas.pulse import RegisterResponse
from buzzpulse.services.devices import register_device

router = APIRouter()


@router.post("/register", response_model=RegisterResponse)
def device_register(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    # the secret is only ever returned here
    creds = register_device(db, clock.now())
    return RegisterResponse(deviceId=creds.device_id, secret=creds.secret)
