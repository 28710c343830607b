from sqlalchemy import Column, String, Integer, Boolean

from buzzpulse.core.db import Base


class Device(Base):
    __tablename__ = "devices"

    device_id = Column(String, primary_key=True)
    secret = Column(String, nullable=False)

    created_at = Column(Integer, nullable=False)
    last_seen = Column(Integer, nullable=False)

    # manual kill-switch
    disabled = Column(Boolean, nullable=False, default=False)
