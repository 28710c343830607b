from sqlalchemy import Column, String, Integer, Index

from buzzpulse.core.db import Base


class DevicePresence(Base):
    __tablename__ = "device_presence"

    device_id = Column(String, primary_key=True)
    cell_id = Column(String, nullable=False)
    updated_ts = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_presence_cell_updated", "cell_id", "updated_ts"),
    )
