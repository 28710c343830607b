from sqlalchemy import Column, Integer, String, UniqueConstraint, Index

from buzzpulse.core.db import Base


class Vibe(Base):
    __tablename__ = "vibes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cell_id = Column(String, nullable=False)
    vibe = Column(String, nullable=False)
    ts = Column(Integer, nullable=False)
    device_id = Column(String, nullable=False)

    # ts // 3600
    hour = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("cell_id", "device_id", "hour", name="uq_vibes_cell_device_hour"),
        Index("idx_vibes_cell_ts", "cell_id", "ts"),
    )
