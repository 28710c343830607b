from sqlalchemy import Column, Integer, String, Float, Index

from buzzpulse.core.db import Base


class Cell(Base):
    __tablename__ = "cells"

    cell_id = Column(String, primary_key=True)
    score = Column(Float, nullable=False, default=0.0)
    last_ts = Column(Integer, nullable=False)


class Hit(Base):
    __tablename__ = "hits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cell_id = Column(String, nullable=False)
    ts = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_hits_cell_ts", "cell_id", "ts"),
        Index("idx_hits_ts", "ts"),
    )
