from loguru import logger
from sqlalchemy.engine import Engine

from buzzpulse.core.db import engine as default_engine, Base

# Import all models so SQLAlchemy registers them
from buzzpulse.models.cell import Cell, Hit
from buzzpulse.models.device import Device
from buzzpulse.models.presence import DevicePresence
from buzzpulse.models.vibe import Vibe

def init_db(engine: Engine | None = None):
    logger.info("Creating database tables")
    Base.metadata.create_all(bind=engine or default_engine)
    logger.info("Database tables created")
