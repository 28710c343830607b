from fastapi import APIRouter

from buzzpulse.api.routes import devices, heat, ingest, stats

api_router = APIRouter()

api_router.include_router(devices.router, prefix="/device", tags=["devices"])
api_router.include_router(ingest.router, tags=["ingest"])
api_router.include_router(heat.router, tags=["heat"])
api_router.include_router(stats.router, tags=["stats"])
