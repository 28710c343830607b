import os
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

def _get_env(key: str, default: str | None = None) -> str:
    val = os.getenv(key, default)
    if val is None:
        raise RuntimeError(f"Missing required env var: {key}")
    return val

def _get_flag(key: str, default: str = "false") -> bool:
    return _get_env(key, default).lower() in ("1", "true", "yes")

APP_ENV = _get_env("APP_ENV", "local")
DATABASE_URL = _get_env("DATABASE_URL", "sqlite:///./buzzpulse.db")
LOG_LEVEL = _get_env("LOG_LEVEL", "DEBUG")
LOG_FILE = _get_env("LOG_FILE", "logs/buzzpulse.log")
LOG_SQL = _get_flag("LOG_SQL")

# comma separated; "*" allows any origin (the web map is served elsewhere)
CORS_ORIGINS = [o.strip() for o in _get_env("CORS_ORIGINS", "*").split(",") if o.strip()]

# optional GeoJSON building footprints merged into the built-in registry
BUILDINGS_GEOJSON = _get_env("BUILDINGS_GEOJSON", "")

API_HOST = _get_env("API_HOST", "0.0.0.0")
API_PORT = int(_get_env("API_PORT", "8787"))

logger.debug(f"Config loaded: APP_ENV={APP_ENV}, DATABASE_URL={DATABASE_URL}, LOG_LEVEL={LOG_LEVEL}")
