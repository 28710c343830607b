import math
import os
from dataclasses import dataclass
from functools import lru_cache

# --------------------------------------------------
# DECAY
# --------------------------------------------------

# Score halves after this many hours without hits
HALF_LIFE_HOURS = float(os.getenv("HALF_LIFE_HOURS", "6"))

# --------------------------------------------------
# PRESENCE
# --------------------------------------------------

# How long a device counts as "currently at" its last reported cell
PRESENCE_WINDOW_SEC = int(os.getenv("PRESENCE_WINDOW_SEC", "600"))

# --------------------------------------------------
# AUTH
# --------------------------------------------------

# Allowed clock skew between x-timestamp and server time
REPLAY_WINDOW_SEC = int(os.getenv("REPLAY_WINDOW_SEC", "300"))

# --------------------------------------------------
# HEAT
# --------------------------------------------------

DEFAULT_HEAT_MIN = 1
DEFAULT_HEAT_WINDOW_MINUTES = 30
BUILDING_RADIUS_METERS = 25.0

# --------------------------------------------------
# STATS / RETENTION
# --------------------------------------------------

TYPICAL_LOOKBACK_DAYS = 7

# Hits older than this are removed by `manage prune-hits`
HIT_RETENTION_DAYS = int(os.getenv("HIT_RETENTION_DAYS", "8"))

MAX_VIBE_LENGTH = 32


@dataclass(frozen=True)
class PulseSettings:
    half_life_seconds: float = HALF_LIFE_HOURS * 3600
    presence_window_sec: int = PRESENCE_WINDOW_SEC
    replay_window_sec: int = REPLAY_WINDOW_SEC
    typical_lookback_days: int = TYPICAL_LOOKBACK_DAYS
    hit_retention_days: int = HIT_RETENTION_DAYS

    @property
    def tau(self) -> float:
        # e^(-t/tau) == 0.5 after one half-life
        return self.half_life_seconds / math.log(2)


@lru_cache(maxsize=1)
def get_settings() -> PulseSettings:
    return PulseSettings()
