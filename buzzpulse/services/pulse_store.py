import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from loguru import logger
from sqlalchemy import select, update, delete, func, text
from sqlalchemy.orm import Session

from buzzpulse.core.errors import StoreConflict
from buzzpulse.core.pulse_config import PulseSettings
from buzzpulse.models.cell import Cell, Hit
from buzzpulse.models.presence import DevicePresence
from buzzpulse.models.vibe import Vibe

HOUR_SECONDS = 3600
DAY_SECONDS = 86400


@dataclass(frozen=True)
class CellState:
    cell_id: str
    score: float
    last_ts: int


def hour_bucket(ts: int) -> int:
    return int(ts) // HOUR_SECONDS


class PulseStore:
    """
    Durable per-cell decay scores, the raw hit log, device presence and
    hourly vibes.

    Decay is applied lazily relative to ``last_ts`` so nothing ever has to
    sweep the tables. Methods flush but never commit; the caller owns the
    transaction via ``commit()``.
    """

    def __init__(self, db: Session, settings: PulseSettings, max_retries: int = 5):
        self.db = db
        self.settings = settings
        self.max_retries = max_retries

    def commit(self) -> None:
        self.db.commit()

    # ------------------------------------------------------------------
    # Decay
    # ------------------------------------------------------------------

    def decay(self, score: float, since_ts: int, until_ts: int) -> float:
        dt = max(0, until_ts - since_ts)
        return score * math.exp(-dt / self.settings.tau)

    def record_hit(self, cell_id: str, ts: int) -> float:
        """
        Add one hit to the cell's decayed score and append it to the hit log.

        The row is only written if it still holds the values that were read,
        so two concurrent hits on the same cell both land; a lost race is
        re-read and retried.
        """
        score = None
        for attempt in range(self.max_retries):
            prior = self.db.execute(
                select(Cell.score, Cell.last_ts).where(Cell.cell_id == cell_id)
            ).first()

            if prior is None:
                inserted = self.db.execute(
                    text(
                        """
                        INSERT INTO cells (cell_id, score, last_ts)
                        VALUES (:cell_id, 1.0, :ts)
                        ON CONFLICT(cell_id) DO NOTHING
                        """
                    ),
                    {"cell_id": cell_id, "ts": ts},
                )
                if inserted.rowcount == 1:
                    score = 1.0
                    break
            else:
                prev_score = prior.score or 0.0
                prev_ts = prior.last_ts if prior.last_ts is not None else ts
                new_score = self.decay(prev_score, prev_ts, ts) + 1
                updated = self.db.execute(
                    update(Cell)
                    .where(
                        Cell.cell_id == cell_id,
                        Cell.score == prior.score,
                        Cell.last_ts == prior.last_ts,
                    )
                    .values(score=new_score, last_ts=ts)
                    .execution_options(synchronize_session=False)
                )
                if updated.rowcount == 1:
                    score = new_score
                    break

            logger.debug(f"[store] cell {cell_id} changed underneath us, retry {attempt + 1}")

        if score is None:
            raise StoreConflict(f"Could not update cell {cell_id}")

        self.db.add(Hit(cell_id=cell_id, ts=ts))
        self.db.flush()
        return score

    def get_cell(self, cell_id: str) -> CellState | None:
        row = self.db.get(Cell, cell_id)
        if row is None:
            return None
        return CellState(row.cell_id, row.score, row.last_ts)

    def current_score(self, cell: CellState | None, now: int) -> float:
        if cell is None:
            return 0.0
        return self.decay(cell.score, cell.last_ts, now)

    # ------------------------------------------------------------------
    # Presence
    # ------------------------------------------------------------------

    def upsert_presence(self, device_id: str, cell_id: str, ts: int) -> None:
        self.db.execute(
            text(
                """
                INSERT INTO device_presence (device_id, cell_id, updated_ts)
                VALUES (:device_id, :cell_id, :ts)
                ON CONFLICT(device_id) DO UPDATE SET
                    cell_id = excluded.cell_id,
                    updated_ts = excluded.updated_ts
                """
            ),
            {"device_id": device_id, "cell_id": cell_id, "ts": ts},
        )

    def get_presence(self, device_id: str) -> DevicePresence | None:
        return self.db.get(DevicePresence, device_id)

    def is_present(self, presence: DevicePresence | None, now: int) -> bool:
        return presence is not None and presence.updated_ts >= now - self.settings.presence_window_sec

    def presence_count(self, cell_id: str, now: int) -> int:
        cutoff = now - self.settings.presence_window_sec
        return self.db.execute(
            select(func.count(func.distinct(DevicePresence.device_id))).where(
                DevicePresence.cell_id == cell_id,
                DevicePresence.updated_ts >= cutoff,
            )
        ).scalar_one()

    # ------------------------------------------------------------------
    # Hits
    # ------------------------------------------------------------------

    def hits_between(self, cell_id: str, since: int, until: int) -> int:
        return self.db.execute(
            select(func.count(Hit.id)).where(
                Hit.cell_id == cell_id,
                Hit.ts >= since,
                Hit.ts <= until,
            )
        ).scalar_one()

    def heat_candidates(self, since: int, until: int, min_hits: int) -> list[CellState]:
        """Cells with a positive score and at least ``min_hits`` hits in ``[since, until]``."""
        rows = self.db.execute(
            select(Cell.cell_id, Cell.score, Cell.last_ts)
            .join(Hit, Hit.cell_id == Cell.cell_id)
            .where(Cell.score > 0, Hit.ts >= since, Hit.ts <= until)
            .group_by(Cell.cell_id, Cell.score, Cell.last_ts)
            .having(func.count(Hit.id) >= min_hits)
        ).all()
        return [CellState(r.cell_id, r.score, r.last_ts) for r in rows]

    def typical_hour_hits(self, cell_id: str, now: int) -> float:
        """
        Average hits per day for the current UTC hour-of-day over the lookback
        days. Only days that saw hits in that hour are averaged.
        """
        since = now - self.settings.typical_lookback_days * DAY_SECONDS
        hour_now = datetime.fromtimestamp(now, tz=timezone.utc).hour

        stamps = self.db.execute(
            select(Hit.ts).where(Hit.cell_id == cell_id, Hit.ts >= since, Hit.ts <= now)
        ).scalars()

        per_day: Counter = Counter()
        for ts in stamps:
            dt = datetime.fromtimestamp(ts, tz=timezone.utc)
            if dt.hour == hour_now:
                per_day[dt.date()] += 1

        if not per_day:
            return 0.0
        return sum(per_day.values()) / len(per_day)

    def prune_hits(self, before_ts: int) -> int:
        result = self.db.execute(
            delete(Hit).where(Hit.ts < before_ts).execution_options(synchronize_session=False)
        )
        logger.info(f"[store] pruned {result.rowcount} hits older than {before_ts}")
        return result.rowcount

    # ------------------------------------------------------------------
    # Vibes
    # ------------------------------------------------------------------

    def upsert_vibe(self, cell_id: str, device_id: str, vibe: str, ts: int) -> None:
        self.db.execute(
            text(
                """
                INSERT INTO vibes (cell_id, vibe, ts, device_id, hour)
                VALUES (:cell_id, :vibe, :ts, :device_id, :hour)
                ON CONFLICT(cell_id, device_id, hour) DO UPDATE SET
                    vibe = excluded.vibe,
                    ts = excluded.ts
                """
            ),
            {
                "cell_id": cell_id,
                "vibe": vibe,
                "ts": ts,
                "device_id": device_id,
                "hour": hour_bucket(ts),
            },
        )

    def vibe_tallies(self, cell_id: str, since: int) -> dict[str, int]:
        rows = self.db.execute(
            select(Vibe.vibe, func.count(Vibe.id))
            .where(Vibe.cell_id == cell_id, Vibe.ts >= since)
            .group_by(Vibe.vibe)
        ).all()
        return {vibe: count for vibe, count in rows}

    def my_vibe(self, cell_id: str, device_id: str, now: int) -> str | None:
        return self.db.execute(
            select(Vibe.vibe).where(
                Vibe.cell_id == cell_id,
                Vibe.device_id == device_id,
                Vibe.hour == hour_bucket(now),
            )
        ).scalar_one_or_none()
