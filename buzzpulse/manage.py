"""Maintenance commands: ``python -m buzzpulse.manage <command>``."""

import argparse
import sys

from loguru import logger

from buzzpulse.core.clock import SystemClock
from buzzpulse.core.db import SessionLocal
from buzzpulse.core.errors import NotFound
from buzzpulse.core.init_db import init_db
from buzzpulse.core.logging import setup_logging
from buzzpulse.core.pulse_config import get_settings
from buzzpulse.services.devices import disable_device, enable_device
from buzzpulse.services.pulse_store import DAY_SECONDS, PulseStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="buzzpulse.manage", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create all tables")

    p = sub.add_parser("disable-device", help="turn on a device's kill-switch")
    p.add_argument("device_id")

    p = sub.add_parser("enable-device", help="turn off a device's kill-switch")
    p.add_argument("device_id")

    p = sub.add_parser("prune-hits", help="delete hits older than N days")
    p.add_argument("--days", type=int, default=None)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    if args.command == "init-db":
        init_db()
        return 0

    db = SessionLocal()
    try:
        if args.command == "disable-device":
            disable_device(db, args.device_id)
        elif args.command == "enable-device":
            enable_device(db, args.device_id)
        elif args.command == "prune-hits":
            settings = get_settings()
            days = args.days if args.days is not None else settings.hit_retention_days
            if days < settings.typical_lookback_days:
                logger.warning(f"Keeping only {days} days breaks the {settings.typical_lookback_days}-day typical average")
            store = PulseStore(db, settings)
            cutoff = SystemClock().now() - days * DAY_SECONDS
            deleted = store.prune_hits(cutoff)
            store.commit()
            print(f"Deleted {deleted} hits")
    except NotFound as e:
        logger.error(e.message)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
