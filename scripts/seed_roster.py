"""Seed a participant roster from a delimited file.

Usage:
    python scripts/seed_roster.py roster.csv --redis-host localhost
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from rollcall.core.config import AppSettings
from rollcall.core.logging import setup_logging
from rollcall.core.protocols import IRosterStore
from rollcall.importer.coordinator import ImportCoordinator
from rollcall.importer.sources import RawFile
from rollcall.models.import_report import ImportReport
from rollcall.persistence.redis_backend import RedisRosterStore


def load_file(path: Path) -> RawFile:
    return RawFile(name=path.name, data=path.read_bytes())


def seed_roster(store: IRosterStore, path: Path, settings: AppSettings | None = None) -> ImportReport:
    """Import ``path`` into ``store`` and return the report."""
    settings = settings or AppSettings()
    coordinator = ImportCoordinator(settings=settings, store=store)
    return asyncio.run(coordinator.import_file(load_file(path)))


def main(argv: list[str] | None = None) -> int:
    settings = AppSettings()
    parser = argparse.ArgumentParser(description="Seed the participant roster from a file")
    parser.add_argument("file", type=Path, help="CSV/TXT/TSV roster file")
    parser.add_argument("--redis-host", default=settings.redis.host)
    parser.add_argument("--redis-port", type=int, default=settings.redis.port)
    parser.add_argument("--redis-db", type=int, default=settings.redis.db)
    parser.add_argument("--key-prefix", default=settings.redis.key_prefix)
    args = parser.parse_args(argv)

    setup_logging(settings)
    store = RedisRosterStore(
        host=args.redis_host,
        port=args.redis_port,
        db=args.redis_db,
        key_prefix=args.key_prefix,
        lock_timeout=settings.redis.lock_timeout,
    )
    report = seed_roster(store, args.file, settings)
    summary = report.summary(settings.importer.report_sample_size)
    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return 1 if report.fatal else 0


if __name__ == "__main__":
    raise SystemExit(main())
