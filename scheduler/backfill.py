#!/usr/bin/env python3
"""
Nightly backfill - enqueue every recently updated driver and every active job.

Enqueue is idempotent, so running this while workers are busy only adds
entities that are not already pending.

Usage:
    python -m scheduler.backfill
    python -m scheduler.backfill --days 7
"""

import argparse
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from database.uow import matching_uow
from matching.config_loader import load_config

logger = logging.getLogger(__name__)

BACKFILL_REASON = "nightly_backfill"


def run_backfill(lookback_days: int = 1, uow: Callable = matching_uow) -> Dict[str, int]:
    since = datetime.now(timezone.utc) - timedelta(days=lookback_days)
    counts = {"drivers": 0, "jobs": 0}

    with uow() as repo:
        for driver_id in repo.drivers.list_ids_updated_since(since):
            if repo.queue.enqueue("driver_profile", driver_id, BACKFILL_REASON):
                counts["drivers"] += 1

        for job_id in repo.jobs.list_active_ids():
            if repo.queue.enqueue("job", job_id, BACKFILL_REASON):
                counts["jobs"] += 1

    logger.info(
        f"Backfill enqueued {counts['drivers']} drivers updated in the last {lookback_days}d "
        f"and {counts['jobs']} active jobs"
    )
    return counts


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description='Enqueue a nightly match recompute')
    parser.add_argument('--days', type=int, default=None, help='Driver lookback window in days')
    parser.add_argument('--config', default='config.yaml')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = load_config(args.config)
    days = args.days if args.days is not None else config.scheduler.backfill_lookback_days
    run_backfill(days)


if __name__ == '__main__':
    main()
