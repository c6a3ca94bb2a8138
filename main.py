#!/usr/bin/env python3
"""
CDL Matchmaker - command line entry point.

Usage:
    cdl-matchmaker init-db
    cdl-matchmaker serve
    cdl-matchmaker worker [--burst]
    cdl-matchmaker backfill [--days N]
    cdl-matchmaker enqueue driver_profile <id> [--reason manual]
"""

import argparse
import logging
import sys

from tenacity import retry, stop_after_attempt, wait_fixed

from matching.config_loader import load_config

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2))
def init_database():
    """Create the matching tables, waiting for the database to come up."""
    from database.database import init_db

    logger.info("Initializing database tables...")
    init_db()
    logger.info("Database ready")


def main(argv=None):
    parser = argparse.ArgumentParser(description="CDL Matchmaker")
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--verbose', action='store_true')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('init-db', help='Create database tables')
    sub.add_parser('serve', help='Run the HTTP API')

    worker_parser = sub.add_parser('worker', help='Run the recompute worker')
    worker_parser.add_argument('--burst', action='store_true', help='Process all pending entries and exit')

    backfill_parser = sub.add_parser('backfill', help='Enqueue recently updated drivers and all active jobs')
    backfill_parser.add_argument('--days', type=int, default=None)

    enqueue_parser = sub.add_parser('enqueue', help='Enqueue one entity for recompute')
    enqueue_parser.add_argument('entity_type',
                                choices=['driver_profile', 'job', 'company_profile', 'application', 'lead'])
    enqueue_parser.add_argument('entity_id')
    enqueue_parser.add_argument('--reason', default='manual')

    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config)

    if args.command == 'init-db':
        init_database()

    elif args.command == 'serve':
        from web.backend.app import main as serve
        serve()

    elif args.command == 'worker':
        import signal
        from scheduler.worker import RecomputeWorker

        worker = RecomputeWorker(config)
        signal.signal(signal.SIGINT, worker.stop)
        signal.signal(signal.SIGTERM, worker.stop)
        worker.run(burst=args.burst)

    elif args.command == 'backfill':
        from scheduler.backfill import run_backfill

        days = args.days if args.days is not None else config.scheduler.backfill_lookback_days
        run_backfill(days)

    elif args.command == 'enqueue':
        from scheduler.queue import RecomputeScheduler

        created = RecomputeScheduler(config.scheduler).enqueue(args.entity_type, args.entity_id, args.reason)
        logger.info(f"{'Enqueued' if created else 'Already pending'}: {args.entity_type} {args.entity_id}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
