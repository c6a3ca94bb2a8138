"""RQ task entry points for the recompute queue."""
import logging
from typing import Dict

logger = logging.getLogger(__name__)


def process_queue_task() -> Dict[str, int]:
    """
    Drain one batch of the recompute queue.

    Runs inside an RQ worker after a nudge. The queue table stays the source of
    truth, so a lost or duplicated nudge only changes when work happens.
    """
    from scheduler.worker import RecomputeWorker

    worker = RecomputeWorker()
    try:
        stats = worker.process_batch()
    finally:
        worker.close()
    logger.info(f"RQ recompute drain finished: {stats}")
    return stats
