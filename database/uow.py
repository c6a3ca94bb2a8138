import contextlib
import logging

from database.database import SessionLocal
from database.repository import MatchingRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def matching_uow(session_factory=None):
    """Per-unit-of-work transaction scope.

    Yields a MatchingRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with matching_uow() as repo:
            repo.queue.enqueue('job', job_id, 'job_updated')
        # commit happens automatically on successful exit
    """
    session = (session_factory or SessionLocal)()
    try:
        repo = MatchingRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
