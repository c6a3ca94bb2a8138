from .base import Base
from .driver import DriverProfile
from .job import Job
from .candidate import Application, Lead
from .match import DriverJobMatchScore, CompanyCandidateMatchScore
from .feedback import DriverMatchFeedback, DriverMatchEvent
from .queue import RecomputeQueueEntry
from .rollout import MatchingRolloutConfig, ROLLOUT_SINGLETON_ID
from .embedding import MatchingTextEmbedding

__all__ = [
    'Base',
    'DriverProfile',
    'Job',
    'Application',
    'Lead',
    'DriverJobMatchScore',
    'CompanyCandidateMatchScore',
    'DriverMatchFeedback',
    'DriverMatchEvent',
    'RecomputeQueueEntry',
    'MatchingRolloutConfig',
    'ROLLOUT_SINGLETON_ID',
    'MatchingTextEmbedding',
]
