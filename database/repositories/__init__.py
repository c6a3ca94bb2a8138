from database.repositories.base import BaseRepository
from database.repositories.driver import DriverRepository
from database.repositories.job import JobRepository
from database.repositories.candidate import CandidateRepository
from database.repositories.match import MatchRepository
from database.repositories.feedback import FeedbackRepository
from database.repositories.queue import QueueRepository
from database.repositories.rollout import RolloutRepository
from database.repositories.embedding import EmbeddingRepository

__all__ = [
    'BaseRepository',
    'DriverRepository',
    'JobRepository',
    'CandidateRepository',
    'MatchRepository',
    'FeedbackRepository',
    'QueueRepository',
    'RolloutRepository',
    'EmbeddingRepository',
]
