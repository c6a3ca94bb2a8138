"""Business logic services."""

from .match_service import MatchService
from .feedback_service import FeedbackService
from .recompute_service import RecomputeService
from .rollout_service import RolloutService, get_rollout_controller
