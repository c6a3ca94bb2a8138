"""API route handlers."""

from .matches import router as matches_router
from .candidates import router as candidates_router
from .feedback import router as feedback_router
from .rollout import router as rollout_router
from .recompute import router as recompute_router
