#!/usr/bin/env python3
"""
Rollout Controller - gates who may read match scores.

Per caller the state is Hidden or Visible:
- shadow mode hides scores from everyone (they are still computed);
- drivers see scores when the driver UI flag is on;
- companies see scores when the company UI flag is on, or when they are on
  the beta allow-list.

The configuration is held as an immutable snapshot, refreshed after a short
TTL and swapped by reference. Any failure to fetch it fails closed.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Optional, Union

from matching.errors import ConfigUnavailable
from matching.scorer.models import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RolloutSnapshot:
    shadow_mode: bool = True
    driver_ui_enabled: bool = False
    company_ui_enabled: bool = False
    company_beta_ids: FrozenSet[str] = field(default_factory=frozenset)
    fetched_at: float = 0.0
    fail_closed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shadow_mode": self.shadow_mode,
            "driver_ui_enabled": self.driver_ui_enabled,
            "company_ui_enabled": self.company_ui_enabled,
            "company_beta_ids": sorted(self.company_beta_ids),
        }


def closed_snapshot(fetched_at: float = 0.0) -> RolloutSnapshot:
    """Shadow mode with every UI flag off."""
    return RolloutSnapshot(fetched_at=fetched_at, fail_closed=True)


def decide_visibility(snapshot: RolloutSnapshot, role: Union[Role, str], user_id: Optional[str]) -> bool:
    """Pure visibility decision for one caller."""
    try:
        role = Role(role)
    except ValueError:
        return False

    if snapshot.shadow_mode:
        return False
    if role == Role.DRIVER:
        return snapshot.driver_ui_enabled
    if snapshot.company_ui_enabled:
        return True
    return bool(user_id) and user_id in snapshot.company_beta_ids


class RolloutController:
    """
    Caches the rollout snapshot and answers ``is_visible``.

    Args:
        loader: Returns the current snapshot, None when no config exists, or
            raises ConfigUnavailable.
        ttl_seconds: How long a fetched snapshot is served before refetching.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        loader: Callable[[], Optional[RolloutSnapshot]],
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[RolloutSnapshot] = None

    def snapshot(self) -> RolloutSnapshot:
        current = self._snapshot
        now = self._clock()
        if current is not None and now - current.fetched_at < self._ttl:
            return current

        try:
            loaded = self._loader()
        except ConfigUnavailable as e:
            logger.warning(f"Rollout config unavailable, failing closed: {e}")
            loaded = None
        except Exception as e:
            logger.warning(f"Rollout config fetch failed, failing closed: {e}", exc_info=True)
            loaded = None

        fresh = replace(loaded, fetched_at=now) if loaded is not None else closed_snapshot(now)
        self._snapshot = fresh
        return fresh

    def is_visible(self, role: Union[Role, str], user_id: Optional[str]) -> bool:
        return decide_visibility(self.snapshot(), role, user_id)

    def invalidate(self) -> None:
        self._snapshot = None
