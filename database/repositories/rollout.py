import logging
from typing import Iterable, Optional

from database.models import MatchingRolloutConfig, ROLLOUT_SINGLETON_ID
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class RolloutRepository(BaseRepository):
    def get_config(self) -> Optional[MatchingRolloutConfig]:
        return self.db.get(MatchingRolloutConfig, ROLLOUT_SINGLETON_ID)

    def save_config(
        self,
        shadow_mode: Optional[bool] = None,
        driver_ui_enabled: Optional[bool] = None,
        company_ui_enabled: Optional[bool] = None,
        company_beta_ids: Optional[Iterable[str]] = None,
    ) -> MatchingRolloutConfig:
        """Create or update the singleton row; arguments left as None are unchanged."""
        config = self.get_config()
        if config is None:
            config = MatchingRolloutConfig(
                id=ROLLOUT_SINGLETON_ID,
                shadow_mode=True,
                driver_ui_enabled=False,
                company_ui_enabled=False,
                company_beta_ids=[],
            )
            self.db.add(config)

        if shadow_mode is not None:
            config.shadow_mode = shadow_mode
        if driver_ui_enabled is not None:
            config.driver_ui_enabled = driver_ui_enabled
        if company_ui_enabled is not None:
            config.company_ui_enabled = company_ui_enabled
        if company_beta_ids is not None:
            config.company_beta_ids = sorted({str(i) for i in company_beta_ids})

        self.db.flush()
        logger.info(
            f"Rollout config saved: shadow={config.shadow_mode} driver_ui={config.driver_ui_enabled} "
            f"company_ui={config.company_ui_enabled} beta={len(config.company_beta_ids or [])}"
        )
        return config
