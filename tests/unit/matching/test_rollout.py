#!/usr/bin/env python3
"""
Tests for the rollout controller.

Usage:
    python -m pytest tests/unit/matching/test_rollout.py -v
"""

import unittest
from unittest.mock import MagicMock

from matching.errors import ConfigUnavailable
from matching.rollout import RolloutController, RolloutSnapshot, closed_snapshot, decide_visibility
from matching.scorer.models import Role


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestDecideVisibility(unittest.TestCase):

    def test_shadow_mode_hides_everyone(self):
        print("\n📊 UNIT Test 1: Shadow mode")
        snapshot = RolloutSnapshot(shadow_mode=True, driver_ui_enabled=True, company_ui_enabled=True)
        self.assertFalse(decide_visibility(snapshot, Role.DRIVER, "driver-1"))
        self.assertFalse(decide_visibility(snapshot, Role.COMPANY, "company-1"))

    def test_driver_flag(self):
        snapshot = RolloutSnapshot(shadow_mode=False, driver_ui_enabled=True)
        self.assertTrue(decide_visibility(snapshot, "driver", "driver-1"))
        self.assertFalse(decide_visibility(snapshot, "company", "company-1"))

    def test_company_beta_list(self):
        print("\n📊 UNIT Test 2: Company beta list")
        snapshot = RolloutSnapshot(shadow_mode=False, company_beta_ids=frozenset({"company-1"}))
        self.assertTrue(decide_visibility(snapshot, Role.COMPANY, "company-1"))
        self.assertFalse(decide_visibility(snapshot, Role.COMPANY, "company-2"))
        self.assertFalse(decide_visibility(snapshot, Role.COMPANY, None))
        self.assertFalse(decide_visibility(snapshot, Role.DRIVER, "company-1"))

    def test_company_flag_opens_all_companies(self):
        snapshot = RolloutSnapshot(shadow_mode=False, company_ui_enabled=True)
        self.assertTrue(decide_visibility(snapshot, Role.COMPANY, "company-2"))

    def test_unknown_role_is_hidden(self):
        snapshot = RolloutSnapshot(shadow_mode=False, driver_ui_enabled=True, company_ui_enabled=True)
        self.assertFalse(decide_visibility(snapshot, "admin", "user-1"))

    def test_defaults_are_closed(self):
        snapshot = RolloutSnapshot()
        self.assertTrue(snapshot.shadow_mode)
        self.assertFalse(snapshot.driver_ui_enabled)
        self.assertTrue(closed_snapshot().fail_closed)


class TestRolloutController(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.open_snapshot = RolloutSnapshot(shadow_mode=False, driver_ui_enabled=True)

    def test_fails_closed_when_config_unavailable(self):
        print("\n📊 UNIT Test 3: Fail closed")
        loader = MagicMock(side_effect=ConfigUnavailable("connection refused"))
        controller = RolloutController(loader, ttl_seconds=60, clock=self.clock)

        self.assertFalse(controller.is_visible(Role.DRIVER, "driver-1"))
        self.assertTrue(controller.snapshot().fail_closed)

    def test_fails_closed_on_unexpected_error(self):
        loader = MagicMock(side_effect=RuntimeError("boom"))
        controller = RolloutController(loader, clock=self.clock)
        self.assertFalse(controller.is_visible(Role.COMPANY, "company-1"))

    def test_fails_closed_when_no_config_row(self):
        controller = RolloutController(lambda: None, clock=self.clock)
        snapshot = controller.snapshot()
        self.assertTrue(snapshot.shadow_mode)
        self.assertTrue(snapshot.fail_closed)

    def test_snapshot_cached_for_ttl(self):
        print("\n📊 UNIT Test 4: TTL cache")
        loader = MagicMock(return_value=self.open_snapshot)
        controller = RolloutController(loader, ttl_seconds=60, clock=self.clock)

        self.assertTrue(controller.is_visible(Role.DRIVER, "driver-1"))
        self.clock.now += 59
        self.assertTrue(controller.is_visible(Role.DRIVER, "driver-1"))
        self.assertEqual(loader.call_count, 1)

        loader.return_value = RolloutSnapshot(shadow_mode=True)
        self.clock.now += 1
        self.assertFalse(controller.is_visible(Role.DRIVER, "driver-1"))
        self.assertEqual(loader.call_count, 2)

    def test_recovers_after_failure(self):
        loader = MagicMock(side_effect=[ConfigUnavailable("down"), self.open_snapshot])
        controller = RolloutController(loader, ttl_seconds=10, clock=self.clock)

        self.assertFalse(controller.is_visible(Role.DRIVER, "driver-1"))
        self.clock.now += 10
        self.assertTrue(controller.is_visible(Role.DRIVER, "driver-1"))
        self.assertFalse(controller.snapshot().fail_closed)

    def test_invalidate_forces_reload(self):
        loader = MagicMock(return_value=self.open_snapshot)
        controller = RolloutController(loader, ttl_seconds=60, clock=self.clock)
        controller.snapshot()
        controller.invalidate()
        controller.snapshot()
        self.assertEqual(loader.call_count, 2)

    def test_to_dict_sorts_beta_ids(self):
        snapshot = RolloutSnapshot(company_beta_ids=frozenset({"b", "a"}))
        self.assertEqual(snapshot.to_dict()["company_beta_ids"], ["a", "b"])


if __name__ == '__main__':
    unittest.main()
