#!/usr/bin/env python3
"""
Tests for the driver -> job rules scorer.

Usage:
    python -m pytest tests/unit/matching/test_driver_rules.py -v
"""

import unittest

from matching.config_loader import DriverRuleMaxima
from matching.errors import InvalidCandidate
from matching.scorer.driver_rules import derive_missing_fields, score_driver_job
from matching.scorer.models import DriverFeatures, RuleCategory
from tests import make_driver, make_job


def texts(factors, positive=None):
    return [f.text for f in factors if positive is None or f.positive == positive]


class TestDriverRulesScenario(unittest.TestCase):

    def setUp(self):
        self.maxima = DriverRuleMaxima()

    def test_owner_operator_otr_dry_van_full_match(self):
        """An owner-operator who prefers OTR and hauls dry van, against the same kind of job."""
        print("\n📊 UNIT Test 1: Owner-operator OTR dry van match")
        result = score_driver_job(make_driver(), make_job(), self.maxima)

        self.assertEqual(result.max_score, 90)
        self.assertEqual(result.score, 88.0)
        self.assertFalse(result.hard_mismatch)
        self.assertEqual(result.missing_fields, [])
        self.assertEqual(list(result.breakdown), [
            RuleCategory.DRIVER_TYPE,
            RuleCategory.ROUTE,
            RuleCategory.FREIGHT,
            RuleCategory.TEAM,
            RuleCategory.LOCATION,
            RuleCategory.EXPERIENCE,
            RuleCategory.LICENSE,
        ])
        self.assertEqual(result.breakdown[RuleCategory.DRIVER_TYPE].score, 20.0)
        self.assertEqual(result.breakdown[RuleCategory.LICENSE].score, 8.0)

        reasons = texts(result.factors, positive=True)
        self.assertIn("Your driver type (owner-operator) matches this position", reasons)
        self.assertIn("Your OTR route preference matches", reasons)
        self.assertIn("You have experience with dryVan freight", reasons)
        self.assertIn("Job is in your state (Texas)", reasons)
        self.assertEqual(texts(result.factors, positive=False), [])
        print(f"   Score: {result.score}/{result.max_score}")

    def test_hard_driver_type_mismatch_caps_total(self):
        print("\n📊 UNIT Test 2: Hard mismatch cap")
        result = score_driver_job(make_driver(driver_type="company"), make_job(), self.maxima)

        self.assertTrue(result.hard_mismatch)
        self.assertEqual(result.breakdown[RuleCategory.DRIVER_TYPE].score, 0.0)
        self.assertEqual(result.score, 40.0)
        self.assertIn("Position requires owner-operator but you are company", texts(result.factors, positive=False))

    def test_compatible_driver_types_score_partially(self):
        result = score_driver_job(make_driver(driver_type="lease"), make_job(), self.maxima)
        self.assertFalse(result.hard_mismatch)
        self.assertEqual(result.breakdown[RuleCategory.DRIVER_TYPE].score, 12.0)

    def test_missing_driver_type_is_neutral_not_zero(self):
        result = score_driver_job(make_driver(driver_type=None), make_job(), self.maxima)
        self.assertEqual(result.breakdown[RuleCategory.DRIVER_TYPE].score, 10.0)
        self.assertIn("driver type", result.missing_fields)

    def test_deterministic(self):
        first = score_driver_job(make_driver(), make_job(), self.maxima)
        second = score_driver_job(make_driver(), make_job(), self.maxima)
        self.assertEqual(first, second)


class TestRouteAndFreight(unittest.TestCase):

    def setUp(self):
        self.maxima = DriverRuleMaxima()

    def score(self, driver, job, category):
        return score_driver_job(driver, job, self.maxima).breakdown[category].score

    def test_route_tiers(self):
        print("\n📊 UNIT Test 3: Route tiers")
        job = make_job()
        self.assertEqual(self.score(make_driver(), job, RuleCategory.ROUTE), 15.0)
        self.assertEqual(self.score(make_driver(route_prefs={"regional": True}), job, RuleCategory.ROUTE), 10.0)
        self.assertEqual(self.score(make_driver(route_prefs={"local": True}), job, RuleCategory.ROUTE), 3.0)
        self.assertEqual(self.score(make_driver(route_prefs={}), job, RuleCategory.ROUTE), 8.0)
        self.assertEqual(self.score(make_driver(), make_job(route_type=None), RuleCategory.ROUTE), 8.0)

    def test_route_mismatch_caution(self):
        result = score_driver_job(make_driver(route_prefs={"local": True}), make_job(), self.maxima)
        self.assertIn(
            "This job is OTR which doesn't match your route preferences",
            texts(result.factors, positive=False),
        )

    def test_freight_tiers(self):
        print("\n📊 UNIT Test 4: Freight tiers")
        tanker_job = make_job(freight_type="Tanker")
        versatile = {"flatbed": True, "dryVan": True, "refrigerated": True, "box": True}

        self.assertEqual(self.score(make_driver(hauler_experience=versatile), tanker_job, RuleCategory.FREIGHT), 10.0)
        self.assertEqual(self.score(make_driver(), tanker_job, RuleCategory.FREIGHT), 3.0)
        self.assertEqual(self.score(make_driver(hauler_experience={}), tanker_job, RuleCategory.FREIGHT), 5.0)
        self.assertEqual(self.score(make_driver(), make_job(freight_type=None), RuleCategory.FREIGHT), 8.0)

    def test_freight_mismatch_caution(self):
        result = score_driver_job(make_driver(), make_job(freight_type="Tanker"), self.maxima)
        self.assertIn("You have no tanker experience listed", texts(result.factors, positive=False))


class TestTeamLocationExperienceLicense(unittest.TestCase):

    def setUp(self):
        self.maxima = DriverRuleMaxima()

    def score(self, driver, job, category):
        return score_driver_job(driver, job, self.maxima).breakdown[category].score

    def test_team(self):
        self.assertEqual(self.score(make_driver(solo_team="both"), make_job(team_driving="Team"), RuleCategory.TEAM), 10.0)
        self.assertEqual(self.score(make_driver(solo_team="solo"), make_job(team_driving="Team"), RuleCategory.TEAM), 0.0)
        self.assertEqual(self.score(make_driver(solo_team=None), make_job(), RuleCategory.TEAM), 5.0)

    def test_location(self):
        print("\n📊 UNIT Test 5: Location tiers")
        self.assertEqual(self.score(make_driver(), make_job(location="Oklahoma City, OK"), RuleCategory.LOCATION), 6.0)
        self.assertEqual(self.score(make_driver(), make_job(location="Portland, OR"), RuleCategory.LOCATION), 2.0)
        self.assertEqual(self.score(make_driver(), make_job(location=None), RuleCategory.LOCATION), 5.0)

    def test_experience(self):
        self.assertEqual(self.score(make_driver(years_exp="1-3"), make_job(), RuleCategory.EXPERIENCE), 6.0)
        self.assertEqual(self.score(make_driver(years_exp="none"), make_job(), RuleCategory.EXPERIENCE), 2.0)
        self.assertEqual(self.score(make_driver(years_exp=None), make_job(), RuleCategory.EXPERIENCE), 5.0)

    def test_license_with_tanker_endorsement(self):
        print("\n📊 UNIT Test 6: License and endorsements")
        tanker_job = make_job(freight_type="Tanker")
        endorsed = make_driver(endorsements={"tankVehicles": True})
        self.assertEqual(self.score(endorsed, tanker_job, RuleCategory.LICENSE), 10.0)

        result = score_driver_job(make_driver(endorsements={}), tanker_job, self.maxima)
        self.assertEqual(result.breakdown[RuleCategory.LICENSE].score, 6.0)
        self.assertIn("Tanker endorsement may be required for this position", texts(result.factors, positive=False))

    def test_license_classes(self):
        job = make_job()
        self.assertEqual(self.score(make_driver(license_class="b", endorsements={}), job, RuleCategory.LICENSE), 5.0)
        self.assertEqual(self.score(make_driver(license_class=None, endorsements={}), job, RuleCategory.LICENSE), 4.0)


class TestMissingFieldsAndIdentity(unittest.TestCase):

    def test_empty_profile_lists_every_field_in_order(self):
        print("\n📊 UNIT Test 7: Missing fields")
        self.assertEqual(derive_missing_fields(DriverFeatures(driver_id="driver-1")), [
            "driver type",
            "license class",
            "years of experience",
            "license state",
            "zip code",
            "about me",
            "route preferences",
            "freight experience",
            "endorsements",
        ])

    def test_false_flags_count_as_missing(self):
        driver = make_driver(route_prefs={"otr": False}, about="   ")
        missing = derive_missing_fields(driver)
        self.assertIn("route preferences", missing)
        self.assertIn("about me", missing)

    def test_missing_identity_raises(self):
        with self.assertRaises(InvalidCandidate):
            score_driver_job(make_driver(driver_id=""), make_job(), DriverRuleMaxima())
        with self.assertRaises(InvalidCandidate):
            score_driver_job(make_driver(), make_job(job_id=""), DriverRuleMaxima())


if __name__ == '__main__':
    unittest.main()
