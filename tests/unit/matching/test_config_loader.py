#!/usr/bin/env python3
"""
Tests for configuration loading.

Usage:
    python -m pytest tests/unit/matching/test_config_loader.py -v
"""

import os
import tempfile
import unittest
from unittest.mock import patch

import yaml
from pydantic import ValidationError

from matching.config_loader import AppConfig, load_config


class TestLoadConfig(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "config.yaml")

    def tearDown(self):
        self.tmpdir.cleanup()

    def write(self, data):
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f)

    def test_defaults(self):
        print("\n📊 UNIT Test 1: Defaults")
        config = AppConfig()
        self.assertEqual(config.matching.fusion.rules_weight, 70)
        self.assertEqual(config.matching.fusion.semantic_weight, 20)
        self.assertEqual(config.matching.fusion.behavior_weight, 10)
        self.assertEqual(config.matching.rules.driver.hard_mismatch_cap, 40)
        self.assertEqual(config.matching.behavior.neutral_score, 5)
        self.assertEqual(config.rollout.cache_ttl_seconds, 60)
        self.assertFalse(config.scheduler.use_rq)

    def test_yaml_values_override_defaults(self):
        self.write({
            "matching": {"fusion": {"rules_weight": 60}, "semantic": {"provider": "none"}},
            "scheduler": {"batch_size": 5},
        })
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(self.path)
        self.assertEqual(config.matching.fusion.rules_weight, 60)
        self.assertEqual(config.matching.fusion.semantic_weight, 20)
        self.assertEqual(config.matching.semantic.provider, "none")
        self.assertEqual(config.scheduler.batch_size, 5)

    def test_environment_overrides(self):
        print("\n📊 UNIT Test 2: Environment overrides")
        self.write({"database": {"url": "postgresql://file/db"}})
        env = {
            "DATABASE_URL": "postgresql://env/db",
            "REDIS_URL": "redis://cache:6379/1",
            "EMBEDDING_API_KEY": "hf_test",
            "EMBEDDING_BASE_URL": "http://embeddings.local",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config(self.path)

        self.assertEqual(config.database.url, "postgresql://env/db")
        self.assertEqual(config.scheduler.redis_url, "redis://cache:6379/1")
        self.assertEqual(config.matching.semantic.api_key, "hf_test")
        self.assertEqual(config.matching.semantic.base_url, "http://embeddings.local")

    def test_empty_file(self):
        open(self.path, "w").close()
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(self.path)
        self.assertEqual(config.web.port, 8080)

    def test_invalid_provider_rejected(self):
        self.write({"matching": {"semantic": {"provider": "word2vec"}}})
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValidationError):
                load_config(self.path)


if __name__ == '__main__':
    unittest.main()
