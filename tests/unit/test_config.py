# PATH: tests/unit/test_config.py
"""
Unit tests for configuration loading.
"""

import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

from config import ENV_OVERRIDES, ExecutorSettings, load_settings, load_yaml
from core.constants import ZERO_ADDRESS
from core.exceptions import ConfigError

CONFIG_DIR = Path(__file__).parent.parent.parent / "config"

OWNER = "0x" + "0a" * 20
EXECUTOR = "0x" + "e0" * 20


def clean_env(**overrides):
    """os.environ without any RELAY_* variable, plus overrides."""
    env = {k: v for k, v in os.environ.items() if k not in ENV_OVERRIDES.values()}
    return patch.dict("os.environ", {**env, **overrides}, clear=True)


class TestConfigLoading(unittest.TestCase):
    """Tests for config loading functions."""

    def test_config_dir_exists(self):
        """Config directory exists."""
        self.assertTrue(CONFIG_DIR.exists())

    def test_load_executor_yaml(self):
        data = load_yaml("executor.yaml")

        self.assertIsInstance(data, dict)
        self.assertIn("executor", data)
        self.assertIn("whitelist", data["executor"])

    def test_load_missing(self):
        with self.assertRaises(ConfigError):
            load_yaml("does_not_exist.yaml")

    @clean_env()
    def test_default_settings(self):
        settings = load_settings()

        self.assertEqual(settings.chain_id, 1)
        self.assertLess(settings.fee_bps, 1000)
        self.assertTrue(all(t.startswith("0x") and t == t.lower() for t in settings.whitelist))
        self.assertEqual(settings.permit2, "0x000000000022d473030f116ddee9f6b43ac78ba3")


class TestEnvOverrides(unittest.TestCase):

    @clean_env(RELAY_FEE_BPS="42", RELAY_CHAIN_ID="8453")
    def test_env_wins_over_yaml(self):
        settings = load_settings()

        self.assertEqual(settings.fee_bps, 42)
        self.assertEqual(settings.chain_id, 8453)

    @clean_env()
    def test_env_file(self):
        with TemporaryDirectory() as tmp:
            env_file = Path(tmp) / ".env"
            env_file.write_text(f"RELAY_OWNER={OWNER.upper().replace('0X', '0x')}\nRELAY_LOG_LEVEL=debug\n")

            settings = load_settings(env_file=env_file)

        self.assertEqual(settings.owner, OWNER)
        self.assertEqual(settings.log_level, "DEBUG")

    @clean_env(RELAY_FEE_BPS="1000")
    def test_fee_at_max_rejected(self):
        with self.assertRaises(ConfigError):
            load_settings()

    @clean_env(RELAY_EXECUTOR="0x1234")
    def test_bad_address_rejected(self):
        with self.assertRaises(ConfigError) as ctx:
            load_settings()
        self.assertEqual(ctx.exception.details["field"], "executor")


class TestExecutorSettings(unittest.TestCase):

    def test_defaults(self):
        settings = ExecutorSettings()
        self.assertEqual(settings.registry, ZERO_ADDRESS)
        self.assertEqual(settings.whitelist, [])

    def test_unquoted_yaml_address(self):
        """Bare 0x... in YAML parses to int and must be rejected."""
        with self.assertRaises(ConfigError):
            ExecutorSettings(executor=0x1234)

    def test_non_integer_fee(self):
        with self.assertRaises(ConfigError):
            ExecutorSettings(fee_bps="ten")

    def test_explicit_file(self):
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "executor.yaml"
            path.write_text(
                "chain_id: 10\n"
                "executor:\n"
                f"  address: \"{EXECUTOR}\"\n"
                "  fee_bps: 5\n"
            )
            with clean_env():
                settings = load_settings(path)

        self.assertEqual(settings.chain_id, 10)
        self.assertEqual(settings.executor, EXECUTOR)
        self.assertEqual(settings.fee_bps, 5)

    def test_to_dict(self):
        data = ExecutorSettings(fee_bps=7).to_dict()
        self.assertEqual(data["fee_bps"], 7)
        self.assertIn("whitelist", data)


if __name__ == "__main__":
    unittest.main()
