# PATH: config/__init__.py
"""
Configuration loading utilities for RELAY.

Sources, lowest to highest precedence:
  1. config/executor.yaml
  2. environment (optionally seeded from a .env file via python-dotenv)

Environment overrides:
  RELAY_CHAIN_ID, RELAY_OWNER, RELAY_EXECUTOR, RELAY_PERMIT2,
  RELAY_REGISTRY, RELAY_FEE_BPS, RELAY_LOG_LEVEL
"""

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv

from core.constants import DEFAULT_CHAIN_ID, MAX_FEE_BPS, ZERO_ADDRESS
from core.exceptions import ConfigError, StructuralError
from core.validators import normalize_address

CONFIG_DIR = Path(__file__).parent

EXECUTOR_CONFIG = "executor.yaml"
VENUES_CONFIG = "venues.yaml"

# settings field -> environment variable
ENV_OVERRIDES: Dict[str, str] = {
    "chain_id": "RELAY_CHAIN_ID",
    "owner": "RELAY_OWNER",
    "executor": "RELAY_EXECUTOR",
    "permit2": "RELAY_PERMIT2",
    "registry": "RELAY_REGISTRY",
    "fee_bps": "RELAY_FEE_BPS",
    "log_level": "RELAY_LOG_LEVEL",
}

_ADDRESS_FIELDS = ("owner", "executor", "permit2", "registry")
_INT_FIELDS = ("chain_id", "fee_bps")


def load_yaml(filename: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory, or an explicit path

    Returns:
        Parsed YAML as dict
    """
    filepath = Path(filename)
    if not filepath.is_absolute() and not filepath.exists():
        filepath = CONFIG_DIR / filename
    if not filepath.exists():
        raise ConfigError(f"Config file not found: {filepath}", {"path": str(filepath)})

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass
class ExecutorSettings:
    """Deployment settings for one executor instance."""
    chain_id: int = DEFAULT_CHAIN_ID
    owner: str = ZERO_ADDRESS
    executor: str = ZERO_ADDRESS
    permit2: str = ZERO_ADDRESS
    registry: str = ZERO_ADDRESS
    fee_bps: int = 0
    whitelist: List[str] = field(default_factory=list)
    log_level: str = "INFO"
    json_logs: bool = False

    def __post_init__(self):
        for name in _INT_FIELDS:
            value = getattr(self, name)
            try:
                setattr(self, name, int(value))
            except (TypeError, ValueError):
                raise ConfigError(
                    f"{name} must be an integer, got {value!r}",
                    {"field": name, "value": value},
                ) from None

        if not 0 <= self.fee_bps < MAX_FEE_BPS:
            raise ConfigError(
                f"fee_bps must be in [0, {MAX_FEE_BPS})",
                {"field": "fee_bps", "value": self.fee_bps},
            )
        if self.chain_id <= 0:
            raise ConfigError(
                "chain_id must be positive",
                {"field": "chain_id", "value": self.chain_id},
            )

        for name in _ADDRESS_FIELDS:
            setattr(self, name, _address(name, getattr(self, name)))
        self.whitelist = [_address("whitelist", t) for t in self.whitelist or []]
        self.log_level = str(self.log_level).upper()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _address(name: str, value: Any) -> str:
    try:
        return normalize_address(value)
    except StructuralError:
        raise ConfigError(
            f"{name} is not a valid address: {value!r}",
            {"field": name, "value": value},
        ) from None


def load_settings(
    path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = None,
) -> ExecutorSettings:
    """
    Load executor settings from YAML with environment overrides.

    Args:
        path: executor YAML (default: config/executor.yaml)
        env_file: optional .env file loaded before reading the environment

    Raises:
        ConfigError: missing file or invalid value
    """
    data = load_yaml(path or EXECUTOR_CONFIG)
    executor = data.get("executor") or {}
    logging_cfg = data.get("logging") or {}

    values: Dict[str, Any] = {
        "chain_id": data.get("chain_id", DEFAULT_CHAIN_ID),
        "owner": executor.get("owner", ZERO_ADDRESS),
        "executor": executor.get("address", ZERO_ADDRESS),
        "permit2": executor.get("permit2", ZERO_ADDRESS),
        "registry": executor.get("registry", ZERO_ADDRESS),
        "fee_bps": executor.get("fee_bps", 0),
        "whitelist": list(executor.get("whitelist") or []),
        "log_level": logging_cfg.get("level", "INFO"),
        "json_logs": bool(logging_cfg.get("json", False)),
    }

    if env_file is not None:
        load_dotenv(env_file, override=False)
    for name, var in ENV_OVERRIDES.items():
        raw = os.getenv(var)
        if raw:
            values[name] = raw

    return ExecutorSettings(**values)
