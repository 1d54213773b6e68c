"""
Reducer configuration, loaded from YAML.

Example::

    batch_size: 5
    max_bounded_batches: 32
    max_actions_per_batch: 1
    proof_key: local-dev-key
    log_level: INFO
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


BATCH_SIZE = 5

# Defaults of the ledger's in-transaction reducer
MAX_BOUNDED_BATCHES = 32
MAX_ACTIONS_PER_BATCH = 1

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Invalid or unreadable configuration."""


@dataclass(frozen=True)
class ReducerConfig:
    batch_size: int = BATCH_SIZE
    max_bounded_batches: int = MAX_BOUNDED_BATCHES
    max_actions_per_batch: int = MAX_ACTIONS_PER_BATCH
    proof_key: str = "actionlog-local-proof-key"
    log_level: str = "INFO"

    def __post_init__(self):
        for name in ("batch_size", "max_bounded_batches", "max_actions_per_batch"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.proof_key, str) or not self.proof_key:
            raise ConfigError("proof_key must be a non-empty string")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ReducerConfig":
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"configuration must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown configuration key(s): {', '.join(unknown)}")
        values = dict(data)
        if isinstance(values.get("log_level"), str):
            values["log_level"] = values["log_level"].upper()
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, Path]) -> ReducerConfig:
    """Load a ReducerConfig from a YAML file; an empty file gives defaults."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    # Allow the settings to sit under a top-level "reducer" key
    if isinstance(data, dict) and set(data) == {"reducer"}:
        data = data["reducer"]
    return ReducerConfig.from_dict(data)
