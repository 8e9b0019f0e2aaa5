from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

ENV_PREFIX = "NETLAB_"


@dataclass
class LabConfig:
    link_delay: float = 0.5  # seconds of simulation time
    default_ttl: int = 8
    prefix_length: int = 24  # mask for synthesized route subnets
    probe_count: int = 3
    probe_timeout: int = 5  # seconds, ping deadline
    container_image: str = "alpine"
    log_level: str = "INFO"
    seed: Optional[int] = 42


def _coerce(name: str, value: Any) -> Any:
    if name in ("link_delay",):
        return float(value)
    if name in ("default_ttl", "prefix_length", "probe_count", "probe_timeout"):
        return int(value)
    if name == "seed":
        if value is None or str(value).strip().lower() in ("", "none"):
            return None
        return int(value)
    return str(value)


def load_config(path: Optional[str] = None) -> LabConfig:
    """Load the lab configuration.

    Values come from the defaults, then the YAML file at ``path`` (if any),
    then NETLAB_* environment variables, which also may be set in a .env file.
    """
    load_dotenv(override=False)

    y: Dict[str, Any] = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f) or {}

    values: Dict[str, Any] = {}
    for f in fields(LabConfig):
        if f.name in y:
            values[f.name] = _coerce(f.name, y[f.name])
        env_value = os.getenv(ENV_PREFIX + f.name.upper())
        if env_value is not None:
            values[f.name] = _coerce(f.name, env_value)

    config = LabConfig(**values)
    if config.prefix_length < 0 or config.prefix_length > 32:
        raise ValueError(f"prefix_length must be within 0..32, got {config.prefix_length}")
    if config.link_delay < 0:
        raise ValueError(f"link_delay must be non-negative, got {config.link_delay}")
    return config
