"""modkit configuration.

A config file is a small JSON object validated against
``modkit/schema/modkit.config.v1.json``:

    {
      "overload_names": {"*": "_mul", "+": "_add"},
      "oracle": "prism",
      "timeout_s": 60
    }

Every key is optional; missing keys keep the defaults below.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from modkit.tools.errors import ConfigError
from modkit.tools.schemas import CONFIG_SCHEMA, format_errors, load_schema, validate


# Method names that are not valid identifiers get a readable prefix for their
# renamed overloads.
OVERLOAD_METHOD_MAP: Dict[str, str] = {
    "*": "_mul",
}


@dataclass
class RewriteConfig:
    overload_names: Dict[str, str] = field(default_factory=lambda: dict(OVERLOAD_METHOD_MAP))
    oracle: str = "prism"
    oracle_cmd: Optional[str] = None
    timeout_s: int = 60
    # None runs until clean or stalled
    max_passes: Optional[int] = None


def config_from_dict(data: Any) -> RewriteConfig:
    errors = validate(data, load_schema(CONFIG_SCHEMA))
    if errors:
        raise ConfigError(f"Invalid config: {format_errors(errors, limit=len(errors))}")
    cfg = RewriteConfig()
    if "overload_names" in data:
        names = dict(OVERLOAD_METHOD_MAP)
        names.update(data["overload_names"])
        cfg.overload_names = names
    for key in ("oracle", "oracle_cmd", "timeout_s", "max_passes"):
        if key in data:
            setattr(cfg, key, data[key])
    if cfg.oracle == "cmd" and not cfg.oracle_cmd:
        raise ConfigError("Invalid config: /oracle_cmd: required when oracle is 'cmd'")
    return cfg


def load_config(path: str | Path) -> RewriteConfig:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read config {p}: {e}") from e
    return config_from_dict(data)
