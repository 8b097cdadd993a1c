from __future__ import annotations

import json

import pytest

from modkit.tools.config import OVERLOAD_METHOD_MAP, RewriteConfig, config_from_dict, load_config
from modkit.tools.errors import ConfigError


def test_defaults():
    cfg = RewriteConfig()
    assert cfg.overload_names == {"*": "_mul"}
    assert cfg.oracle == "prism"
    assert cfg.max_passes is None
    cfg.overload_names["+"] = "_add"
    assert OVERLOAD_METHOD_MAP == {"*": "_mul"}


def test_empty_object_keeps_defaults():
    assert config_from_dict({}) == RewriteConfig()


def test_overload_names_merge_over_defaults():
    cfg = config_from_dict({"overload_names": {"+": "_add", "*": "_times"}})
    assert cfg.overload_names == {"*": "_times", "+": "_add"}


def test_scalar_keys_are_applied():
    cfg = config_from_dict({"oracle": "cmd", "oracle_cmd": "my-parser", "timeout_s": 5, "max_passes": 3})
    assert (cfg.oracle, cfg.oracle_cmd, cfg.timeout_s, cfg.max_passes) == ("cmd", "my-parser", 5, 3)


@pytest.mark.parametrize(
    "data,pointer",
    [
        ({"unknown": 1}, "/"),
        ({"oracle": "treesitter"}, "/oracle"),
        ({"timeout_s": 0}, "/timeout_s"),
        ({"max_passes": "ten"}, "/max_passes"),
        ({"overload_names": {"+": "not an identifier"}}, "/overload_names/+"),
    ],
)
def test_invalid_config_is_rejected(data, pointer):
    with pytest.raises(ConfigError) as exc:
        config_from_dict(data)
    assert f"{pointer}:" in str(exc.value)


def test_cmd_oracle_needs_command():
    with pytest.raises(ConfigError, match="oracle_cmd"):
        config_from_dict({"oracle": "cmd"})


def test_load_config_from_file(tmp_path):
    path = tmp_path / "modkit.json"
    path.write_text(json.dumps({"max_passes": 8}), encoding="utf-8")
    assert load_config(path).max_passes == 8


def test_load_config_bad_json(tmp_path):
    path = tmp_path / "modkit.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to read config"):
        load_config(path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.json")
