from __future__ import annotations

from pathlib import Path

from conftest import ScriptedOracle, program

from modkit.engine import ModKitEngine, rewrite, target_path
from modkit.tools.config import RewriteConfig

SRC = "puts 1\n"


def _oracle() -> ScriptedOracle:
    return ScriptedOracle().add(SRC, program(SRC))


def test_rewrite_clean_source_is_identity():
    oracle = _oracle()
    assert rewrite(SRC, oracle=oracle) == SRC
    assert oracle.calls == [SRC]


def test_engine_keeps_given_config():
    cfg = RewriteConfig(max_passes=2)
    eng = ModKitEngine(oracle=_oracle(), config=cfg)
    assert eng.config is cfg
    assert eng.parse(SRC).diagnostics == ()


def test_transpile_path_writes_sibling(tmp_path):
    src = tmp_path / "hello.rbm"
    src.write_text(SRC, encoding="utf-8")
    dst = ModKitEngine(oracle=_oracle()).transpile_path(src)
    assert dst == tmp_path / "hello.rb"
    assert dst.read_text(encoding="utf-8") == SRC


def test_transpile_path_to_explicit_target(tmp_path):
    src = tmp_path / "hello.rbm"
    src.write_text(SRC, encoding="utf-8")
    out = tmp_path / "out.rb"
    assert ModKitEngine(oracle=_oracle()).transpile_path(src, out) == out
    assert out.read_text(encoding="utf-8") == SRC


def test_from_config_path(tmp_path):
    cfg = tmp_path / "modkit.json"
    cfg.write_text('{"overload_names": {"+": "_add"}}', encoding="utf-8")
    eng = ModKitEngine.from_config_path(cfg, oracle=_oracle())
    assert eng.config.overload_names == {"*": "_mul", "+": "_add"}


def test_target_path():
    assert target_path(Path("lib/point.rbm")) == Path("lib/point.rb")
    assert target_path(Path("lib/point.txt")) == Path("lib/point.txt.rb")
