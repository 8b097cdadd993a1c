"""A small "drop-in" integration layer for modkit.

It wires the parser oracle, configuration and correction loop together into
one ergonomic API for Python hosts.

Typical usage:

    from modkit.engine import ModKitEngine

    eng = ModKitEngine()
    ruby = eng.rewrite(Path("lib/point.rbm").read_text())

or, for a one-off call with the default Prism oracle:

    from modkit.engine import rewrite

    ruby = rewrite(source)

"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from modkit.tools import correct
from modkit.tools.config import RewriteConfig, load_config
from modkit.tools.oracle import ParseResult, ParserOracle, make_oracle

SOURCE_SUFFIX = ".rbm"
TARGET_SUFFIX = ".rb"


class ModKitEngine:
    def __init__(self, *, oracle: Optional[ParserOracle] = None, config: Optional[RewriteConfig] = None):
        self.config = config or RewriteConfig()
        self.oracle = oracle or make_oracle(self.config.oracle, cmd=self.config.oracle_cmd, timeout_s=self.config.timeout_s)

    @classmethod
    def from_config_path(cls, path: str | Path, *, oracle: Optional[ParserOracle] = None) -> "ModKitEngine":
        return cls(oracle=oracle, config=load_config(path))

    def load_path(self, path: str | Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def parse(self, source_text: str) -> ParseResult:
        return self.oracle.parse(source_text)

    def rewrite(self, source_text: str) -> str:
        return correct.rewrite(source_text, self.oracle, self.config)

    def transpile_path(self, path: str | Path, out: Optional[str | Path] = None) -> Path:
        """Rewrite an ``.rbm`` file and write the result next to it as ``.rb`` (or to ``out``)."""
        src = Path(path)
        dst = Path(out) if out is not None else target_path(src)
        dst.write_text(self.rewrite(self.load_path(src)), encoding="utf-8")
        return dst


def target_path(path: Path) -> Path:
    if path.suffix == SOURCE_SUFFIX:
        return path.with_suffix(TARGET_SUFFIX)
    return path.with_name(path.name + TARGET_SUFFIX)


def rewrite(source_text: str, *, oracle: Optional[ParserOracle] = None, config: Optional[RewriteConfig] = None) -> str:
    return ModKitEngine(oracle=oracle, config=config).rewrite(source_text)
