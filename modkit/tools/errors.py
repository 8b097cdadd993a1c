"""Error taxonomy for modkit.

- InvariantViolation: the classifier's assumptions about parser output did not
  hold (missing sigil, vanished definition, overlapping edits, ...). Always a
  bug, never a user error.
- UnrecoveredSyntaxError: the correction loop stopped making progress. Carries
  one rendered report per outstanding diagnostic so callers can print them
  verbatim.
- OracleError / ConfigError: the parser process or the config file could not
  be used.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


class ModKitError(RuntimeError):
    pass


class InvariantViolation(ModKitError):
    pass


class OracleError(ModKitError):
    pass


class ConfigError(ModKitError):
    pass


@dataclass(frozen=True)
class DiagnosticReport:
    line: int
    line_text: str
    underline: str
    message: str
    kind: str

    def render(self) -> str:
        return f":{self.line}:{self.message} ({self.kind})\n{self.line_text}\n{self.underline}"


class UnrecoveredSyntaxError(ModKitError):
    def __init__(self, reports: List[DiagnosticReport]) -> None:
        super().__init__("Syntax error")
        self.reports = list(reports)

    def __str__(self) -> str:
        if not self.reports:
            return "Syntax error"
        return "Syntax error\n" + "\n".join(r.render() for r in self.reports)
