"""Calculation outcomes and the ordered trace used for engineering sign-off."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

RULE = "=" * 46


class Status(str, Enum):
    """Outcome of a single calculation."""
    CONVERGED = "converged"
    NOT_CONVERGED = "not_converged"      # iteration cap reached
    GUARD_FAILURE = "guard_failure"      # near-zero denominator or t <= 0
    INVALID_INPUT = "invalid_input"      # missing / non-finite / non-positive input


@dataclass
class Protocol:
    """Append-only list of human-readable trace lines."""
    lines: list[str] = field(default_factory=list)

    def add(self, line: str) -> "Protocol":
        self.lines.append(line)
        return self

    def blank(self) -> "Protocol":
        self.lines.append("")
        return self

    def rule(self, title: str | None = None) -> "Protocol":
        self.lines.append(RULE)
        if title:
            self.lines.append(title)
            self.lines.append(RULE)
        return self

    def extend(self, lines, indent: str = "") -> "Protocol":
        self.lines.extend(f"{indent}{l}" if l else "" for l in lines)
        return self

    def __len__(self) -> int:
        return len(self.lines)

    def text(self) -> str:
        return "\n".join(self.lines)
