"""Emission buffer: accumulates generated lines with indentation tracking."""

from __future__ import annotations


class EmissionBuffer:
    """Line buffer owned by a single generator run.

    Indentation is cosmetic but must be stable: fixtures compare bytes.
    """

    def __init__(self, unit: str = "    ") -> None:
        self.unit: str = unit
        self.depth: int = 0
        self.lines: list[str] = []

    def write(self, line: str = "") -> None:
        """Emit a line with current indentation. Blank lines stay empty."""
        if line:
            self.lines.append(self.unit * self.depth + line)
        else:
            self.lines.append("")

    def indent(self) -> None:
        self.depth += 1

    def dedent(self) -> None:
        if self.depth == 0:
            raise ValueError("dedent below column zero")
        self.depth -= 1

    def render(self) -> str:
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"
