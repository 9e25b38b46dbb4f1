# viewprobe/path.py
"""
@file path.py
@brief Immutable inspection paths, e.g. "vStack().child(1).modifier(Padding)".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

SEPARATOR = "."


@dataclass(frozen=True)
class PathStep:
    """One accessor call: name plus its rendered arguments."""
    name: str
    args: Tuple[Any, ...] = ()

    def render(self) -> str:
        return f"{self.name}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class InspectionPath:
    """Ordered steps from the root; extended by exactly one step per call."""
    steps: Tuple[PathStep, ...] = ()

    @classmethod
    def root(cls, name: str) -> InspectionPath:
        return cls((PathStep(name),))

    def extend(self, name: str, *args: Any) -> InspectionPath:
        return InspectionPath(self.steps + (PathStep(name, tuple(a for a in args if a is not None)),))

    def render(self) -> str:
        return SEPARATOR.join(step.render() for step in self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __str__(self) -> str:
        return self.render()
