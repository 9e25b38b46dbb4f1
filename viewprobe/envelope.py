# viewprobe/envelope.py
"""
@file envelope.py
@brief Content envelope threaded through every unwrap step.

An Envelope pairs a node with the modifiers collected on the way to it and a
read-only view of the ambient registry. Envelopes are immutable: every
unwrap step builds a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .injector import AmbientRegistry


@dataclass(frozen=True)
class Modifier:
    """One applied decoration on a node."""
    kind: str
    payload: Any

    def matches(self, kind: str) -> bool:
        """Exact match on the generic-free modifier kind."""
        return self.kind == kind.split("[", 1)[0]


@dataclass(frozen=True)
class Envelope:
    """
    (node, modifier stack, ambient registry view) triple.

    modifier_stack is kept in application order: the modifier applied first
    (innermost in the source) comes first.
    """
    node: Any
    modifier_stack: Tuple[Modifier, ...] = ()
    ambient: Optional[AmbientRegistry] = field(default=None, compare=False)

    def with_node(self, node: Any) -> Envelope:
        """Same stack and ambient view, different node."""
        return Envelope(node, self.modifier_stack, self.ambient)

    def with_modifier(self, modifier: Modifier) -> Envelope:
        """
        Record a modifier found while unwrapping from the outside in.

        Everything already on the stack was applied after this modifier, so
        it goes in front.
        """
        return Envelope(self.node, (modifier,) + self.modifier_stack, self.ambient)

    def reset_child(self, node: Any) -> Envelope:
        """Child envelope with an empty modifier stack."""
        return Envelope(node, (), self.ambient)

    def modifiers_of(self, kind: str) -> Tuple[Modifier, ...]:
        return tuple(m for m in self.modifier_stack if m.matches(kind))
