# viewprobe/accessor.py
"""
@file accessor.py
@brief Structural accessor: generic reflection over opaque node values.

Python exposes the shape of a value in several ways (dataclass fields,
namedtuple fields, __slots__, instance __dict__, tuple positions). The
accessor folds them into one ordered list of labelled fields so the rest of
the engine can read any node without knowing its concrete type.
"""

from __future__ import annotations

import dataclasses
import enum
import typing
from collections.abc import Mapping, Sequence
from types import FunctionType, MethodType, ModuleType
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import InspectConfig
from .exceptions import InspectionError, LabelNotFound, TypeMismatch
from .interfaces import IAccessor

PATH_SEPARATOR = "|"

# Existential boxes: type name -> label of the boxed payload.
DEFAULT_BOXES: Dict[str, str] = {
    "AnyViewStorage": "view",
    "AnyBox": "value",
}

_SCALARS = (str, bytes, bytearray, int, float, complex, bool, type(None), enum.Enum)
_OPAQUE = (type, FunctionType, MethodType, ModuleType)
_MAX_BOX_LEVELS = 8


def _slot_names(cls: type) -> List[str]:
    names: List[str] = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__") or name in names:
                continue
            names.append(name)
    return names


def _arg_name(arg: Any) -> str:
    if isinstance(arg, type):
        return arg.__name__
    return getattr(arg, "__name__", None) or repr(arg)


class ReflectionAccessor(IAccessor):
    """
    Default accessor built on Python's runtime reflection.

    Field order:
      dataclass fields -> namedtuple fields -> tuple positions (".0", ".1")
      -> sequence items ("[0]") -> mapping keys -> __slots__ -> __dict__
    """

    def __init__(self, boxes: Optional[Dict[str, str]] = None, max_depth: Optional[int] = None):
        """
        @param boxes Existential box type names mapped to their payload label
        @param max_depth Depth limit for attributes_tree (config default if None)
        """
        self.boxes: Dict[str, str] = dict(DEFAULT_BOXES if boxes is None else boxes)
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        if self._max_depth is not None:
            return self._max_depth
        return InspectConfig.current().max_depth

    # --- Fields ---

    def fields(self, value: Any) -> List[Tuple[str, Any]]:
        if isinstance(value, _SCALARS) or isinstance(value, _OPAQUE):
            return []
        if dataclasses.is_dataclass(value):
            result = []
            for f in dataclasses.fields(value):
                try:
                    result.append((f.name, getattr(value, f.name)))
                except AttributeError:
                    continue
            return result
        if isinstance(value, tuple):
            names = getattr(value, "_fields", None)
            if names:
                return list(zip(names, value))
            return [(f".{i}", item) for i, item in enumerate(value)]
        if isinstance(value, Sequence):
            return [(f"[{i}]", item) for i, item in enumerate(value)]
        if isinstance(value, Mapping):
            return [(str(k), v) for k, v in value.items()]

        result = []
        seen = set()
        for name in _slot_names(type(value)):
            try:
                result.append((name, getattr(value, name)))
                seen.add(name)
            except AttributeError:
                continue
        for name, item in getattr(value, "__dict__", {}).items():
            if name not in seen and name != "__orig_class__":
                result.append((name, item))
        return result

    def field_by_label(self, value: Any, label: str, unbox: bool = False) -> Any:
        for name, item in self.fields(value):
            if name == label:
                return self.unbox(item) if unbox else item
        raise LabelNotFound(label, type(value).__name__)

    def has_label(self, value: Any, label: str) -> bool:
        return any(name == label for name, _ in self.fields(value))

    def field_by_path(self, value: Any, path: str, unbox: bool = False) -> Any:
        current = value
        consumed: List[str] = []
        for label in path.split(PATH_SEPARATOR):
            try:
                current = self.field_by_label(current, label)
            except LabelNotFound as e:
                raise LabelNotFound(
                    label, e.type_name, consumed=PATH_SEPARATOR.join(consumed) or None
                ) from None
            consumed.append(label)
        return self.unbox(current) if unbox else current

    def cast(self, value: Any, expected_type: Any) -> Any:
        """
        Check a projected value against a Python type.

        @throws TypeMismatch if value is not an instance of expected_type
        """
        if expected_type is None or isinstance(value, expected_type):
            return value
        if isinstance(expected_type, tuple):
            expected = " | ".join(_arg_name(t) for t in expected_type)
        else:
            expected = _arg_name(expected_type)
        raise TypeMismatch(expected=expected, actual=self.type_name(value))

    # --- Type names ---

    def unbox(self, value: Any) -> Any:
        """Strip existential boxes until a non-box value is reached."""
        for _ in range(_MAX_BOX_LEVELS):
            label = self.boxes.get(type(value).__name__)
            if label is None:
                return value
            value = self.field_by_label(value, label)
        return value

    def type_name(self, value: Any, namespaced: bool = False, prefix_only: bool = False) -> str:
        value = self.unbox(value)
        cls = type(value)
        name = f"{cls.__module__}.{cls.__qualname__}" if namespaced else cls.__name__
        if prefix_only:
            return name
        orig = getattr(value, "__orig_class__", None)
        args = typing.get_args(orig) if orig is not None else ()
        if args:
            name += "[" + ", ".join(_arg_name(a) for a in args) + "]"
        return name

    def is_of_type(self, value: Any, name_prefix: str) -> bool:
        name = self.type_name(value)
        return name == name_prefix or name.startswith(name_prefix)

    # --- Diagnostics ---

    def attributes_tree(
        self,
        value: Any,
        expand: Optional[Callable[[Any], Any]] = None,
        max_depth: Optional[int] = None,
    ) -> Any:
        limit = max_depth if max_depth is not None else self.max_depth
        return self._tree(value, expand, limit, 0, frozenset())

    def _tree(
        self,
        value: Any,
        expand: Optional[Callable[[Any], Any]],
        limit: int,
        depth: int,
        ancestors: frozenset,
    ) -> Any:
        if id(value) in ancestors:
            return "<cycle>"
        if depth >= limit:
            return "<max depth>"
        ancestors = ancestors | {id(value)}
        tree: Dict[str, Any] = {}
        for label, child in self.fields(value):
            key = f"{label}: {self.type_name(child)}"
            tree[key] = self._tree(child, expand, limit, depth + 1, ancestors)
        if expand is not None:
            try:
                body = expand(value)
            except InspectionError as e:
                tree["body"] = f"<unavailable: {e}>"
            else:
                if body is not None:
                    key = f"body: {self.type_name(body)}"
                    tree[key] = self._tree(body, expand, limit, depth + 1, ancestors)
        if not tree:
            return f"= {value!r}"
        return tree

    def format_tree(self, value: Any, expand: Optional[Callable[[Any], Any]] = None) -> str:
        """Render attributes_tree as indented text."""
        tree = self.attributes_tree(value, expand)
        return self.type_name(value) + _format(tree, 1)


def _format(value: Any, level: int) -> str:
    if isinstance(value, dict):
        indent = "  " * level
        lines = "".join(
            indent + key + _format(value[key], level + 1) for key in sorted(value)
        )
        return "\n" + lines
    return " " + str(value) + "\n"
