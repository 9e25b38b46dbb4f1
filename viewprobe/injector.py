# viewprobe/injector.py
"""
@file injector.py
@brief Ambient registry and injection of ambient state into composed views.

Composed views may declare ambient slots (e.g. EnvironmentObject fields)
that the framework fills in at render time. Reading their body outside the
framework needs those slots filled first. The Injector works on shallow
copies; the caller's node is never mutated.

Precondition: the registry is not mutated while a traversal is running.
"""

from __future__ import annotations

import copy
import dataclasses
import inspect as pyinspect
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .accessor import ReflectionAccessor
from .catalog import AmbientSlotKind, Catalog
from .exceptions import (
    BodyError,
    ConstructionError,
    InspectionError,
    LabelNotFound,
    MissingAmbientDependency,
)
from .interfaces import IAccessor, IConstructor

log = logging.getLogger("viewprobe.injector")


def key_name(key: Any) -> str:
    """Display name of a capability key."""
    if isinstance(key, type):
        return key.__name__
    return str(key)


class AmbientRegistry:
    """capability key -> instance map supplied before traversal."""

    def __init__(self, entries: Optional[Dict[Any, Any]] = None):
        self._entries: Dict[Any, Any] = dict(entries or {})

    def register(self, key: Any, instance: Any) -> AmbientRegistry:
        self._entries[key] = instance
        return self

    def register_object(self, instance: Any) -> AmbientRegistry:
        """Register an object under its own type."""
        return self.register(type(instance), instance)

    def unregister(self, key: Any) -> None:
        self._entries.pop(key, None)

    def resolve(self, key: Any) -> Optional[Any]:
        return self._entries.get(key)

    def keys(self) -> List[Any]:
        return list(self._entries)

    def copy(self) -> AmbientRegistry:
        return AmbientRegistry(self._entries)

    def __contains__(self, key: Any) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AmbientRegistry({[key_name(k) for k in self._entries]})"


class ExplicitConstructor(IConstructor):
    """
    Builds slots through the framework's own injection classmethod and
    copies nodes through their public replace protocol.
    """

    def build_slot(
        self,
        slot_type: type,
        key: Any,
        instance: Any,
        store_label: str,
        key_label: str,
        constructor: Optional[str] = None,
    ) -> Any:
        factory = getattr(slot_type, constructor, None) if constructor else None
        if factory is None or not callable(factory):
            raise ConstructionError(slot_type.__name__, f"no injection constructor {constructor!r}")
        return factory(key, instance)

    def replace_field(self, value: Any, label: str, field_value: Any) -> Any:
        if isinstance(value, tuple) and hasattr(value, "_replace"):
            return value._replace(**{label: field_value})
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            try:
                return dataclasses.replace(value, **{label: field_value})
            except (TypeError, ValueError) as e:
                raise ConstructionError(type(value).__name__, str(e)) from e
        raise ConstructionError(type(value).__name__, "no public replace protocol")


class UnsafeConstructor(IConstructor):
    """
    Last resort: allocate without __init__ and write straight into storage.

    Bypasses frozen-dataclass and __setattr__ guards. Depends on the slot
    type keeping its key and store as plain attributes; only reachable
    through LayeredConstructor.
    """

    def build_slot(
        self,
        slot_type: type,
        key: Any,
        instance: Any,
        store_label: str,
        key_label: str,
        constructor: Optional[str] = None,
    ) -> Any:
        try:
            slot = object.__new__(slot_type)
            object.__setattr__(slot, key_label, key)
            object.__setattr__(slot, store_label, instance)
        except (TypeError, AttributeError) as e:
            raise ConstructionError(slot_type.__name__, str(e)) from e
        return slot

    def replace_field(self, value: Any, label: str, field_value: Any) -> Any:
        try:
            clone = copy.copy(value)
            object.__setattr__(clone, label, field_value)
        except (TypeError, AttributeError, copy.Error) as e:
            raise ConstructionError(type(value).__name__, str(e)) from e
        return clone


class LayeredConstructor(IConstructor):
    """Tries each constructor in order; the first that succeeds wins."""

    def __init__(self, layers: Optional[Sequence[IConstructor]] = None):
        self.layers: List[IConstructor] = list(layers or (ExplicitConstructor(), UnsafeConstructor()))

    def build_slot(
        self,
        slot_type: type,
        key: Any,
        instance: Any,
        store_label: str,
        key_label: str,
        constructor: Optional[str] = None,
    ) -> Any:
        return self._first(
            "build_slot", slot_type, key, instance, store_label, key_label, constructor
        )

    def replace_field(self, value: Any, label: str, field_value: Any) -> Any:
        return self._first("replace_field", value, label, field_value)

    def _first(self, method: str, *args: Any) -> Any:
        errors: List[ConstructionError] = []
        for layer in self.layers:
            try:
                return getattr(layer, method)(*args)
            except ConstructionError as e:
                log.debug("%s.%s failed: %s", type(layer).__name__, method, e)
                errors.append(e)
        if errors:
            raise errors[-1]
        raise ConstructionError("<unknown>", "no constructor layers")


class Injector:
    """
    Fills ambient slots of composed views from an AmbientRegistry.
    """

    def __init__(
        self,
        registry: Optional[AmbientRegistry] = None,
        catalog: Optional[Catalog] = None,
        accessor: Optional[IAccessor] = None,
        constructor: Optional[IConstructor] = None,
    ):
        self.registry = registry if registry is not None else AmbientRegistry()
        self.catalog = catalog or Catalog.default()
        self.accessor = accessor or ReflectionAccessor(self.catalog.boxes)
        self.constructor = constructor or LayeredConstructor()

    def slots(self, node: Any) -> Iterator[Tuple[str, Any, AmbientSlotKind]]:
        """Yield (label, slot value, slot kind) for every ambient slot field."""
        for label, value in self.accessor.fields(node):
            if value is None:
                continue
            kind = self.catalog.lookup_slot(self.accessor.type_name(value, prefix_only=True))
            if kind is not None:
                yield label, value, kind

    def _is_filled(self, slot: Any, kind: AmbientSlotKind) -> bool:
        try:
            return self.accessor.field_by_label(slot, kind.store_label) is not None
        except LabelNotFound:
            return False

    def missing_dependencies(self, node: Any) -> List[str]:
        """
        List every unfilled slot whose key the registry cannot resolve.

        @return "label: KeyName" entries in field order
        """
        missing = []
        for label, slot, kind in self.slots(node):
            if self._is_filled(slot, kind):
                continue
            key = self.accessor.field_by_label(slot, kind.key_label)
            if key not in self.registry:
                missing.append(f"{label}: {key_name(key)}")
        return missing

    def inject(self, node: Any) -> Any:
        """
        Return a copy of node with its ambient slots filled.

        @param node Composed view; not mutated
        @return node itself if nothing needed filling, else a shallow copy
        @throws MissingAmbientDependency listing all missing keys
        """
        missing = self.missing_dependencies(node)
        if missing:
            raise MissingAmbientDependency(self.accessor.type_name(node), missing)

        result = node
        for label, slot, kind in list(self.slots(node)):
            if self._is_filled(slot, kind):
                continue
            key = self.accessor.field_by_label(slot, kind.key_label)
            filled = self.constructor.build_slot(
                type(slot),
                key,
                self.registry.resolve(key),
                kind.store_label,
                kind.key_label,
                kind.constructor,
            )
            result = self.constructor.replace_field(result, label, filled)
            log.debug("Injected %s into %s.%s", key_name(key), type(node).__name__, label)
        return result

    def extract_body(self, node: Any) -> Any:
        """
        Evaluate a composed view's body with ambient slots filled.

        @throws MissingAmbientDependency, ConstructionError, BodyError
        """
        injected = self.inject(node)
        try:
            body = getattr(injected, "body")
            if pyinspect.ismethod(body):
                body = body()
        except InspectionError:
            raise
        except Exception as e:
            raise BodyError(self.accessor.type_name(node), e) from e
        return body


def has_body(node: Any) -> bool:
    """True for values exposing a body attribute, property or method."""
    if node is None or isinstance(node, type):
        return False
    return hasattr(type(node), "body") or "body" in getattr(node, "__dict__", {})
