# viewprobe/catalog.py
"""
@file catalog.py
@brief Registry of node kinds: type prefix -> structural category.

Concrete node kinds are described here instead of being handled by ad hoc
per-type code. Each adapter registers a NodeKind (a type prefix, the
category the classifier should apply, and the field labels it needs); the
generic classifier consults the registry. Extra kinds can be loaded from a
YAML document validated against schemas/catalog.schema.json.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from .exceptions import ConfigError

log = logging.getLogger("viewprobe.catalog")

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "catalog.schema.json")


class Category(IntEnum):
    """Structural categories, in classification priority order."""
    LEAF = 0
    WRAPPER = 1
    MODIFIED = 2
    OPTIONAL = 3
    TUPLE = 4
    MULTI = 5
    SINGLE = 6
    COMPOSED = 7

    @classmethod
    def parse(cls, name: str) -> Category:
        try:
            return cls[name.upper()]
        except KeyError:
            raise ConfigError(f"Unknown node category: {name!r}") from None


# Unwrapped away by the classifier; never a step of their own in a path.
TRANSPARENT = frozenset({Category.WRAPPER, Category.MODIFIED, Category.OPTIONAL})


def _lower_first(name: str) -> str:
    name = name.lstrip("_")
    return name[:1].lower() + name[1:]


@dataclass(frozen=True)
class NodeKind:
    """
    How to take one concrete node kind apart.

    child_labels: candidate labels of the child (single) or children (multi)
    branch_labels: optional/conditional branches, tried in order
    storage_label: `|` path to the payload (wrapper) or branch storage
    content_label / modifier_label: the pair of a modified node
    call: name used for this kind in inspection paths
    match: "exact" matches the generic-free type name only; "prefix" also
    matches any type name starting with the prefix
    """
    prefix: str
    category: Category
    child_labels: Tuple[str, ...] = ()
    branch_labels: Tuple[str, ...] = ()
    storage_label: Optional[str] = None
    content_label: str = "content"
    modifier_label: str = "modifier"
    call: Optional[str] = None
    match: str = "exact"

    @property
    def call_name(self) -> str:
        return self.call or _lower_first(self.prefix)


@dataclass(frozen=True)
class AmbientSlotKind:
    """
    A field type through which a node declares an ambient dependency.

    constructor: name of a classmethod on the slot type that builds a filled
    slot as constructor(key, instance); None if the framework exposes none.
    """
    prefix: str
    key_label: str = "key"
    store_label: str = "_store"
    constructor: Optional[str] = "injected"


DEFAULT_KINDS: List[NodeKind] = [
    NodeKind("Text", Category.LEAF),
    NodeKind("EmptyView", Category.LEAF),
    NodeKind("Spacer", Category.LEAF),
    NodeKind("Divider", Category.LEAF),
    NodeKind("Image", Category.LEAF),
    NodeKind("Color", Category.LEAF),
    NodeKind("AnyView", Category.WRAPPER, storage_label="storage|view"),
    NodeKind("ModifiedContent", Category.MODIFIED),
    NodeKind("Optional", Category.OPTIONAL, branch_labels=("some",)),
    NodeKind(
        "_ConditionalContent",
        Category.OPTIONAL,
        branch_labels=("trueContent", "falseContent"),
        storage_label="storage",
    ),
    NodeKind("TupleView", Category.TUPLE, child_labels=("value",)),
    NodeKind("Group", Category.MULTI, child_labels=("content",)),
    NodeKind("HStack", Category.MULTI, child_labels=("_tree|content", "content")),
    NodeKind("VStack", Category.MULTI, child_labels=("_tree|content", "content")),
    NodeKind("ZStack", Category.MULTI, child_labels=("_tree|content", "content")),
    NodeKind("List", Category.MULTI, child_labels=("content",)),
    NodeKind("Form", Category.MULTI, child_labels=("content",)),
    NodeKind("Section", Category.MULTI, child_labels=("content",)),
    NodeKind("ForEach", Category.MULTI, child_labels=("content",)),
    NodeKind("Button", Category.SINGLE, child_labels=("label", "_label")),
    NodeKind("NavigationView", Category.SINGLE, child_labels=("content",)),
    NodeKind("ScrollView", Category.SINGLE, child_labels=("content",)),
    NodeKind("EquatableView", Category.SINGLE, child_labels=("content",)),
    NodeKind("IDView", Category.SINGLE, child_labels=("content",)),
    NodeKind("_OverlayModifier", Category.SINGLE, child_labels=("overlay",), call="overlay"),
    NodeKind("_BackgroundModifier", Category.SINGLE, child_labels=("background",), call="background"),
]

DEFAULT_SLOTS: List[AmbientSlotKind] = [
    AmbientSlotKind("EnvironmentObject"),
]


class Catalog:
    """
    Registry of node kinds and ambient slot kinds.

    Registration is expected before traversal starts; a catalog is not
    mutated while a search is running.
    """

    def __init__(
        self,
        kinds: Iterable[NodeKind] = (),
        slots: Iterable[AmbientSlotKind] = (),
        boxes: Optional[Dict[str, str]] = None,
    ):
        self._kinds: Dict[str, NodeKind] = {}
        self._slots: Dict[str, AmbientSlotKind] = {}
        self.boxes: Dict[str, str] = dict(boxes or {})
        for kind in kinds:
            self.register(kind)
        for slot in slots:
            self.register_slot(slot)

    @classmethod
    def default(cls) -> Catalog:
        """Catalog with the generic framework shapes registered."""
        from .accessor import DEFAULT_BOXES

        return cls(DEFAULT_KINDS, DEFAULT_SLOTS, DEFAULT_BOXES)

    # --- Registration ---

    def register(self, kind: NodeKind) -> None:
        if kind.prefix in self._kinds:
            log.debug("Replacing node kind %s", kind.prefix)
        self._kinds[kind.prefix] = kind

    def unregister(self, prefix: str) -> None:
        self._kinds.pop(prefix, None)

    def register_slot(self, slot: AmbientSlotKind) -> None:
        self._slots[slot.prefix] = slot

    def copy(self) -> Catalog:
        return Catalog(self._kinds.values(), self._slots.values(), self.boxes)

    @property
    def kinds(self) -> List[NodeKind]:
        return list(self._kinds.values())

    # --- Lookup ---

    def lookup(self, type_name: str) -> Optional[NodeKind]:
        """
        Find the kind for a type name.

        An exact match on the generic-free name wins. Otherwise kinds that
        opted into prefix matching are candidates; the one with the
        highest-priority category wins, then the longest prefix. Anything
        else is uncatalogued.
        """
        base = type_name.split("[", 1)[0]
        exact = self._kinds.get(base)
        if exact is not None:
            return exact
        candidates = [
            k for p, k in self._kinds.items()
            if k.match == "prefix" and base.startswith(p)
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda k: (k.category, -len(k.prefix)))

    def lookup_slot(self, type_name: str) -> Optional[AmbientSlotKind]:
        return self._slots.get(type_name.split("[", 1)[0])

    # --- Loading ---

    @classmethod
    def from_yaml(cls, path: str, base: Optional[Catalog] = None) -> Catalog:
        """
        Load extra kinds from a YAML document on top of a base catalog.

        @param path YAML file path
        @param base Catalog to extend (the default catalog if None)
        @return New catalog
        @throws ConfigError if the file is missing or invalid
        """
        path = os.path.abspath(path)
        if not os.path.exists(path):
            raise ConfigError(f"Catalog YAML not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        catalog = (base or cls.default()).copy()
        catalog.load_entries(data, where=path)
        return catalog

    def load_entries(self, data: Any, where: str = "catalog") -> None:
        """Validate a catalog document and register its entries."""
        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError(f"{where}: catalog must be a mapping at root.")
        errors = sorted(_validator().iter_errors(data), key=lambda e: [str(p) for p in e.path])
        if errors:
            details = "; ".join(
                f"{'/'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errors
            )
            raise ConfigError(f"{where}: {details}")

        for entry in data.get("kinds", []):
            self.register(NodeKind(
                prefix=entry["prefix"],
                category=Category.parse(entry["category"]),
                child_labels=tuple(entry.get("child_labels", ())),
                branch_labels=tuple(entry.get("branch_labels", ())),
                storage_label=entry.get("storage_label"),
                content_label=entry.get("content_label", "content"),
                modifier_label=entry.get("modifier_label", "modifier"),
                call=entry.get("call"),
                match=entry.get("match", "exact"),
            ))
        for entry in data.get("ambient_slots", []):
            self.register_slot(AmbientSlotKind(
                prefix=entry["prefix"],
                key_label=entry.get("key_label", "key"),
                store_label=entry.get("store_label", "_store"),
                constructor=entry.get("constructor", "injected"),
            ))
        self.boxes.update(data.get("boxes", {}))


_VALIDATOR: Optional[Draft202012Validator] = None


def _validator() -> Draft202012Validator:
    global _VALIDATOR
    if _VALIDATOR is None:
        with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
            _VALIDATOR = Draft202012Validator(json.load(f))
    return _VALIDATOR
