# viewprobe/classifier.py
"""
@file classifier.py
@brief Node classifier and unwrap protocol.

One generic classifier decides the structural category of a node from the
catalog and knows how to take each category apart. Transparent categories
(type-erased wrappers, modified nodes, optionals) are collapsed by unwrap;
the others expose their children through a ChildGroup.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from .accessor import ReflectionAccessor
from .catalog import TRANSPARENT, Catalog, Category, NodeKind
from .config import InspectConfig
from .envelope import Envelope, Modifier
from .exceptions import (
    IndexOutOfBounds,
    InspectionError,
    LabelNotFound,
    TypeMismatch,
    ViewNotFound,
)
from .injector import Injector, LayeredConstructor, has_body
from .interfaces import IAccessor, IConstructor

log = logging.getLogger("viewprobe.classifier")

UNKNOWN_KIND = "known node kind"


class ChildGroup:
    """
    Children of one node, unwrapped lazily on access.

    indexed is False for single-child groups (single-child containers and
    composed views); their only element is addressed without an index.
    """

    def __init__(
        self,
        parent: Envelope,
        nodes: List[Any],
        unwrap: Callable[[Envelope], Envelope],
        indexed: bool = True,
    ):
        self.parent = parent
        self.nodes = nodes
        self.indexed = indexed
        self._unwrap = unwrap

    @property
    def count(self) -> int:
        return len(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def element(self, index: int) -> Envelope:
        """
        Unwrapped child envelope with an empty modifier stack.

        @throws IndexOutOfBounds if index is not in 0..<count
        """
        if not 0 <= index < len(self.nodes):
            raise IndexOutOfBounds(index, len(self.nodes))
        return self._unwrap(self.parent.reset_child(self.nodes[index]))


class Classifier:
    """
    Priority-ordered classification over the catalog.

    leaf -> wrapper -> modified -> optional -> tuple -> multi -> single
    -> composed; the first match wins.
    """

    def __init__(
        self,
        accessor: Optional[IAccessor] = None,
        catalog: Optional[Catalog] = None,
        constructor: Optional[IConstructor] = None,
    ):
        self.catalog = catalog or Catalog.default()
        self.accessor = accessor or ReflectionAccessor(self.catalog.boxes)
        self.constructor = constructor or LayeredConstructor()

    # --- Classification ---

    def kind_of(self, node: Any) -> Optional[NodeKind]:
        if node is None:
            return None
        return self.catalog.lookup(self.accessor.type_name(node))

    def classify(self, envelope: Envelope) -> Category:
        """
        @return Category of the envelope's node
        @throws TypeMismatch for uncatalogued nodes without a body
        """
        node = envelope.node
        if node is None:
            return Category.OPTIONAL
        kind = self.kind_of(node)
        if kind is not None:
            return kind.category
        if has_body(node):
            return Category.COMPOSED
        raise TypeMismatch(expected=UNKNOWN_KIND, actual=self.accessor.type_name(node))

    def call_name(self, envelope: Envelope) -> str:
        """Name of the node kind as used in inspection paths."""
        if envelope.node is None:
            return "optional"
        kind = self.kind_of(envelope.node)
        if kind is not None:
            return kind.call_name
        name = self.accessor.type_name(envelope.node, prefix_only=True).lstrip("_")
        return name[:1].lower() + name[1:]

    # --- Unwrap ---

    def unwrap(self, envelope: Envelope) -> Envelope:
        """
        Collapse transparent categories until a structural node is reached.

        @throws ViewNotFound for an absent optional branch
        """
        current = envelope
        limit = InspectConfig.current().max_depth
        for _ in range(limit):
            category = self.classify(current)
            if category not in TRANSPARENT:
                return current
            node = current.node
            kind = self.kind_of(node)
            if category == Category.WRAPPER:
                payload = self.accessor.field_by_path(node, kind.storage_label or "view", unbox=True)
                current = current.reset_child(payload)
            elif category == Category.MODIFIED:
                content = self.accessor.field_by_label(node, kind.content_label)
                payload = self.accessor.field_by_label(node, kind.modifier_label)
                modifier = Modifier(self.accessor.type_name(payload, prefix_only=True), payload)
                current = current.with_node(content).with_modifier(modifier)
            else:
                current = current.with_node(self._present_branch(node, kind))
        raise InspectionError(f"Unwrap did not reach a structural node within {limit} steps")

    def _present_branch(self, node: Any, kind: Optional[NodeKind]) -> Any:
        if node is None:
            raise ViewNotFound("Optional.some")
        storage = node
        if kind.storage_label:
            storage = self.accessor.field_by_path(node, kind.storage_label)
        present = [label for label in kind.branch_labels if self.accessor.has_label(storage, label)]
        for label in present:
            value = self.accessor.field_by_label(storage, label, unbox=True)
            if value is not None:
                return value
        names = present or list(kind.branch_labels)
        log.debug("No present branch on %s among %s", kind.prefix, names)
        raise ViewNotFound(f"{kind.prefix}.{'|'.join(names)}")

    # --- Children ---

    def children(self, envelope: Envelope) -> ChildGroup:
        """
        Children of a node; transparent nodes are unwrapped first.

        @throws LabelNotFound if a container has none of its candidate labels
        @throws MissingAmbientDependency for composed views missing ambient objects
        """
        envelope = self.unwrap(envelope)
        category = self.classify(envelope)
        node = envelope.node
        kind = self.kind_of(node)

        if category == Category.LEAF:
            return ChildGroup(envelope, [], self.unwrap)
        if category == Category.SINGLE:
            return ChildGroup(envelope, [self._first_present(node, kind)], self.unwrap, indexed=False)
        if category == Category.COMPOSED:
            body = self.injector(envelope).extract_body(node)
            return ChildGroup(envelope, [body], self.unwrap, indexed=False)
        if category == Category.TUPLE:
            return ChildGroup(envelope, self._tuple_elements(node, kind), self.unwrap)
        content = self._first_present(node, kind)
        return ChildGroup(envelope, self._container_elements(content), self.unwrap)

    def _first_present(self, node: Any, kind: NodeKind) -> Any:
        labels = kind.child_labels or ("content",)
        for label in labels:
            try:
                return self.accessor.field_by_path(node, label, unbox=True)
            except LabelNotFound:
                continue
        raise LabelNotFound(labels[0], self.accessor.type_name(node), candidates=labels)

    def _tuple_elements(self, node: Any, kind: NodeKind) -> List[Any]:
        value = self._first_present(node, kind)
        return [item for _, item in self.accessor.fields(value)]

    def _container_elements(self, content: Any) -> List[Any]:
        if isinstance(content, (list, tuple)) and not hasattr(content, "_fields"):
            return list(content)
        kind = self.kind_of(content)
        if kind is not None and kind.category == Category.TUPLE:
            return self._tuple_elements(content, kind)
        return [content]

    # --- Ambient ---

    def injector(self, envelope: Envelope) -> Injector:
        return Injector(envelope.ambient, self.catalog, self.accessor, self.constructor)

    def expand_body(self, value: Any, ambient: Any = None) -> Any:
        """Body of an uncatalogued composed value, for attribute dumps."""
        if self.kind_of(value) is not None or not has_body(value):
            return None
        return self.injector(Envelope(value, ambient=ambient)).extract_body(value)
