# viewprobe/view.py
"""
@file view.py
@brief Path-tracking query facade over the classifier.

Every accessor call either returns a new InspectableView whose path is one
step longer, or raises an InspectionError carrying the path reached so far.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, Iterator, List, Optional, Tuple

from .catalog import Catalog, Category
from .classifier import ChildGroup, Classifier
from .envelope import Envelope, Modifier
from .exceptions import (
    IndexOutOfBounds,
    InspectionError,
    LabelNotFound,
    TypeMismatch,
    ViewNotFound,
)
from .injector import AmbientRegistry
from .interfaces import IAccessor, IConstructor
from .path import InspectionPath

Predicate = Callable[["InspectableView"], Any]


class InspectableView:
    """
    Read-only facade over one unwrapped node.

    Holds the envelope (node, modifiers, ambient registry), the path that
    led here and the parent facade.
    """

    def __init__(
        self,
        envelope: Envelope,
        path: InspectionPath,
        classifier: Classifier,
        parent: Optional[InspectableView] = None,
    ):
        """
        @param envelope Unwrapped envelope of this node
        @param path Path from the root, including this node's step
        @param classifier Classifier shared by the whole tree
        @param parent Facade this one was reached from
        """
        self._envelope = envelope
        self._path = path
        self._classifier = classifier
        self._parent = parent
        self._group: Optional[ChildGroup] = None

    # --- Identity ---

    @property
    def envelope(self) -> Envelope:
        return self._envelope

    @property
    def node(self) -> Any:
        return self._envelope.node

    @property
    def parent(self) -> Optional[InspectableView]:
        return self._parent

    @property
    def classifier(self) -> Classifier:
        return self._classifier

    @property
    def accessor(self) -> IAccessor:
        return self._classifier.accessor

    @property
    def path(self) -> str:
        return self._path.render()

    @property
    def inspection_path(self) -> InspectionPath:
        return self._path

    @property
    def depth(self) -> int:
        return len(self._path) - 1

    @property
    def type_name(self) -> str:
        return self.accessor.type_name(self.node)

    @property
    def category(self) -> Category:
        with self._located():
            return self._classifier.classify(self._envelope)

    def is_of_type(self, prefix: str) -> bool:
        return self.accessor.is_of_type(self.node, prefix)

    def path_to_root(self) -> str:
        """Deterministic rendering of the path, e.g. "vStack().child(1)"."""
        return self._path.render()

    def __repr__(self) -> str:
        return f"InspectableView({self.path} -> {self.type_name})"

    @contextmanager
    def _located(self) -> Generator[None, None, None]:
        try:
            yield
        except InspectionError as e:
            e.at(self.path)
            raise

    def _make(self, envelope: Envelope, path: InspectionPath) -> InspectableView:
        return InspectableView(envelope, path, self._classifier, parent=self)

    # --- Children ---

    def children(self) -> ChildGroup:
        """Child group of this node, computed once."""
        if self._group is None:
            with self._located():
                self._group = self._classifier.children(self._envelope)
        return self._group

    @property
    def count(self) -> int:
        return self.children().count

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[InspectableView]:
        group = self.children()
        for i in range(group.count):
            yield self.child(i if group.indexed else None)

    def __getitem__(self, index: int) -> InspectableView:
        return self.child(index)

    def _element(self, index: Optional[int]) -> Tuple[Envelope, Optional[int]]:
        group = self.children()
        with self._located():
            if not group.indexed:
                if index not in (None, 0):
                    raise IndexOutOfBounds(index, group.count)
                return group.element(0), None
            if index is None:
                raise TypeMismatch(expected="single-child view", actual=self.type_name)
            return group.element(index), index

    def child(self, index: Optional[int] = None) -> InspectableView:
        """
        Child facade: child() for single-child nodes, child(i) for
        containers and tuples.

        @throws IndexOutOfBounds, ViewNotFound, TypeMismatch with this path
        """
        envelope, index = self._element(index)
        return self._make(envelope, self._path.extend("child", index))

    def view(self, prefix: str, index: Optional[int] = None) -> InspectableView:
        """
        Child facade with a type guard; the step is named after the kind.

        @param prefix Expected type name or type name prefix
        @param index Child index for containers, None for single-child nodes
        @throws TypeMismatch "<path> found <actual> instead of <prefix>"
        """
        envelope, index = self._element(index)
        if not self.accessor.is_of_type(envelope.node, prefix):
            raise TypeMismatch(
                expected=prefix,
                actual=self.accessor.type_name(envelope.node),
                path=self.path,
            )
        name = self._classifier.call_name(envelope)
        return self._make(envelope, self._path.extend(name, index))

    def descend(self, label: str, call: Optional[str] = None) -> InspectableView:
        """
        Facade over the view stored in one of this node's fields.

        @param label Field label or `|` path, e.g. "label" or "_tree|content"
        @param call Step name (defaults to the last label)
        """
        with self._located():
            value = self.accessor.field_by_path(self.node, label, unbox=True)
            envelope = self._classifier.unwrap(self._envelope.reset_child(value))
        name = call or label.split("|")[-1].lstrip("_")
        return self._make(envelope, self._path.extend(name))

    # --- Modifiers ---

    @property
    def modifiers(self) -> List[Modifier]:
        """Modifiers applied to this node, in application order."""
        return list(self._envelope.modifier_stack)

    def modifier_count(self, kind: str) -> int:
        return len(self._envelope.modifiers_of(kind))

    def has_modifier(self, kind: str) -> bool:
        return self.modifier_count(kind) > 0

    def modifier(self, kind: str, index: int = 0) -> InspectableView:
        """
        Facade over the index-th modifier of a kind, in application order.

        @throws ViewNotFound naming the modifier
        """
        matches = self._envelope.modifiers_of(kind)
        if not 0 <= index < len(matches):
            error = ViewNotFound(
                kind,
                f"Modifier {kind} not found" if not matches
                else f"Modifier {kind} index {index} not found, {len(matches)} applied",
            )
            raise error.at(self.path)
        envelope = Envelope(matches[index].payload, (), self._envelope.ambient)
        return self._make(envelope, self._path.extend("modifier", kind, index or None))

    def modifier_attribute(self, kind: str, path: str, expected_type: Any = None) -> Any:
        """
        Attribute of the last applied modifier of a kind that carries path.

        @throws ViewNotFound if no such modifier is applied
        @throws LabelNotFound if none of them carries the path
        """
        matches = self._envelope.modifiers_of(kind)
        with self._located():
            if not matches:
                raise ViewNotFound(kind, f"Modifier {kind} not found")
            last_error: Optional[LabelNotFound] = None
            for modifier in reversed(matches):
                try:
                    value = self.accessor.field_by_path(modifier.payload, path)
                except LabelNotFound as e:
                    last_error = e
                    continue
                return self.accessor.cast(value, expected_type)
            raise last_error

    # --- Attributes ---

    def attribute(self, path: str, expected_type: Any = None) -> Any:
        """
        Read-only projection of this node's fields.

        @param path Label or `|` path
        @param expected_type Optional type (or tuple of types) to check
        """
        with self._located():
            value = self.accessor.field_by_path(self.node, path)
            return self.accessor.cast(value, expected_type)

    def attributes_tree(self) -> Dict[str, Any]:
        ambient = self._envelope.ambient
        tree = self.accessor.attributes_tree(
            self.node, expand=lambda v: self._classifier.expand_body(v, ambient)
        )
        return tree if isinstance(tree, dict) else {"=": tree}

    def format_tree(self) -> str:
        ambient = self._envelope.ambient
        return self.accessor.format_tree(
            self.node, expand=lambda v: self._classifier.expand_body(v, ambient)
        )

    def print_tree(self) -> None:
        print(self.format_tree())

    # --- Search ---

    def find(
        self,
        predicate: Predicate,
        order: Optional[str] = None,
        skip_found: int = 0,
        relation: str = "child",
    ) -> InspectableView:
        """
        First matching view in this subtree (or among the ancestors when
        relation is "parent").

        @throws NotFound listing the nodes the search could not look into
        """
        from . import search

        if relation == "parent":
            return search.find_parent(self, predicate, skip_found=skip_found).view
        if relation != "child":
            raise ValueError(f"Unknown relation: {relation}. Use 'child' or 'parent'")
        return search.find(self, predicate, order=order, skip_found=skip_found).view

    def find_all(self, predicate: Predicate) -> List[InspectableView]:
        from . import search

        return [match.view for match in search.find_all(self, predicate)]

    def find_kind(
        self,
        prefix: str,
        where: Optional[Predicate] = None,
        order: Optional[str] = None,
        skip_found: int = 0,
        relation: str = "child",
    ) -> InspectableView:
        """First view whose type matches prefix and, if given, where."""
        def predicate(view: InspectableView) -> bool:
            return view.is_of_type(prefix) and (where is None or bool(where(view)))

        return self.find(predicate, order=order, skip_found=skip_found, relation=relation)


def inspect(
    node: Any,
    registry: Optional[AmbientRegistry] = None,
    catalog: Optional[Catalog] = None,
    accessor: Optional[IAccessor] = None,
    constructor: Optional[IConstructor] = None,
) -> InspectableView:
    """
    Entry point: facade over the root of a view tree.

    @param node Root node
    @param registry Ambient objects for composed views
    @param catalog Node kinds (the default catalog if None)
    @return InspectableView whose path is "<rootKind>()"
    """
    classifier = Classifier(accessor, catalog, constructor)
    raw = Envelope(node, (), registry)
    try:
        envelope = classifier.unwrap(raw)
    except InspectionError as e:
        e.at(InspectionPath.root(classifier.call_name(raw)).render())
        raise
    return InspectableView(envelope, InspectionPath.root(classifier.call_name(envelope)), classifier)
