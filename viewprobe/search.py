# viewprobe/search.py
"""
@file search.py
@brief Breadth-first / depth-first search over inspectable views.

The search fail-softs: nodes it cannot look into are recorded as blockers
and reported on NotFound instead of aborting the walk.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, FrozenSet, Iterator, List, Optional, Tuple

from .catalog import Category
from .classifier import UNKNOWN_KIND
from .config import SEARCH_ORDERS, InspectConfig
from .envelope import Envelope
from .exceptions import (
    InspectionError,
    MissingAmbientDependency,
    NotFound,
    TypeMismatch,
    ViewNotFound,
)
from .tracelogger import TRACE_LOGGER
from .view import InspectableView

log = logging.getLogger("viewprobe.search")

Predicate = Callable[[InspectableView], Any]


@dataclass(frozen=True)
class SearchMatch:
    """A view the predicate accepted, with the path that reached it."""
    view: InspectableView

    @property
    def envelope(self) -> Envelope:
        return self.view.envelope

    @property
    def path(self) -> str:
        return self.view.path


@dataclass
class Blocker:
    """A node the search could not look into."""
    path: str
    type_name: str
    error: InspectionError

    def describe(self) -> str:
        e = self.error
        if isinstance(e, MissingAmbientDependency):
            return f"{e.view} (missing {', '.join(e.keys)})"
        if isinstance(e, TypeMismatch) and e.expected == UNKNOWN_KIND:
            return f"{e.actual} (unknown node kind)"
        return f"{self.type_name} ({e.message})"


class Search:
    """
    One traversal: frontier and blockers.

    Config is read once, when the search is created.
    """

    def __init__(
        self,
        order: Optional[str] = None,
        max_depth: Optional[int] = None,
        strict_predicates: Optional[bool] = None,
    ):
        config = InspectConfig.current()
        self.order = order or config.default_order
        if self.order not in SEARCH_ORDERS:
            raise ValueError(f"Unknown search order: {self.order}. Use one of {SEARCH_ORDERS}")
        self.max_depth = max_depth if max_depth is not None else config.max_depth
        self.strict = config.strict_predicates if strict_predicates is None else strict_predicates
        self.blockers: List[Blocker] = []

    @property
    def blocker_descriptions(self) -> List[str]:
        seen: List[str] = []
        for blocker in self.blockers:
            text = blocker.describe()
            if text not in seen:
                seen.append(text)
        return seen

    def _block(self, view: InspectableView, error: InspectionError, type_name: Optional[str] = None) -> None:
        blocker = Blocker(view.path, type_name or view.type_name, error)
        self.blockers.append(blocker)
        log.debug("Search blocked at %s: %s", view.path, error)
        TRACE_LOGGER.log(
            event="search_blocker",
            path=view.path,
            status="warning",
            metadata={"reason": blocker.describe()},
        )

    def walk(self, root: InspectableView) -> Iterator[InspectableView]:
        """
        Yield views in search order.

        A node reached again below itself is not yielded; the same value at
        two sibling positions is yielded once per position.
        """
        frontier: Deque[Tuple[InspectableView, FrozenSet[str], FrozenSet[int]]] = deque(
            [(root, frozenset(), frozenset())]
        )
        depth_first = self.order == "depth_first"
        while frontier:
            view, lineage, ancestors = frontier.pop() if depth_first else frontier.popleft()
            # Ancestor nodes stay referenced through view.parent, so ids are stable.
            key = id(view.node)
            if key in ancestors:
                TRACE_LOGGER.log(event="search_skip_cycle", path=view.path)
                continue
            yield view

            if view.depth - root.depth >= self.max_depth:
                continue
            ancestors = ancestors | {key}
            children = [(child, names, ancestors) for child, names in self.expand(view, lineage)]
            if depth_first:
                children.reverse()
            frontier.extend(children)

    def expand(
        self, view: InspectableView, lineage: FrozenSet[str]
    ) -> List[Tuple[InspectableView, FrozenSet[str]]]:
        """Children of a view plus the views carried by its modifiers."""
        result: List[Tuple[InspectableView, FrozenSet[str]]] = []
        try:
            category = view.category
        except InspectionError as e:
            self._block(view, e)
            return result

        if category == Category.COMPOSED:
            name = view.type_name
            if name in lineage:
                TRACE_LOGGER.log(event="search_skip_recursive", path=view.path)
                return result
            lineage = lineage | {name}

        try:
            group = view.children()
        except ViewNotFound:
            group = None
        except InspectionError as e:
            self._block(view, e)
            group = None

        if group is not None:
            for i in range(group.count):
                try:
                    child = view.child(i if group.indexed else None)
                except ViewNotFound:
                    continue
                except InspectionError as e:
                    raw = group.nodes[i]
                    self._block(view, e, view.accessor.type_name(raw))
                    continue
                result.append((child, lineage))

        counters: Dict[str, int] = {}
        for modifier in view.modifiers:
            index = counters.get(modifier.kind, 0)
            counters[modifier.kind] = index + 1
            if view.classifier.kind_of(modifier.payload) is None:
                continue
            # Same exact-kind indexing as InspectableView.modifier.
            result.append((view.modifier(modifier.kind, index), lineage))
        return result

    def test(self, predicate: Predicate, view: InspectableView) -> bool:
        try:
            return bool(predicate(view))
        except InspectionError:
            if self.strict:
                raise
            return False


def find(
    root: InspectableView,
    predicate: Predicate,
    order: Optional[str] = None,
    skip_found: int = 0,
    max_depth: Optional[int] = None,
) -> SearchMatch:
    """
    First view in root's subtree (root included) accepted by predicate.

    @param order "breadth_first" or "depth_first" (config default if None)
    @param skip_found Number of matches to skip
    @throws NotFound with the skipped count and the blockers met
    """
    search = Search(order, max_depth)
    TRACE_LOGGER.log(
        event="search_start",
        path=root.path,
        metadata={"order": search.order, "skip_found": skip_found},
    )
    skipped = 0
    for view in search.walk(root):
        if not search.test(predicate, view):
            continue
        if skipped < skip_found:
            skipped += 1
            continue
        TRACE_LOGGER.log(event="search_match", path=view.path, status="success")
        return SearchMatch(view)

    blockers = search.blocker_descriptions
    TRACE_LOGGER.log(
        event="search_not_found",
        path=root.path,
        status="error",
        metadata={"skipped": skipped, "blockers": len(blockers)},
    )
    raise NotFound(skipped, blockers)


def find_all(
    root: InspectableView,
    predicate: Predicate,
    max_depth: Optional[int] = None,
) -> List[SearchMatch]:
    """Every match in root's subtree, depth-first."""
    search = Search("depth_first", max_depth)
    return [SearchMatch(view) for view in search.walk(root) if search.test(predicate, view)]


def find_parent(
    view: InspectableView,
    predicate: Predicate,
    skip_found: int = 0,
) -> SearchMatch:
    """Nearest ancestor accepted by predicate."""
    search = Search()
    skipped = 0
    current = view.parent
    while current is not None:
        if search.test(predicate, current):
            if skipped >= skip_found:
                return SearchMatch(current)
            skipped += 1
        current = current.parent
    raise NotFound(skipped)
