# viewprobe/__init__.py
"""
viewprobe - Runtime introspection of declarative view trees.

This package provides:
- Accessor: reflection over opaque node values
- Catalog: node kind registry (type prefix -> structural category)
- Classifier: unwrap protocol per category
- InspectableView: path-tracking query facade
- Search: breadth-first / depth-first find with blocker reporting
- Injector: ambient state for composed views
- InspectionChannel: inspections driven by lifecycle notifications
"""

from viewprobe.accessor import ReflectionAccessor
from viewprobe.catalog import AmbientSlotKind, Catalog, Category, NodeKind
from viewprobe.classifier import ChildGroup, Classifier
from viewprobe.config import InspectConfig, WaitSettings
from viewprobe.emissary import InspectionChannel, InspectionExpectation
from viewprobe.envelope import Envelope, Modifier
from viewprobe.exceptions import (
    BodyError,
    ConfigError,
    ConstructionError,
    IndexOutOfBounds,
    InspectionError,
    LabelNotFound,
    MissingAmbientDependency,
    NotFound,
    TimeoutError,
    TypeMismatch,
    ViewNotFound,
)
from viewprobe.injector import (
    AmbientRegistry,
    ExplicitConstructor,
    Injector,
    LayeredConstructor,
    UnsafeConstructor,
)
from viewprobe.interfaces import IAccessor, IConstructor
from viewprobe.path import InspectionPath, PathStep
from viewprobe.search import SearchMatch, find, find_all, find_parent
from viewprobe.tracelogger import TRACE_LOGGER
from viewprobe.view import InspectableView, inspect

__all__ = [
    "ReflectionAccessor",
    "AmbientSlotKind",
    "Catalog",
    "Category",
    "NodeKind",
    "ChildGroup",
    "Classifier",
    "InspectConfig",
    "WaitSettings",
    "InspectionChannel",
    "InspectionExpectation",
    "Envelope",
    "Modifier",
    "BodyError",
    "ConfigError",
    "ConstructionError",
    "IndexOutOfBounds",
    "InspectionError",
    "LabelNotFound",
    "MissingAmbientDependency",
    "NotFound",
    "TimeoutError",
    "TypeMismatch",
    "ViewNotFound",
    "AmbientRegistry",
    "ExplicitConstructor",
    "Injector",
    "LayeredConstructor",
    "UnsafeConstructor",
    "IAccessor",
    "IConstructor",
    "InspectionPath",
    "PathStep",
    "SearchMatch",
    "find",
    "find_all",
    "find_parent",
    "TRACE_LOGGER",
    "InspectableView",
    "inspect",
]

__version__ = "1.0.0"
