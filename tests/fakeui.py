# tests/fakeui.py
"""
Miniature declarative UI framework used as inspection target in tests.

Node kinds mimic the shapes of a real framework: private storage fields,
type-erased wrappers, modified content, conditionals and composed views
with ambient slots.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterable, Tuple, TypeVar

T = TypeVar("T")


class View:
    """Modifier-building methods shared by every node kind."""

    def padding(self, length: float = 8.0) -> "ModifiedContent":
        return ModifiedContent(self, _PaddingLayout(length))

    def foreground_color(self, color: str) -> "ModifiedContent":
        return ModifiedContent(self, _ForegroundColorModifier(color))

    def overlay(self, view: Any, alignment: str = "center") -> "ModifiedContent":
        return ModifiedContent(self, _OverlayModifier(view, alignment))

    def background(self, view: Any) -> "ModifiedContent":
        return ModifiedContent(self, _BackgroundModifier(view))

    def erased(self) -> "AnyView":
        return AnyView(self)


# --- Leaves ---

@dataclass(frozen=True)
class Text(View):
    _verbatim: str


@dataclass(frozen=True)
class Image(View):
    name: str


@dataclass(frozen=True)
class EmptyView(View):
    pass


# --- Modifiers ---

@dataclass(frozen=True)
class ModifiedContent(View):
    content: Any
    modifier: Any


@dataclass(frozen=True)
class _PaddingLayout:
    length: float


@dataclass(frozen=True)
class _ForegroundColorModifier:
    color: str


@dataclass(frozen=True)
class _OverlayModifier:
    overlay: Any
    alignment: str = "center"


@dataclass(frozen=True)
class _BackgroundModifier:
    background: Any


@dataclass(frozen=True)
class _OverlayModifierStyle:
    """Uncatalogued modifier whose name extends a catalogued one."""
    style: str


# --- Type erasure ---

class AnyViewStorage:
    __slots__ = ("view",)

    def __init__(self, view: Any):
        self.view = view


class AnyView(View):
    __slots__ = ("storage",)

    def __init__(self, view: Any):
        self.storage = AnyViewStorage(view)


# --- Optionals and conditionals ---

@dataclass(frozen=True)
class Optional(View):
    some: Any = None


@dataclass(frozen=True)
class _ConditionalContent(View):
    storage: Dict[str, Any]


def conditional(flag: bool, true_view: Any, false_view: Any) -> _ConditionalContent:
    if flag:
        return _ConditionalContent({"trueContent": true_view})
    return _ConditionalContent({"falseContent": false_view})


def if_(flag: bool, view: Any) -> Optional:
    return Optional(view if flag else None)


# --- Containers ---

@dataclass(frozen=True)
class TupleView(View):
    value: Tuple[Any, ...]


def _build(views: Tuple[Any, ...]) -> Any:
    if len(views) == 1:
        return views[0]
    return TupleView(tuple(views))


@dataclass(frozen=True)
class _VStackLayout:
    spacing: Any = None


@dataclass(frozen=True)
class _HStackLayout:
    spacing: Any = None


@dataclass(frozen=True)
class _VariadicTree:
    root: Any
    content: Any


class VStack(View):
    def __init__(self, *content: Any, spacing: Any = None):
        self._tree = _VariadicTree(_VStackLayout(spacing), _build(content))


class HStack(View):
    def __init__(self, *content: Any, spacing: Any = None):
        self._tree = _VariadicTree(_HStackLayout(spacing), _build(content))


class Group(View):
    def __init__(self, *content: Any):
        self.content = _build(content)


class ForEach(View):
    def __init__(self, data: Iterable[Any], builder: Callable[[Any], Any]):
        self.data = list(data)
        self.content = [builder(item) for item in self.data]


class Container(View):
    """Not in the default catalog; tests register it."""

    def __init__(self, *content: Any):
        self.content = list(content)


@dataclass(frozen=True)
class Button(View):
    action: Callable[[], None]
    _label: Any


class ScrollView(View):
    def __init__(self, content: Any, axes: str = "vertical"):
        self.axes = axes
        self.content = content


class Widget(View):
    """Uncatalogued node without a body."""

    def __init__(self, payload: Any = None):
        self.payload = payload


# --- Ambient slots ---

class EnvironmentObject(Generic[T]):
    __slots__ = ("key", "_store")

    def __init__(self, key: type):
        self.key = key
        self._store = None

    @classmethod
    def injected(cls, key: type, instance: Any) -> "EnvironmentObject":
        slot = cls(key)
        slot._store = instance
        return slot

    @property
    def wrapped_value(self) -> Any:
        if self._store is None:
            raise RuntimeError(f"No ObservableObject of type {self.key.__name__} found")
        return self._store


@dataclass(frozen=True)
class StateObjectRef:
    """Slot without an injection constructor."""
    key: type
    _store: Any = field(default=None, init=False)


class UserModel:
    def __init__(self, name: str = "Ada"):
        self.name = name


class Settings:
    def __init__(self, theme: str = "dark"):
        self.theme = theme


# --- Composed views ---

@dataclass
class Greeting(View):
    name: str

    @property
    def body(self) -> Any:
        return VStack(Text(f"Hello, {self.name}"), Text("Welcome").padding())


@dataclass
class Profile(View):
    model: EnvironmentObject = field(default_factory=lambda: EnvironmentObject(UserModel))
    settings: EnvironmentObject = field(default_factory=lambda: EnvironmentObject(Settings))

    @property
    def body(self) -> Any:
        return HStack(
            Text(self.model.wrapped_value.name),
            Text(self.settings.wrapped_value.theme),
        )


class SlottedBadge(View):
    """Composed view without a public replace protocol."""
    __slots__ = ("model",)

    def __init__(self):
        self.model = EnvironmentObject(UserModel)

    def body(self) -> Any:
        return Text(f"@{self.model.wrapped_value.name}")


@dataclass(frozen=True)
class LegacyProfile(View):
    model: StateObjectRef = field(default_factory=lambda: StateObjectRef(UserModel))

    @property
    def body(self) -> Any:
        if self.model._store is None:
            raise RuntimeError("StateObjectRef read outside of a render")
        return Text(self.model._store.name)


@dataclass
class Recursive(View):
    depth: int = 0

    @property
    def body(self) -> Any:
        return VStack(Text(f"level {self.depth}"), Recursive(self.depth + 1))


@dataclass
class Broken(View):
    @property
    def body(self) -> Any:
        raise ValueError("boom")


@dataclass
class TextRow(View):
    """User view whose name starts with a framework leaf name."""
    title: str = "inside"

    @property
    def body(self) -> Any:
        return HStack(Text(self.title), Image("chevron"))


@dataclass
class ListItem(View):
    """User view whose name starts with a framework container name."""
    label: str = "item"

    @property
    def body(self) -> Any:
        return Text(self.label)
