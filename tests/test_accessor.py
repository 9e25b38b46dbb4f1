# tests/test_accessor.py
"""
Tests for the reflection accessor.
"""

from collections import namedtuple
from dataclasses import dataclass
from typing import Generic, TypeVar

import pytest

from viewprobe.accessor import ReflectionAccessor
from viewprobe.exceptions import LabelNotFound, TypeMismatch

import fakeui

T = TypeVar("T")

Point = namedtuple("Point", ["x", "y"])


class Slotted:
    __slots__ = ("a", "b")

    def __init__(self):
        self.a = 1
        self.b = 2


class Tagged(Generic[T]):
    def __init__(self, value):
        self.value = value


@dataclass
class Node:
    label: str
    next: object = None


@pytest.fixture
def accessor():
    return ReflectionAccessor()


class TestFields:
    """Tests for field enumeration."""

    def test_dataclass_fields_in_declaration_order(self, accessor):
        """Should list dataclass fields in order."""
        labels = [label for label, _ in accessor.fields(fakeui.ModifiedContent("c", "m"))]
        assert labels == ["content", "modifier"]

    def test_namedtuple_fields(self, accessor):
        """Should use namedtuple field names."""
        assert accessor.fields(Point(1, 2)) == [("x", 1), ("y", 2)]

    def test_plain_tuple_positions(self, accessor):
        """Should label tuple items .0, .1, ..."""
        assert accessor.fields(("a", "b")) == [(".0", "a"), (".1", "b")]

    def test_list_items(self, accessor):
        """Should label sequence items [i]."""
        assert accessor.fields(["a"]) == [("[0]", "a")]

    def test_mapping_keys(self, accessor):
        """Should expose mapping keys as labels."""
        assert accessor.fields({"trueContent": 1}) == [("trueContent", 1)]

    def test_slots(self, accessor):
        """Should read __slots__ values."""
        assert accessor.fields(Slotted()) == [("a", 1), ("b", 2)]

    def test_instance_dict(self, accessor):
        """Should read instance attributes of plain classes."""
        view = fakeui.ScrollView(fakeui.Text("x"))
        assert [label for label, _ in accessor.fields(view)] == ["axes", "content"]

    def test_scalars_have_no_fields(self, accessor):
        """Should treat strings and numbers as opaque leaves."""
        assert accessor.fields("text") == []
        assert accessor.fields(3) == []
        assert accessor.fields(None) == []

    def test_generic_marker_is_not_a_field(self, accessor):
        """Should not list __orig_class__ as a field."""
        assert accessor.fields(Tagged[int](5)) == [("value", 5)]


class TestFieldByLabel:
    """Tests for field_by_label and field_by_path."""

    def test_reads_field(self, accessor):
        """Should return the field value."""
        assert accessor.field_by_label(fakeui.Text("hi"), "_verbatim") == "hi"

    def test_missing_label_raises(self, accessor):
        """Should raise LabelNotFound instead of substituting a default."""
        with pytest.raises(LabelNotFound) as exc_info:
            accessor.field_by_label(fakeui.Text("hi"), "string")

        assert exc_info.value.label == "string"
        assert exc_info.value.type_name == "Text"
        assert "Text does not have 'string' attribute" in str(exc_info.value)

    def test_super_is_not_special(self, accessor):
        """Should treat 'super' as an ordinary label."""
        with pytest.raises(LabelNotFound):
            accessor.field_by_label(fakeui.Text("hi"), "super")

    def test_path_equals_chained_labels(self, accessor):
        """Should make field_by_path(v, 'a|b') equal two field_by_label calls."""
        values = [
            fakeui.VStack(fakeui.Text("a"), spacing=4),
            fakeui.AnyView(fakeui.Text("b")),
            Node("root", Node("leaf")),
        ]
        paths = [("_tree", "root"), ("storage", "view"), ("next", "label")]
        for value, (a, b) in zip(values, paths):
            chained = accessor.field_by_label(accessor.field_by_label(value, a), b)
            assert accessor.field_by_path(value, f"{a}|{b}") is chained

    def test_path_failure_reports_consumed_prefix(self, accessor):
        """Should name the failing segment and what was consumed."""
        with pytest.raises(LabelNotFound) as exc_info:
            accessor.field_by_path(fakeui.AnyView(fakeui.Text("b")), "storage|content")

        error = exc_info.value
        assert error.label == "content"
        assert error.consumed == "storage"
        assert error.type_name == "AnyViewStorage"

    def test_unbox_on_read(self, accessor):
        """Should strip existential boxes when asked."""
        wrapper = fakeui.AnyView(fakeui.Text("b"))
        assert isinstance(accessor.field_by_label(wrapper, "storage"), fakeui.AnyViewStorage)
        assert accessor.field_by_label(wrapper, "storage", unbox=True) == fakeui.Text("b")


class TestTypeNames:
    """Tests for type_name and is_of_type."""

    def test_plain_name(self, accessor):
        """Should drop the module namespace by default."""
        assert accessor.type_name(fakeui.Text("x")) == "Text"

    def test_namespaced(self, accessor):
        """Should keep the module when namespaced."""
        assert accessor.type_name(fakeui.Text("x"), namespaced=True) == "fakeui.Text"

    def test_generic_arguments(self, accessor):
        """Should render generic arguments unless prefix_only."""
        value = Tagged[int](1)
        assert accessor.type_name(value) == "Tagged[int]"
        assert accessor.type_name(value, prefix_only=True) == "Tagged"

    def test_box_reports_payload_name(self, accessor):
        """Should name the boxed payload, not the box."""
        assert accessor.type_name(fakeui.AnyViewStorage(fakeui.Image("i"))) == "Image"

    def test_is_of_type_prefix(self, accessor):
        """Should match on equality or prefix."""
        modifier = fakeui._ForegroundColorModifier("red")
        assert accessor.is_of_type(modifier, "_ForegroundColorModifier")
        assert accessor.is_of_type(modifier, "_Foreground")
        assert not accessor.is_of_type(modifier, "Foreground")

    def test_cast(self, accessor):
        """Should pass matching values through and reject others."""
        assert accessor.cast("x", str) == "x"
        with pytest.raises(TypeMismatch) as exc_info:
            accessor.cast("x", int)

        assert exc_info.value.expected == "int"
        assert exc_info.value.actual == "str"


class TestAttributesTree:
    """Tests for the diagnostic attribute dump."""

    def test_nested_dump(self, accessor):
        """Should render 'label: Type' keys and '= repr' leaves."""
        tree = accessor.attributes_tree(fakeui.ModifiedContent(fakeui.Text("a"), fakeui._PaddingLayout(4)))

        assert tree["content: Text"] == {"_verbatim: str": "= 'a'"}
        assert tree["modifier: _PaddingLayout"] == {"length: int": "= 4"}

    def test_cycle_guard(self, accessor):
        """Should stop at self references."""
        node = Node("loop")
        node.next = node

        tree = accessor.attributes_tree(node)
        assert tree["next: Node"] == "<cycle>"

    def test_depth_guard(self, accessor):
        """Should stop at max_depth."""
        chain = Node("0", Node("1", Node("2", Node("3"))))

        tree = accessor.attributes_tree(chain, max_depth=2)
        assert tree["next: Node"]["next: Node"] == "<max depth>"

    def test_expand_hook(self, accessor):
        """Should add a body entry for expandable values."""
        greeting = fakeui.Greeting("Ada")
        tree = accessor.attributes_tree(greeting, expand=lambda v: v.body if v is greeting else None)

        assert "body: VStack" in tree
        assert tree["name: str"] == "= 'Ada'"

    def test_format_tree(self, accessor):
        """Should render sorted, indented text."""
        text = accessor.format_tree(fakeui.ModifiedContent(fakeui.Text("a"), fakeui._PaddingLayout(4)))

        lines = text.splitlines()
        assert lines[0] == "ModifiedContent"
        assert lines[1] == "  content: Text"
        assert lines[2] == "    _verbatim: str = 'a'"
        assert lines[3] == "  modifier: _PaddingLayout"
