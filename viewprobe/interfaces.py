"""
@file interfaces.py
@brief Abstract base classes for the host-specific parts of the engine.

The reflection primitive and the "forced construction" used for ambient
injection both depend on how the host platform lays out values. They sit
behind these interfaces so the rest of the engine never touches them
directly.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Tuple


class IAccessor(ABC):
    """
    Abstract structural accessor.

    Enumerates the named fields of opaque values, reads them by label or
    path, and reports normalized type names.
    """

    @abstractmethod
    def fields(self, value: Any) -> List[Tuple[str, Any]]:
        """
        Enumerate the named fields of a value.

        Args:
            value: Any reflectable value

        Returns:
            (label, field value) pairs in declaration order
        """
        pass

    @abstractmethod
    def field_by_label(self, value: Any, label: str) -> Any:
        """
        Read one field.

        Args:
            value: Any reflectable value
            label: Field label

        Returns:
            The field value

        Raises:
            LabelNotFound: if the value has no such field
        """
        pass

    @abstractmethod
    def field_by_path(self, value: Any, path: str) -> Any:
        """
        Read a nested field with a `|`-separated label path.

        Args:
            value: Any reflectable value
            path: Labels separated by `|`, e.g. "storage|view"

        Returns:
            The field value at the end of the path
        """
        pass

    @abstractmethod
    def type_name(self, value: Any, namespaced: bool = False, prefix_only: bool = False) -> str:
        """
        Report the declared type name of a value.

        Args:
            value: Any value
            namespaced: Keep the module namespace
            prefix_only: Drop generic arguments

        Returns:
            Normalized type name
        """
        pass

    @abstractmethod
    def is_of_type(self, value: Any, name_prefix: str) -> bool:
        """
        Equality-or-prefix match on the type name.

        Args:
            value: Any value
            name_prefix: Type name or type name prefix

        Returns:
            True if the value's type name matches
        """
        pass

    @abstractmethod
    def attributes_tree(
        self,
        value: Any,
        expand: Optional[Callable[[Any], Any]] = None,
        max_depth: Optional[int] = None,
    ) -> Any:
        """
        Recursive label -> (type, value or subtree) dump for diagnostics.

        Args:
            value: Root value
            expand: Optional hook returning extra content (a view body) for a value
            max_depth: Depth limit (uses the accessor default if None)

        Returns:
            Nested dicts keyed "label: Type", leaves rendered as "= repr"
        """
        pass


class IConstructor(ABC):
    """
    Abstract constructor for values the test context cannot build normally.

    Used only by the Injector to produce copies of nodes with their ambient
    slots filled in.
    """

    @abstractmethod
    def build_slot(
        self,
        slot_type: type,
        key: Any,
        instance: Any,
        store_label: str,
        key_label: str,
        constructor: Optional[str] = None,
    ) -> Any:
        """
        Build a filled ambient slot.

        Args:
            slot_type: Type of the empty slot found on the node
            key: Capability key the slot declares
            instance: Ambient object to store
            store_label: Field holding the stored object
            key_label: Field holding the capability key
            constructor: Name of an injection classmethod on slot_type, if any

        Returns:
            A new slot value holding the instance
        """
        pass

    @abstractmethod
    def replace_field(self, value: Any, label: str, field_value: Any) -> Any:
        """
        Return a shallow copy of value with one field replaced.

        Args:
            value: Node to copy; never mutated
            label: Field to replace
            field_value: New field value

        Returns:
            The modified copy
        """
        pass
