# viewprobe/exceptions.py
"""
@file exceptions.py
@brief Classified error types raised by the inspection engine.

Every failure of an accessor chain surfaces as one of these classes. None of
them is ever replaced by a default value. Errors raised through an
InspectableView carry the textual path that was reached when they happened.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence


class InspectionError(Exception):
    """Base exception for the engine."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.message = message
        self.path = path
        super().__init__(message)

    def at(self, path: str) -> InspectionError:
        """
        Attach the path where the failure surfaced.

        The innermost path wins: an error that already carries a path keeps it.

        @param path Rendered inspection path
        @return self, for `raise err.at(path)`
        """
        if self.path is None:
            self.path = path
        return self

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class ConfigError(InspectionError):
    """Raised when a catalog document or configuration value is invalid."""


class LabelNotFound(InspectionError):
    """Raised when a reflected value has no field with the requested label."""

    def __init__(
        self,
        label: str,
        type_name: str,
        consumed: Optional[str] = None,
        candidates: Optional[Sequence[str]] = None,
    ):
        self.label = label
        self.type_name = type_name
        self.consumed = consumed
        self.candidates = list(candidates or [])
        if self.candidates:
            message = f"{type_name} does not have any of {self.candidates} attributes"
        else:
            message = f"{type_name} does not have '{label}' attribute"
        if consumed:
            message += f" (after '{consumed}')"
        super().__init__(message)


class TypeMismatch(InspectionError):
    """Raised when a value is not of the expected type or node kind."""

    def __init__(self, expected: str, actual: str, path: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Type mismatch: {actual} is not {expected}", path)

    def __str__(self) -> str:
        if self.path:
            return f"{self.path} found {self.actual} instead of {self.expected}"
        return self.message


class IndexOutOfBounds(InspectionError):
    """Raised when a child index falls outside the container's range."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(
            f"Enclosed view index '{index}' is out of bounds: '{self.valid_range}'"
        )

    @property
    def valid_range(self) -> str:
        return f"0..<{self.count}"


class ViewNotFound(InspectionError):
    """Raised when an absent branch or a missing modifier is requested."""

    def __init__(self, name: str, message: Optional[str] = None):
        self.name = name
        super().__init__(message or f"View for {name} is absent")


class MissingAmbientDependency(InspectionError):
    """
    Raised when a node needs ambient objects that were never registered.

    All missing keys are reported at once.
    """

    hint = "Register the missing objects on the AmbientRegistry before inspecting."

    def __init__(self, view: str, keys: List[str]):
        self.view = view
        self.keys = list(keys)
        super().__init__(f"{view} is missing ambient dependencies: {self.keys}. {self.hint}")


class ConstructionError(InspectionError):
    """Raised when no constructor can build a filled ambient slot."""

    def __init__(self, slot_type: str, reason: str):
        self.slot_type = slot_type
        self.reason = reason
        super().__init__(f"Cannot construct {slot_type}: {reason}")


class BodyError(InspectionError):
    """Raised when evaluating a composed view's body fails."""

    def __init__(self, view: str, cause: BaseException):
        self.view = view
        self.cause = cause
        super().__init__(f"{view} body raised {type(cause).__name__}: {cause}")


class NotFound(InspectionError):
    """
    Raised when a search finishes without a match.

    Blockers are the nodes the search could not look into, so callers can
    tell "no match" from "search was obstructed".
    """

    def __init__(self, skipped: int = 0, blockers: Optional[List[str]] = None):
        self.skipped = skipped
        self.blockers = list(blockers or [])
        if skipped == 0:
            conclusion = "Search did not find a match"
        else:
            conclusion = f"Search did only find {skipped} matches"
        if self.blockers:
            conclusion += f". Possible blockers: {', '.join(self.blockers)}"
        super().__init__(conclusion)


class TimeoutError(InspectionError):
    """
    Raised when a wait on the inspection channel times out.

    Attributes:
        original_exception: The last exception raised before the timeout
        description: What was being waited for
        timeout: The timeout value in seconds
        attempt_count: Number of polls made
        elapsed_time: Actual elapsed time in seconds
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.original_exception: Optional[BaseException] = None
        self.description: Optional[str] = None
        self.timeout: Optional[float] = None
        self.attempt_count: Optional[int] = None
        self.elapsed_time: Optional[float] = None

    def __str__(self) -> str:
        base_msg = super().__str__()

        details = []
        if self.original_exception is not None:
            details.append(f"Original exception: {type(self.original_exception).__name__}")
        if self.attempt_count is not None:
            details.append(f"Attempts: {self.attempt_count}")
        if self.elapsed_time is not None:
            details.append(f"Elapsed: {self.elapsed_time:.2f}s")

        if details:
            return f"{base_msg} [{', '.join(details)}]"
        return base_msg

    def get_root_cause(self) -> Optional[BaseException]:
        """
        Get the root cause exception by traversing the chain.

        @return The deepest original_exception in the chain, or None
        """
        current: Any = self.original_exception
        while current is not None:
            if getattr(current, "original_exception", None) is not None:
                current = current.original_exception
            else:
                return current
        return None
