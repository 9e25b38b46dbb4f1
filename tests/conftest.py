# tests/conftest.py
"""
Shared fixtures.
"""

import pytest

from viewprobe.catalog import AmbientSlotKind, Catalog, Category, NodeKind
from viewprobe.config import InspectConfig
from viewprobe.injector import AmbientRegistry
from viewprobe.tracelogger import TRACE_LOGGER

import fakeui


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from the default preset with tracing off."""
    InspectConfig.reset_to_defaults()
    TRACE_LOGGER.disable()
    yield
    InspectConfig.reset_to_defaults()
    TRACE_LOGGER.disable()


@pytest.fixture
def catalog():
    """Default catalog plus the test-only Container and StateObjectRef kinds."""
    result = Catalog.default()
    result.register(NodeKind("Container", Category.MULTI, child_labels=("content",)))
    result.register_slot(AmbientSlotKind("StateObjectRef"))
    return result


@pytest.fixture
def registry():
    """Registry holding every ambient object the fake views declare."""
    return (
        AmbientRegistry()
        .register_object(fakeui.UserModel("Ada"))
        .register_object(fakeui.Settings("dark"))
    )
