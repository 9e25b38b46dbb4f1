# viewprobe/presets.py
"""
@file presets.py
@brief Configuration presets and defaults for inspection.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Dict


WAIT_FIELDS: Dict[str, Dict[str, Any]] = {
    "inspection_wait": {"timeout": 1.0, "interval": 0.05},
}

VALUE_FIELDS: Dict[str, Any] = {
    "max_depth": 64,
    "default_order": "breadth_first",
    "strict_predicates": False,
    "trace_enabled": False,
}

PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "deep": {
        "max_depth": 256,
    },
    "ci": {
        "inspection_wait": {"timeout": 5.0, "interval": 0.1},
        "max_depth": 128,
    },
    "debug": {
        "trace_enabled": True,
        "strict_predicates": True,
    },
}


def list_presets() -> Dict[str, Dict[str, Any]]:
    return {"default": {}, **PRESET_OVERRIDES}


def build_preset_values(preset: str) -> Dict[str, Any]:
    preset_key = (preset or "default").lower()
    values: Dict[str, Any] = {}
    values.update(deepcopy(WAIT_FIELDS))
    values.update(deepcopy(VALUE_FIELDS))

    if preset_key == "default":
        return values

    overrides = PRESET_OVERRIDES.get(preset_key)
    if overrides is None:
        raise ValueError(f"Unknown inspection preset: {preset}")

    for key, value in overrides.items():
        if key in WAIT_FIELDS:
            base = deepcopy(values[key])
            base.update(value)
            values[key] = base
        else:
            values[key] = value

    return values
