# viewprobe/config.py
"""
@file config.py
@brief Centralized inspection configuration (depth limits, search order, waits).
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Generator, Optional

from .presets import VALUE_FIELDS, WAIT_FIELDS, build_preset_values, list_presets

SEARCH_ORDERS = ("breadth_first", "depth_first")


@dataclass
class WaitSettings:
    """Timeout/poll interval pair for one kind of wait."""
    timeout: float
    interval: float

    def with_overrides(
        self,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
    ) -> WaitSettings:
        """Create a new settings instance with overrides applied."""
        return WaitSettings(
            timeout=timeout if timeout is not None else self.timeout,
            interval=interval if interval is not None else self.interval,
        )


class InspectConfig:
    """
    Inspection configuration.

    Deterministic precedence is applied per run via build/install APIs:
      base defaults -> preset -> overrides
    The effective config is per-thread; a traversal reads it once when it
    starts.
    """

    _default_instance: Optional[InspectConfig] = None
    _default_preset: str = "default"
    _local = threading.local()
    _lock = threading.Lock()

    max_depth: int
    default_order: str
    strict_predicates: bool
    trace_enabled: bool
    inspection_wait: WaitSettings

    def __init__(self, preset: Optional[str] = None):
        preset_name = preset or self._default_preset
        self._apply_values(build_preset_values(preset_name))

    @classmethod
    def _wait_fields(cls) -> Dict[str, Dict[str, Any]]:
        return WAIT_FIELDS

    @classmethod
    def _value_fields(cls) -> Dict[str, Any]:
        return VALUE_FIELDS

    def _apply_values(self, values: Dict[str, Any]) -> None:
        for name in self._wait_fields():
            val = values.get(name)
            if isinstance(val, WaitSettings):
                setting = deepcopy(val)
            elif isinstance(val, dict):
                setting = WaitSettings(
                    timeout=float(val["timeout"]),
                    interval=float(val["interval"]),
                )
            else:
                raise ValueError(f"Invalid wait setting for {name}: {val}")
            setattr(self, name, setting)

        for name, default in self._value_fields().items():
            if name not in values:
                raise ValueError(f"Missing setting for {name}")
            setattr(self, name, _coerce(name, values[name], default))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name in self._wait_fields():
            setting: WaitSettings = getattr(self, name)
            data[name] = {"timeout": setting.timeout, "interval": setting.interval}
        for name in self._value_fields():
            data[name] = getattr(self, name)
        return data

    def clone(self) -> InspectConfig:
        """Return a deep clone of this config."""
        clone = InspectConfig()
        clone._apply_values(self.to_dict())
        return clone

    @classmethod
    def build_from(
        cls,
        *,
        preset: str = "default",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> InspectConfig:
        """Build a deterministic run-scope config snapshot."""
        cfg = cls(preset)
        if overrides:
            _apply_overrides(cfg, overrides)
        return cfg

    @classmethod
    def default(cls) -> InspectConfig:
        """Get the process default configuration (singleton)."""
        if cls._default_instance is None:
            with cls._lock:
                if cls._default_instance is None:
                    cls._default_instance = cls(cls._default_preset)
        return cls._default_instance

    @classmethod
    def install_run_config(cls, config: InspectConfig) -> None:
        """Install per-thread run configuration snapshot."""
        cls._local.run_config = config

    @classmethod
    def clear_run_config(cls) -> None:
        """Clear per-thread run configuration snapshot."""
        cls._local.run_config = None

    @classmethod
    def current(cls) -> InspectConfig:
        """Get the current effective configuration."""
        override = getattr(cls._local, "override", None)
        if override is not None:
            return override

        run_cfg = getattr(cls._local, "run_config", None)
        if run_cfg is not None:
            return run_cfg

        return cls.default()

    @classmethod
    def apply_preset(cls, preset: str) -> None:
        """Apply a preset to the current run-scope config."""
        base = cls.current().clone()
        base._apply_values(build_preset_values(preset))
        cls.install_run_config(base)

    @classmethod
    @contextmanager
    def override(cls, **kwargs: Any) -> Generator[InspectConfig, None, None]:
        """Context manager for temporary configuration overrides."""
        previous = getattr(cls._local, "override", None)
        new_config = cls.current().clone()
        _apply_overrides(new_config, kwargs)

        cls._local.override = new_config
        try:
            yield new_config
        finally:
            cls._local.override = previous

    @classmethod
    def reset_to_defaults(cls) -> None:
        """Reset default and clear all thread-local config state."""
        with cls._lock:
            cls._default_preset = "default"
            cls._default_instance = cls(cls._default_preset)
        cls._local.override = None
        cls._local.run_config = None


def _coerce(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{name} must be a bool, got: {value!r}")
        return value
    if isinstance(default, int):
        number = int(value)
        if number < 1:
            raise ValueError(f"{name} must be positive, got: {value!r}")
        return number
    if name == "default_order" and value not in SEARCH_ORDERS:
        raise ValueError(f"default_order must be one of {SEARCH_ORDERS}, got: {value!r}")
    return value


def _apply_overrides(config: InspectConfig, overrides: Dict[str, Any]) -> None:
    for key, value in overrides.items():
        if key in config._wait_fields():
            base_setting: WaitSettings = getattr(config, key)
            if isinstance(value, WaitSettings):
                setattr(config, key, deepcopy(value))
            elif isinstance(value, dict):
                setattr(config, key, base_setting.with_overrides(
                    timeout=value.get("timeout"),
                    interval=value.get("interval"),
                ))
            else:
                raise ValueError(f"Invalid override for {key}: {value}")
        elif key in config._value_fields():
            setattr(config, key, _coerce(key, value, config._value_fields()[key]))
        else:
            raise ValueError(f"Unknown InspectConfig field: {key}")


def available_presets() -> Dict[str, Dict[str, Any]]:
    return list_presets()
