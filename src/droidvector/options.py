"""Conversion options and their environment defaults."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple

from .precision import clamp_decimals

ENV_DECIMALS = "DROIDVECTOR_DECIMALS"
ENV_CONVERT_SHAPES = "DROIDVECTOR_CONVERT_SHAPES"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ConversionOptions:
    decimals: int = 2
    convert_shapes: bool = False
    default_viewport: Tuple[float, float] = (24.0, 24.0)
    default_size: float = 24.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "decimals", clamp_decimals(self.decimals))
        width, height = self.default_viewport
        if width <= 0 or height <= 0:
            raise ValueError(f"default viewport must be positive, got {width}x{height}")
        object.__setattr__(self, "default_viewport", (float(width), float(height)))
        if self.default_size <= 0:
            raise ValueError(f"default size must be positive, got {self.default_size}")

    def with_changes(self, **changes: Any) -> "ConversionOptions":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "ConversionOptions":
        """Defaults from ``DROIDVECTOR_*`` variables; keyword overrides win."""
        env = os.environ if environ is None else environ
        values: dict = {}
        raw_decimals = env.get(ENV_DECIMALS)
        if raw_decimals is not None and raw_decimals.strip():
            try:
                values["decimals"] = int(raw_decimals)
            except ValueError as exc:
                raise ValueError(f"{ENV_DECIMALS} must be an integer, got {raw_decimals!r}") from exc
        raw_shapes = env.get(ENV_CONVERT_SHAPES)
        if raw_shapes is not None and raw_shapes.strip():
            values["convert_shapes"] = raw_shapes.strip().lower() in _TRUTHY
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


__all__ = ["ConversionOptions", "ENV_DECIMALS", "ENV_CONVERT_SHAPES"]
