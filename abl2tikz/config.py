"""Conversion settings and their process-wide defaults."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Optional

DEFAULT_SCALE = 2.54  # ADS works in inch, TikZ in cm


@dataclass(frozen=True)
class ConversionConfig:
    """Settings shared by the placement engine and the schematic builder.

    ``snap_radius`` is given in source units and applies to every pin; ``None``
    snaps to the nearest vertex of the net regardless of distance.
    """

    scale: float = DEFAULT_SCALE
    snap_radius: Optional[float] = 1.0

    def __post_init__(self) -> None:
        if not self.scale > 0:
            raise ValueError(f"scale must be positive, got {self.scale!r}")
        if self.snap_radius is not None and self.snap_radius < 0:
            raise ValueError(f"snap radius must not be negative, got {self.snap_radius!r}")

    @property
    def world_snap_radius(self) -> Optional[float]:
        if self.snap_radius is None:
            return None
        return self.snap_radius * self.scale


_DEFAULT_CONFIG = ConversionConfig()


def get_default_config() -> ConversionConfig:
    return copy.deepcopy(_DEFAULT_CONFIG)


def set_default_config(config: ConversionConfig) -> None:
    global _DEFAULT_CONFIG
    _DEFAULT_CONFIG = copy.deepcopy(config)
