"""
Points tagged with their coordinate reference frame.

Each frame is its own type; a point only moves to another frame through the
named conversion methods, which take the transform(s) that link the frames:

  GLCS <-pop-> PRCS <-sop-> SOCS <-(cop, mount)-> CMCS

`as_array()` is the explicit escape hatch to the raw coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

import numpy as np

from riscanpro.core.transform import Transform

_P = TypeVar("_P", bound="_FramePoint")


@dataclass(frozen=True)
class _FramePoint:
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls: type[_P], xyz: np.ndarray) -> _P:
        x, y, z = (float(c) for c in np.asarray(xyz, dtype=np.float64).reshape(3))
        return cls(x, y, z)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


@dataclass(frozen=True)
class Glcs(_FramePoint):
    """Global coordinate system."""

    def to_prcs(self, pop: Transform) -> "Prcs":
        return Prcs.from_array(pop.inverse("pop").apply(self.as_array()))


@dataclass(frozen=True)
class Prcs(_FramePoint):
    """Project coordinate system."""

    def to_glcs(self, pop: Transform) -> Glcs:
        return Glcs.from_array(pop.apply(self.as_array()))

    def to_socs(self, sop: Transform) -> "Socs":
        return Socs.from_array(sop.inverse("sop").apply(self.as_array()))


@dataclass(frozen=True)
class Socs(_FramePoint):
    """Scanner's own coordinate system."""

    def to_prcs(self, sop: Transform) -> Prcs:
        return Prcs.from_array(sop.apply(self.as_array()))

    def to_cmcs(self, cop: Transform, mount: Transform) -> "Cmcs":
        return Cmcs.from_array(socs_to_cmcs_transform(cop, mount).apply(self.as_array()))


@dataclass(frozen=True)
class Cmcs(_FramePoint):
    """Camera coordinate system; z points along the optical axis."""

    def to_socs(self, cop: Transform, mount: Transform) -> Socs:
        return Socs.from_array((cop @ mount.inverse("mount")).apply(self.as_array()))

    def is_behind_camera(self) -> bool:
        return self.z <= 0.0

    def tan_horz(self) -> float:
        return self.y / self.z

    def tan_vert(self) -> float:
        return self.x / self.z


def socs_to_cmcs_transform(cop: Transform, mount: Transform) -> Transform:
    return mount @ cop.inverse("cop")
