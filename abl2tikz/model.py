"""Electrical graph of a reconstructed schematic: nets, wires, pins and placed components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from .geometry import Coordinate


class ShapeKind(Enum):
    NODE = "node"
    PATH = "path"
    ORIENTED = "oriented"


@dataclass(eq=False)
class Net:
    """A named electrical node. Compared by identity."""

    name: Optional[str]
    wires: List["Wire"] = field(default_factory=list)
    pins: List["Pin"] = field(default_factory=list)

    @property
    def pretty_name(self) -> str:
        """Net name as shown next to supply symbols; ADS marks global nets with a trailing ``!``."""

        if not self.name:
            return ""
        return self.name.rstrip("!")

    def __repr__(self) -> str:
        return f"Net(name={self.name!r}, wires={len(self.wires)}, pins={len(self.pins)})"


class NetTable:
    """Name → Net mapping populated lazily in document order.

    ``""`` and ``None`` are distinct names; each resolves to its own singleton.
    """

    def __init__(self) -> None:
        self._nets: Dict[Optional[str], Net] = {}

    def get_or_create(self, name: Optional[str]) -> Net:
        net = self._nets.get(name)
        if net is None:
            net = Net(name)
            self._nets[name] = net
        return net

    def get(self, name: Optional[str]) -> Optional[Net]:
        return self._nets.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._nets

    def __len__(self) -> int:
        return len(self._nets)

    def __iter__(self) -> Iterator[Net]:
        return iter(self._nets.values())


@dataclass(frozen=True, eq=False)
class Wire:
    """Polyline of pooled coordinates. Registers itself with its net on creation."""

    net: Net
    coords: Tuple[Coordinate, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "coords", tuple(self.coords))
        self.net.wires.append(self)


@dataclass(eq=False)
class Pin:
    """A component terminal.

    Stencil pins carry local coordinates and never change; positioned pins are
    produced with :func:`dataclasses.replace` by the placement engine.
    """

    coord: Optional[Coordinate] = None
    name: Optional[str] = None
    terminal_index: int = 0
    net: Optional[Net] = None

    def matches(self, other: "Pin") -> bool:
        """Name match when both pins are named, terminal index match otherwise."""

        if self.name and other.name:
            return self.name == other.name
        return self.terminal_index == other.terminal_index


@dataclass(frozen=True)
class Placement:
    """Raw placement transform in source units; ``angle`` is counter-clockwise degrees."""

    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0
    x_scale: float = 1.0
    y_scale: float = 1.0
    mirror_x: bool = False
    mirror_y: bool = False


@dataclass(frozen=True)
class Component:
    kind: ShapeKind
    render_name: str
    label: str
    pins: Tuple[Pin, ...]
    origin: Coordinate
    anchor: Coordinate
    angle: float = 0.0
    mirror_x: bool = False
    mirror_y: bool = False
    leads: Tuple[Tuple[Coordinate, Coordinate], ...] = ()
    values: Tuple[Tuple[str, str], ...] = ()
    node_text: str = ""

    @property
    def value(self) -> Optional[str]:
        """First formatted parameter value, used as the symbol annotation."""

        return self.values[0][1] if self.values else None


@dataclass(frozen=True)
class Placed:
    component: Component


@dataclass(frozen=True)
class Skipped:
    instance_name: str
    library_name: str
    cell_name: str
    reason: str

    def __str__(self) -> str:
        return f"{self.instance_name or '<unnamed>'} ({self.library_name}:{self.cell_name}): {self.reason}"


PlacementResult = Union[Placed, Skipped]
