"""Stencil library: CircuiTikZ shapes and the ADS library/cell → stencil mapping."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple, Union

from .geometry import Coordinate
from .model import Pin, ShapeKind

TWO_POLE_COMPONENT_LENGTH = 1.0

# CircuiTikZ tripole defaults (pgfkeys tripoles/.../width, conn height, height).
PGF_CIRC_RLEN = 1.4
TRIPOLE_WIDTH = 0.7
TRIPOLE_CONN_HEIGHT = 0.5
TRIPOLE_HEIGHT = 1.1


@dataclass(frozen=True)
class NodeStencil:
    """Single terminal symbol drawn as a TikZ node, e.g. grounds and supplies."""

    render_name: str
    pin: Pin
    angle_offset: float = 90.0  # ADS draws these symbols horizontally
    print_net_name: bool = False

    kind = ShapeKind.NODE

    @property
    def pins(self) -> Tuple[Pin, ...]:
        return (self.pin,)


@dataclass(frozen=True)
class PathStencil:
    """Two terminal symbol drawn along a path, e.g. ``to[R]``."""

    render_name: str
    pins: Tuple[Pin, ...]

    kind = ShapeKind.PATH


@dataclass(frozen=True)
class RenderTemplate:
    """Fixed CircuiTikZ tripole shape; pins are relative to the node center."""

    render_name: str
    pins: Tuple[Pin, ...]
    anchor_names: Tuple[str, ...]

    @classmethod
    def from_struct(
        cls,
        render_name: str,
        anchor_names: Sequence[str],
        *,
        pgf_circ_rlen: float = PGF_CIRC_RLEN,
        width: float = TRIPOLE_WIDTH,
        conn_height: float = TRIPOLE_CONN_HEIGHT,
        height: float = TRIPOLE_HEIGHT,
    ) -> "RenderTemplate":
        """Build the template from CircuiTikZ tripole dimensions (top, bottom, tap)."""

        half_height = pgf_circ_rlen * height * 0.5
        tap_x = pgf_circ_rlen * width
        names = tuple(anchor_names)
        coords = (
            Coordinate(0.0, half_height),
            Coordinate(0.0, -half_height),
            Coordinate(-tap_x, half_height * conn_height),
        )
        pins = tuple(
            Pin(coord, names[idx] if idx < len(names) else None, idx + 1)
            for idx, coord in enumerate(coords)
        )
        return cls(render_name, pins, names)


@dataclass(frozen=True)
class OrientedStencil:
    """Three terminal symbol whose source geometry differs from its render template.

    ``pins`` is the anatomical (ADS) triangle, ``anchor_index`` the position of
    its anchor terminal in that list. The template pins are paired with the
    anatomical ones by position and carry the same terminal indices.
    """

    template: RenderTemplate
    pins: Tuple[Pin, ...]
    anchor_index: int

    kind = ShapeKind.ORIENTED

    @property
    def render_name(self) -> str:
        return self.template.render_name

    @classmethod
    def create(cls, template: RenderTemplate, pins: Sequence[Pin], anchor_index: int) -> "OrientedStencil":
        if len(pins) != 3 or len(template.pins) != 3:
            raise ValueError("oriented stencils need exactly three terminals")
        if not 0 <= anchor_index < 3:
            raise ValueError(f"anchor index out of range: {anchor_index}")
        paired = tuple(
            Pin(tpl_pin.coord, tpl_pin.name, ana_pin.terminal_index)
            for tpl_pin, ana_pin in zip(template.pins, pins)
        )
        return cls(RenderTemplate(template.render_name, paired, template.anchor_names), tuple(pins), anchor_index)


Stencil = Union[NodeStencil, PathStencil, OrientedStencil]


ZERO_PIN = Pin(Coordinate(0.0, 0.0), None, 1)
TWO_POLE_PINS = (
    Pin(Coordinate(0.0, 0.0), None, 1),
    Pin(Coordinate(TWO_POLE_COMPONENT_LENGTH, 0.0), None, 2),
)

# ADS transistor terminals: top, bottom, tap (anchor).
ADS_TRANSISTOR_PINS = (
    Pin(Coordinate(0.5, 0.5), None, 1),
    Pin(Coordinate(0.5, -0.5), None, 3),
    Pin(Coordinate(0.0, 0.0), None, 2),
)
ADS_TRANSISTOR_ANCHOR = 2


def _ground(name: str) -> NodeStencil:
    return NodeStencil(name, ZERO_PIN)


def _supply(name: str) -> NodeStencil:
    return NodeStencil(name, ZERO_PIN, print_net_name=True)


def _bipole(name: str) -> PathStencil:
    return PathStencil(name, TWO_POLE_PINS)


# fmt: off
TIKZ_STENCILS: Mapping[str, Union[NodeStencil, PathStencil, RenderTemplate]] = MappingProxyType({
    # grounds
    "ground": _ground("ground"),
    "tlground": _ground("tlground"),      # tailless
    "rground": _ground("rground"),        # reference
    "sground": _ground("sground"),        # signal
    "tground": _ground("tground"),        # thick tailless reference
    "nground": _ground("nground"),        # noiseless
    "pground": _ground("pground"),        # protective
    "cground": _ground("cground"),        # chassis
    "eground": _ground("eground"),        # european
    "eground2": _ground("eground2"),
    # supplies
    "vcc": _supply("vcc"),
    "vee": _supply("vee"),
    # resistors
    "R": _bipole("R"),
    "vR": _bipole("vR"),
    "pR": _bipole("pR"),
    "sR": _bipole("sR"),
    "ldR": _bipole("ldR"),
    "varistor": _bipole("varistor"),
    "phR": _bipole("phR"),
    "thR": _bipole("thR"),
    "thRp": _bipole("thRp"),
    "thRn": _bipole("thRn"),
    # capacitors
    "C": _bipole("C"),
    "cC": _bipole("cC"),
    "eC": _bipole("eC"),
    "vC": _bipole("vC"),
    "sC": _bipole("sC"),
    "PZ": _bipole("PZ"),
    "cpe": _bipole("cpe"),
    "feC": _bipole("feC"),
    # inductors
    "L": _bipole("L"),
    "vL": _bipole("vL"),
    "sL": _bipole("sL"),
    "cuteChoke": _bipole("cute choke"),
    # diodes
    "Do": _bipole("Do"),
    # sources
    "battery": _bipole("battery"),
    "battery1": _bipole("battery1"),
    "battery2": _bipole("battery2"),
    "vsource": _bipole("vsource"),
    "vsourceAM": _bipole("vsourceAM"),
    "vsourceC": _bipole("vsourceC"),
    "isource": _bipole("isource"),
    "isourceAM": _bipole("isourceAM"),
    "isourceC": _bipole("isourceC"),
    "sV": _bipole("sV"),
    "sI": _bipole("sI"),
    "dcvsource": _bipole("dcvsource"),
    "dcisource": _bipole("dcisource"),
    "sqV": _bipole("sqV"),
    # connectors
    "iecConnector": _bipole("iec connector"),
    # transistors
    "npn": RenderTemplate.from_struct("npn", ("C", "E", "B"), width=0.6, conn_height=0.0),
    "pnp": RenderTemplate.from_struct("pnp", ("E", "C", "B"), width=0.6, conn_height=0.0),
    "nigfete": RenderTemplate.from_struct("nigfete", ("D", "S", "G"), width=0.7, conn_height=-0.35),
    "pigfete": RenderTemplate.from_struct("pigfete", ("S", "D", "G"), width=0.7, conn_height=0.35),
})
# fmt: on


def _ads_transistor(template_name: str) -> OrientedStencil:
    template = TIKZ_STENCILS[template_name]
    assert isinstance(template, RenderTemplate)
    return OrientedStencil.create(template, ADS_TRANSISTOR_PINS, ADS_TRANSISTOR_ANCHOR)


def ads_entries() -> Dict[str, Stencil]:
    """ADS cell (or ``library:cell``) → stencil entries of the default catalog."""

    def stencil(name: str) -> Stencil:
        entry = TIKZ_STENCILS[name]
        assert not isinstance(entry, RenderTemplate)
        return entry

    return {
        "C": stencil("cC"),
        "Diode": stencil("Do"),
        "EE_MOS1": _ads_transistor("nigfete"),
        "GROUND": stencil("ground"),
        "R": stencil("R"),
        "L": stencil("L"),
        "BJT_NPN": _ads_transistor("npn"),
        "V_AC": stencil("sV"),
        "V_DC": stencil("vsource"),
        "VtPulse": stencil("sqV"),
    }


class StencilCatalog:
    """Read-only lookup table from ``library:cell`` or ``cell`` to a stencil."""

    def __init__(self, entries: Mapping[str, Stencil]):
        self._entries: Mapping[str, Stencil] = MappingProxyType(dict(entries))

    def lookup(self, library_name: str, cell_name: str) -> Optional[Stencil]:
        """Library specific entries take priority over cell-name-only entries."""

        specific = self._entries.get(f"{library_name}:{cell_name}")
        if specific is not None:
            return specific
        return self._entries.get(cell_name)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


def default_catalog() -> StencilCatalog:
    return StencilCatalog(ads_entries())
