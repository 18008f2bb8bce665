"""Reconstruction of one schematic view: wires first, then component instances."""

from __future__ import annotations

import logging
import math
import uuid
from typing import IO, List, Optional, Sequence, Tuple

from .catalog import StencilCatalog, default_catalog
from .config import ConversionConfig, get_default_config
from .geometry import Coordinate, CoordinatePool
from .model import Component, NetTable, Pin, Placed, Placement, Skipped, Wire
from .placement import PlacementEngine
from .quantities import format_parameter
from .records import InstanceRecord, ViewRecord, WireRecord
from .tikz_codegen import generate_tikz_code, write_tikz

logger = logging.getLogger(__name__)


class Schematic:
    """Owns the coordinate pool, net table, wires and components of a single view.

    Use :meth:`from_view` to build one. Wires are always processed before
    instances because terminal snapping looks at the wires already attached to
    a net.
    """

    def __init__(
        self,
        catalog: Optional[StencilCatalog] = None,
        config: Optional[ConversionConfig] = None,
        name: str = "",
    ):
        self.name = name
        self.config = config or get_default_config()
        self.catalog = catalog or default_catalog()
        self.pool = CoordinatePool()
        self.nets = NetTable()
        self.wires: List[Wire] = []
        self.components: List[Component] = []
        self.skipped: List[Skipped] = []
        self._engine = PlacementEngine(self.catalog, self.pool, self.config)

    @classmethod
    def from_view(
        cls,
        view: ViewRecord,
        catalog: Optional[StencilCatalog] = None,
        config: Optional[ConversionConfig] = None,
    ) -> "Schematic":
        schematic = cls(catalog, config, name=view.name)
        for record in view.wires:
            schematic.add_wire(record)
        for record in view.instances:
            schematic.add_instance(record)
        logger.info(
            "Schematic %r: %d wire(s), %d component(s), %d skipped, %d coordinate(s)",
            view.name,
            len(schematic.wires),
            len(schematic.components),
            len(schematic.skipped),
            len(schematic.pool),
        )
        return schematic

    # ------------------------------------------------------------------
    # wires
    # ------------------------------------------------------------------

    def parse_points(self, points: str) -> List[Coordinate]:
        """Scaled, interned coordinates of a ``"x,y x,y ..."`` string; bad pairs are skipped."""

        coords: List[Coordinate] = []
        for token in points.split():
            parsed = _parse_pair(token)
            if parsed is None:
                logger.warning("Couldn't parse wire coordinate: %s", token)
                continue
            x, y = parsed
            coords.append(self.pool.canonicalize(Coordinate(x * self.config.scale, y * self.config.scale)))
        return coords

    def add_wire(self, record: WireRecord) -> Wire:
        net = self.nets.get_or_create(record.net_name)
        wire = Wire(net, self.parse_points(record.points))
        self.wires.append(wire)
        return wire

    # ------------------------------------------------------------------
    # instances
    # ------------------------------------------------------------------

    def _live_pins(self, record: InstanceRecord) -> List[Pin]:
        pins = []
        for terminal in record.terminals:
            # unconnected terminals get a private net so they never snap to unnamed wires
            net_name = terminal.net_name or f"unconnected-{uuid.uuid4()}"
            pins.append(
                Pin(None, terminal.terminal_name or None, terminal.terminal_index, self.nets.get_or_create(net_name))
            )
        return pins

    @staticmethod
    def _values(record: InstanceRecord) -> List[Tuple[str, str]]:
        values = []
        for param in record.visible_parameters:
            formatted = format_parameter(param.name, param.value)
            if formatted is not None:
                values.append((param.name, formatted))
        return values

    def add_instance(self, record: InstanceRecord) -> Optional[Component]:
        result = self._engine.place(
            record.library_name,
            record.cell_name,
            record.instance_name,
            record.placement or Placement(),
            self._live_pins(record),
            values=self._values(record),
        )
        if isinstance(result, Placed):
            self.components.append(result.component)
            return result.component

        logger.warning(
            "Skipping not identified component %10s: %s:%s",
            record.instance_name,
            record.library_name,
            record.cell_name,
        )
        self.skipped.append(result)
        return None

    # ------------------------------------------------------------------
    # output
    # ------------------------------------------------------------------

    def serialize(self) -> str:
        return generate_tikz_code(self)

    def write_to(self, out: IO[str]) -> None:
        write_tikz(self, out)


def _parse_pair(token: str) -> Optional[Tuple[float, float]]:
    parts = token.split(",")
    if len(parts) < 2:
        return None
    try:
        x = float(parts[0])
        y = float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return x, y


def build_schematics(
    views: Sequence[ViewRecord],
    catalog: Optional[StencilCatalog] = None,
    config: Optional[ConversionConfig] = None,
) -> List[Schematic]:
    """Reconstruct several views; each gets its own pool and net table."""

    catalog = catalog or default_catalog()
    return [Schematic.from_view(view, catalog, config) for view in views]
