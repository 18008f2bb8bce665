"""Placement engine: positions stencils in world space and snaps terminals onto wires.

Every shape kind shares the same preliminary steps (angle normalization, an
interned instance origin, pin alignment with the stencil) and then follows its
own transform order:

* Node: the single pin sits on the origin; only the glyph is rotated.
* Path: stencil pins are scaled, rotated, mirrored and translated in that order.
* Oriented: the ADS triangle is transformed like a path stencil, the CircuiTikZ
  template is rotated and mirrored without scaling and then shifted so that
  both triangles share their line-crossing point.

Terminals are snapped onto the nearest vertex of a wire on the same net.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .catalog import NodeStencil, OrientedStencil, PathStencil, StencilCatalog
from .config import ConversionConfig, get_default_config
from .geometry import Coordinate, CoordinatePool, normalize_angle
from .logging_utils import debug_log_call
from .model import Component, Net, Pin, Placed, Placement, PlacementResult, ShapeKind, Skipped

logger = logging.getLogger(__name__)

ORIGIN = Coordinate(0.0, 0.0)


def align_pins(stencil_pins: Sequence[Pin], live_pins: Sequence[Pin]) -> List[Pin]:
    """Reorder ``live_pins`` to follow ``stencil_pins``.

    Live pins without a stencil counterpart are dropped. Stencil terminals
    without a live pin get an unconnected pin so the symbol stays drawable.
    """

    aligned: List[Pin] = []
    used: List[Pin] = []
    for stencil_pin in stencil_pins:
        match = next(
            (pin for pin in live_pins if stencil_pin.matches(pin) and not any(pin is u for u in used)),
            None,
        )
        if match is None:
            match = Pin(None, stencil_pin.name, stencil_pin.terminal_index, None)
        else:
            used.append(match)
        aligned.append(match)

    for pin in live_pins:
        if not any(pin is u for u in used):
            logger.debug(
                "Dropping terminal %d (%s) without stencil counterpart",
                pin.terminal_index,
                pin.name or "unnamed",
            )
    return aligned


def line_crossing_point(coords: Sequence[Coordinate], anchor_index: int) -> Coordinate:
    """Projection of the anchor terminal onto the line through the two other terminals."""

    others = [coord for idx, coord in enumerate(coords) if idx != anchor_index]
    if len(others) != 2:
        raise ValueError("line crossing point needs exactly three terminals")
    return coords[anchor_index].orthogonal_projection(others[0], others[1])


def nearest_wire_vertex(coord: Coordinate, net: Optional[Net]) -> Optional[Tuple[float, Coordinate]]:
    """Closest vertex over all wires of ``net`` as ``(distance, vertex)``.

    Ties go to the earlier wire and, within a wire, to the earlier vertex.
    """

    if net is None:
        return None
    best: Optional[Tuple[float, Coordinate]] = None
    for wire in net.wires:
        if not wire.coords:
            continue
        xs = np.fromiter((c.x for c in wire.coords), dtype=float, count=len(wire.coords))
        ys = np.fromiter((c.y for c in wire.coords), dtype=float, count=len(wire.coords))
        distances = np.hypot(xs - coord.x, ys - coord.y)
        idx = int(np.argmin(distances))
        distance = float(distances[idx])
        if best is None or distance < best[0]:
            best = (distance, wire.coords[idx])
    return best


class PlacementEngine:
    """Turns instance records into positioned components for one schematic."""

    def __init__(
        self,
        catalog: StencilCatalog,
        pool: CoordinatePool,
        config: Optional[ConversionConfig] = None,
    ):
        self.catalog = catalog
        self.pool = pool
        self.config = config or get_default_config()

    @debug_log_call(logger, name="PlacementEngine.place")
    def place(
        self,
        library_name: str,
        cell_name: str,
        instance_name: str,
        placement: Placement,
        pins: Sequence[Pin],
        *,
        values: Sequence[Tuple[str, str]] = (),
    ) -> PlacementResult:
        stencil = self.catalog.lookup(library_name, cell_name)
        if stencil is None:
            return Skipped(instance_name, library_name, cell_name, "no stencil in catalog")

        if isinstance(stencil, NodeStencil):
            component = self._place_node(stencil, instance_name, placement, pins)
        elif isinstance(stencil, PathStencil):
            component = self._place_path(stencil, instance_name, placement, pins, values)
        elif isinstance(stencil, OrientedStencil):
            component = self._place_oriented(stencil, instance_name, placement, pins, values)
        else:  # pragma: no cover - closed set of stencil kinds
            raise TypeError(f"unsupported stencil {stencil!r}")

        for pin in component.pins:
            if pin.net is not None:
                pin.net.pins.append(pin)
        return Placed(component)

    # ------------------------------------------------------------------
    # shared steps
    # ------------------------------------------------------------------

    def origin(self, placement: Placement) -> Coordinate:
        scale = self.config.scale
        return self.pool.canonicalize(Coordinate(placement.x * scale, placement.y * scale))

    def transform(self, local: Coordinate, placement: Placement, angle: float, origin: Coordinate) -> Coordinate:
        """Stencil-local → world: scale, rotate, mirror, translate."""

        scale = self.config.scale
        coord = local.scale(placement.x_scale * scale, placement.y_scale * scale)
        coord = coord.rotate(angle)
        if placement.mirror_x:
            coord = coord.mirror_x()
        if placement.mirror_y:
            coord = coord.mirror_y()
        return coord.add(origin)

    def snap(self, coord: Coordinate, net: Optional[Net]) -> Optional[Coordinate]:
        """Wire vertex of ``net`` nearest to ``coord`` within the snap radius, if any."""

        found = nearest_wire_vertex(coord, net)
        if found is None:
            return None
        distance, vertex = found
        radius = self.config.world_snap_radius
        if radius is not None and distance > radius:
            return None
        return vertex

    def resolve(self, coord: Coordinate, net: Optional[Net]) -> Coordinate:
        snapped = self.snap(coord, net)
        if snapped is not None:
            return snapped
        return self.pool.canonicalize(coord)

    # ------------------------------------------------------------------
    # shape kinds
    # ------------------------------------------------------------------

    def _place_node(
        self,
        stencil: NodeStencil,
        instance_name: str,
        placement: Placement,
        pins: Sequence[Pin],
    ) -> Component:
        angle = normalize_angle(placement.angle + stencil.angle_offset)
        origin = self.origin(placement)
        (live,) = align_pins(stencil.pins, pins)
        pin = replace(live, coord=self.resolve(origin, live.net))

        node_text = ""
        if stencil.print_net_name and pin.net is not None:
            node_text = pin.net.pretty_name
        return Component(
            kind=ShapeKind.NODE,
            render_name=stencil.render_name,
            label=instance_name,
            pins=(pin,),
            origin=origin,
            anchor=pin.coord,
            angle=angle,
            mirror_x=placement.mirror_x,
            mirror_y=placement.mirror_y,
            node_text=node_text,
        )

    def _place_path(
        self,
        stencil: PathStencil,
        instance_name: str,
        placement: Placement,
        pins: Sequence[Pin],
        values: Sequence[Tuple[str, str]],
    ) -> Component:
        angle = normalize_angle(placement.angle)
        origin = self.origin(placement)
        positioned = []
        for stencil_pin, live in zip(stencil.pins, align_pins(stencil.pins, pins)):
            world = self.transform(stencil_pin.coord, placement, angle, origin)
            positioned.append(replace(live, coord=self.resolve(world, live.net)))

        return Component(
            kind=ShapeKind.PATH,
            render_name=stencil.render_name,
            label=instance_name,
            pins=tuple(positioned),
            origin=origin,
            anchor=origin,
            angle=angle,
            mirror_x=placement.mirror_x,
            mirror_y=placement.mirror_y,
            values=tuple(values),
        )

    def _place_oriented(
        self,
        stencil: OrientedStencil,
        instance_name: str,
        placement: Placement,
        pins: Sequence[Pin],
        values: Sequence[Tuple[str, str]],
    ) -> Component:
        angle = normalize_angle(placement.angle)
        origin = self.origin(placement)

        anatomical = [self.transform(pin.coord, placement, angle, origin) for pin in stencil.pins]
        crossing = line_crossing_point(anatomical, stencil.anchor_index)

        template = stencil.template
        template_coords = [self._orient(pin.coord, placement, angle) for pin in template.pins]
        offset = crossing.subtract(line_crossing_point(template_coords, stencil.anchor_index))
        template_coords = [coord.add(offset) for coord in template_coords]
        anchor = self.pool.canonicalize(self._orient(ORIGIN, placement, angle).add(offset))

        positioned: List[Pin] = []
        leads: List[Tuple[Coordinate, Coordinate]] = []
        aligned = align_pins(stencil.pins, pins)
        for ana_coord, live, tpl_pin, tpl_coord in zip(anatomical, aligned, template.pins, template_coords):
            terminal = self.pool.canonicalize(tpl_coord)
            vertex = self.snap(ana_coord, live.net)
            if vertex is None:
                self.pool.canonicalize(ana_coord)
            elif vertex is not terminal:
                leads.append((vertex, terminal))
            positioned.append(Pin(terminal, tpl_pin.name, live.terminal_index, live.net))

        return Component(
            kind=ShapeKind.ORIENTED,
            render_name=template.render_name,
            label=instance_name,
            pins=tuple(positioned),
            origin=origin,
            anchor=anchor,
            angle=angle,
            mirror_x=placement.mirror_x,
            mirror_y=placement.mirror_y,
            leads=tuple(leads),
            values=tuple(values),
        )

    @staticmethod
    def _orient(local: Coordinate, placement: Placement, angle: float) -> Coordinate:
        coord = local.rotate(angle)
        if placement.mirror_x:
            coord = coord.mirror_x()
        if placement.mirror_y:
            coord = coord.mirror_y()
        return coord
