"""Reader for ADS ABL (Advanced Board Link) XML exports.

Only the parts of the document needed for a schematic are read::

    library / cells / cell[name] / views / schematicView[type=schematic, name]
        shapes / wire / net[name], genPolyline / centerLine / points
        instances / instance[libraryName, cellName, instanceName]
            parameters / parameter[name, value, visible]
            placementTransform[x, y, angle, xScale, yScale, mirrorX, mirrorY]
            instPins / instPin[instTermNumber, pinName] / net[name]

Tags are matched by their local name, case-insensitively.
"""

from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, IO, List, Optional, Sequence, Union

from .model import Placement
from .records import CellRecord, InstanceRecord, ParameterRecord, TerminalRecord, ViewRecord, WireRecord

logger = logging.getLogger(__name__)

Source = Union[str, Path, IO[bytes], IO[str]]
ElementFilter = Callable[[ET.Element], bool]


class StructureError(ValueError):
    """Raised when a required part of the ABL document is missing or malformed."""


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].rsplit(":", 1)[-1].lower()


def named_children(root: ET.Element, tag_name: str, predicate: Optional[ElementFilter] = None) -> List[ET.Element]:
    tag_name = tag_name.lower()
    return [
        child
        for child in root
        if _local_name(child.tag) == tag_name and (predicate is None or predicate(child))
    ]


def named_child(root: ET.Element, tag_name: str, predicate: Optional[ElementFilter] = None) -> Optional[ET.Element]:
    found = named_children(root, tag_name, predicate)
    return found[0] if found else None


def require_child(root: ET.Element, tag_name: str) -> ET.Element:
    child = named_child(root, tag_name)
    if child is None:
        raise StructureError(f"XML-Tag not found: {tag_name}")
    return child


def _attr(element: ET.Element, name: str) -> Optional[str]:
    """Attribute lookup ignoring namespace qualification of the attribute name."""

    if name in element.attrib:
        return element.attrib[name]
    for key, value in element.attrib.items():
        if _local_name(key) == name.lower():
            return value
    return None


# ---------------------------------------------------------------------------
# Document level
# ---------------------------------------------------------------------------

def parse_string(text: Union[str, bytes]) -> List[ET.Element]:
    """Parse an ABL document and return its cell elements."""

    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise StructureError(f"Syntax error in XML file: {exc}") from exc
    return _cells_of(root)


def parse_file(source: Source) -> List[ET.Element]:
    """Parse an ABL document from a path or an open stream and return its cell elements."""

    try:
        tree = ET.parse(source)
    except ET.ParseError as exc:
        raise StructureError(f"Syntax error in XML file: {exc}") from exc
    return _cells_of(tree.getroot())


def _cells_of(root: ET.Element) -> List[ET.Element]:
    library = require_child(root, "library")
    cells = require_child(library, "cells")
    return named_children(cells, "cell")


def find_cell(cells: Sequence[ET.Element], cell_name: str = "") -> ET.Element:
    """Cell named ``cell_name``; the first cell when the name is empty."""

    if not cell_name:
        if not cells:
            raise StructureError("No cells found")
        return cells[0]
    for cell in cells:
        if _attr(cell, "name") == cell_name:
            return cell
    raise StructureError(f'Cell "{cell_name}" not found')


def schematic_views(cell: ET.Element) -> List[ET.Element]:
    views = named_child(cell, "views")
    if views is None:
        return []
    return named_children(views, "schematicview", lambda node: _attr(node, "type") == "schematic")


def find_schematic_view(views: Sequence[ET.Element], view_name: str = "") -> ET.Element:
    """Schematic view named ``view_name``; the first one when the name is empty."""

    if not view_name:
        if not views:
            raise StructureError("No schematic found")
        return views[0]
    for view in views:
        if _attr(view, "name") == view_name:
            return view
    raise StructureError(f'Schematic "{view_name}" not found')


def element_names(elements: Sequence[ET.Element]) -> List[str]:
    return [_attr(element, "name") or "" for element in elements]


def load_view(source: Source, cell_name: str = "", view_name: str = "") -> ViewRecord:
    cell = find_cell(parse_file(source), cell_name)
    return read_view(find_schematic_view(schematic_views(cell), view_name))


def read_cell(cell: ET.Element) -> CellRecord:
    """All schematic views of a cell."""

    return CellRecord(
        name=_attr(cell, "name") or "",
        views=[read_view(view) for view in schematic_views(cell)],
    )


# ---------------------------------------------------------------------------
# Schematic view
# ---------------------------------------------------------------------------

def read_view(view: ET.Element) -> ViewRecord:
    shapes = require_child(view, "shapes")
    instances = require_child(view, "instances")
    return ViewRecord(
        name=_attr(view, "name") or "",
        wires=[read_wire(node) for node in named_children(shapes, "wire")],
        instances=[read_instance(node) for node in named_children(instances, "instance")],
    )


def _net_name(element: ET.Element) -> Optional[str]:
    net = named_child(element, "net")
    if net is None:
        return None
    return _attr(net, "name") or ""


def read_wire(wire: ET.Element) -> WireRecord:
    points = wire
    for tag_name in ("genpolyline", "centerline", "points"):
        points = require_child(points, tag_name)
    return WireRecord(net_name=_net_name(wire) or "", points=(points.text or "").strip())


def _float_attr(element: ET.Element, name: str, default: float) -> float:
    raw = _attr(element, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid number %r for %s, using %s", raw, name, default)
        return default
    if not math.isfinite(value):
        return default
    return value


def read_placement(transform: Optional[ET.Element]) -> Placement:
    if transform is None:
        return Placement()
    x_scale = _float_attr(transform, "xScale", 1.0)
    y_scale = _float_attr(transform, "yScale", 1.0)
    return Placement(
        x=_float_attr(transform, "x", 0.0),
        y=_float_attr(transform, "y", 0.0),
        angle=_float_attr(transform, "angle", 0.0),
        x_scale=x_scale or 1.0,
        y_scale=y_scale or 1.0,
        mirror_x=_attr(transform, "mirrorX") == "true",
        mirror_y=_attr(transform, "mirrorY") == "true",
    )


def _terminal_index(raw: Optional[str]) -> int:
    try:
        return int(float(raw or 0))
    except (ValueError, OverflowError):
        return 0


def read_instance(instance: ET.Element) -> InstanceRecord:
    parameters = []
    params_node = named_child(instance, "parameters")
    if params_node is not None:
        for param in named_children(params_node, "parameter"):
            parameters.append(
                ParameterRecord(
                    name=_attr(param, "name") or "",
                    value=_attr(param, "value") or "",
                    visible=_attr(param, "visible") == "true",
                )
            )

    terminals = []
    pins_node = named_child(instance, "instpins")
    if pins_node is not None:
        for pin in named_children(pins_node, "instpin"):
            terminals.append(
                TerminalRecord(
                    terminal_index=_terminal_index(_attr(pin, "instTermNumber")),
                    terminal_name=_attr(pin, "pinName") or "",
                    net_name=_net_name(pin) or None,
                )
            )

    return InstanceRecord(
        library_name=_attr(instance, "libraryName") or "",
        cell_name=_attr(instance, "cellName") or "",
        instance_name=_attr(instance, "instanceName") or "",
        attributes={key.rsplit("}", 1)[-1]: value for key, value in instance.attrib.items()},
        parameters=parameters,
        placement=read_placement(named_child(instance, "placementtransform")),
        terminals=terminals,
    )
