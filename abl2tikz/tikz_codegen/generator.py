"""CircuiTikZ renderer for reconstructed schematics."""

from __future__ import annotations

from typing import IO, TYPE_CHECKING, List, Sequence

from .utils import format_float, format_label, latex_escape_keep_math, option_value
from ..geometry import Coordinate
from ..model import Component, ShapeKind, Wire

if TYPE_CHECKING:
    from ..schematic import Schematic


INDENT = "  "
WIRE_STYLE = "Rays-Rays,red"
COMPONENT_STYLE = "color=blue"

# Tick drawn next to the first terminal of an axis-aligned two-pole.
PINMARK_RIGHT = "++ (3pt,0) ++ (-1.25pt, -2.5pt) -- ++(2.5pt, 5pt);"
PINMARK_LEFT = "++ (-3pt,0) ++ (-1.25pt, -2.5pt) -- ++(2.5pt, 5pt);"
PINMARK_UP = "++ (0,3pt) ++ (-2.5pt, -1.25pt) -- ++(5pt, 2.5pt);"
PINMARK_DOWN = "++ (0,-3pt) ++ (-2.5pt, -1.25pt) -- ++(5pt, 2.5pt);"

standalone_tpl = r"""\documentclass[border=2pt]{standalone}
\usepackage[utf8]{inputenc}
\usepackage[T1]{fontenc}
\usepackage{siunitx}
\usepackage{circuitikz}
\usetikzlibrary{arrows.meta}
\begin{document}
%s
\end{document}
"""


def generate_tikz_document(schematic: "Schematic", *, mark_pins: bool = True) -> str:
    """Render a standalone document around the schematic picture."""

    return standalone_tpl % generate_tikz_code(schematic, mark_pins=mark_pins)


def generate_tikz_code(schematic: "Schematic", *, mark_pins: bool = True) -> str:
    """Generate the ``tikzpicture`` for a schematic: wires first, then components."""

    return "\n".join(_picture_lines(schematic, mark_pins=mark_pins))


def write_tikz(schematic: "Schematic", out: IO[str], *, mark_pins: bool = True) -> None:
    for line in _picture_lines(schematic, mark_pins=mark_pins):
        out.write(line)
        out.write("\n")


def _picture_lines(schematic: "Schematic", *, mark_pins: bool) -> List[str]:
    lines = ["\\begin{tikzpicture}"]
    for wire in schematic.wires:
        lines.append(INDENT + wire_statement(wire))
    lines.append("")
    for component in schematic.components:
        for statement in component_statements(component, mark_pins=mark_pins):
            lines.append(INDENT + statement)
    lines.append("\\end{tikzpicture}")
    return lines


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

def _coord(coord: Coordinate) -> str:
    return f"({format_float(coord.x)}, {format_float(coord.y)})"


def wire_statement(wire: Wire) -> str:
    if not wire.coords:
        return "% Wire without vertices"
    path = " -- ".join(_coord(coord) for coord in wire.coords)
    return f"\\draw[{WIRE_STYLE}] {path};"


def node_statement(component: Component, text: str) -> str:
    options = [COMPONENT_STYLE, component.render_name]
    if component.mirror_x:
        options.append("yscale=-1")
    if component.mirror_y:
        options.append("xscale=-1")
    if component.angle:
        options.append(f"rotate={format_float(component.angle)}")
    return f"\\node[{', '.join(options)}] at {_coord(component.anchor)} {{{text}}};"


def pinmark_statement(component: Component) -> str:
    """Tick on the first terminal of an axis-aligned two-pole, empty otherwise."""

    first, second = component.pins[0].coord, component.pins[1].coord
    if first is None or second is None:
        return ""
    if component.angle in (0.0, 180.0):
        mark = PINMARK_RIGHT if first.x < second.x else PINMARK_LEFT
    elif component.angle in (90.0, -90.0):
        mark = PINMARK_UP if first.y < second.y else PINMARK_DOWN
    else:
        return ""
    return f"\\draw[{COMPONENT_STYLE}] {_coord(first)} {mark}"


def path_statement(component: Component) -> str:
    options = [component.render_name]
    label = format_label(component.label)
    if label:
        options.append(f"l={option_value(label)}")
    if component.value:
        options.append(f"a={option_value(component.value)}")
    first, second = component.pins[0].coord, component.pins[1].coord
    return f"\\draw[{COMPONENT_STYLE}] {_coord(first)} to[{', '.join(options)}] {_coord(second)};"


def lead_statements(component: Component) -> List[str]:
    return [f"\\draw[{COMPONENT_STYLE}] {_coord(start)} -- {_coord(end)};" for start, end in component.leads]


def component_statements(component: Component, *, mark_pins: bool = True) -> Sequence[str]:
    if component.kind is ShapeKind.NODE:
        return [node_statement(component, latex_escape_keep_math(component.node_text))]

    if component.kind is ShapeKind.PATH:
        if len(component.pins) != 2 or any(pin.coord is None for pin in component.pins):
            return [f'% Component "{component.render_name}" with pincount {len(component.pins)} is not supported']
        statements = []
        if mark_pins:
            mark = pinmark_statement(component)
            if mark:
                statements.append(mark)
        statements.append(path_statement(component))
        return statements

    return lead_statements(component) + [node_statement(component, format_label(component.label))]
