import argparse
import logging
import sys
from pathlib import Path
from typing import IO, List, Optional, Sequence

from abl2tikz import (
    ConversionConfig,
    Schematic,
    StructureError,
    element_names,
    find_cell,
    find_schematic_view,
    generate_tikz_document,
    parse_file,
    read_view,
    schematic_views,
)
from abl2tikz.config import DEFAULT_SCALE

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _snap_radius(value: str) -> Optional[float]:
    if value.lower() in ("none", "inf", "unbounded"):
        return None
    try:
        radius = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid snap radius: {value!r}")
    if radius < 0:
        raise argparse.ArgumentTypeError("snap radius must not be negative")
    return radius


def _read_cells(source: str) -> list:
    if source == "-":
        logger.info("Reading ABL document from stdin")
        return parse_file(sys.stdin.buffer)
    logger.info("Reading ABL document from %s", source)
    with open(source, "rb") as fin:
        return parse_file(fin)


def _print_names(names: Sequence[str], heading: str = "") -> None:
    if not names:
        print(f"{heading}none found.")
        return
    if heading:
        print(heading)
    for name in names:
        print(f" - {name or '- unnamed -'}")


def _open_target(target: str, force: bool) -> IO[str]:
    if target == "-":
        return sys.stdout
    path = Path(target)
    if path.is_dir():
        raise IsADirectoryError(f'Expected file path but got directory: "{target}"')
    return open(path, "w" if force else "x", encoding="utf-8")


def _convert(args: argparse.Namespace) -> None:
    config = ConversionConfig(scale=args.scale, snap_radius=args.snap_radius)
    cell = find_cell(_read_cells(args.source), args.cellname)
    view = read_view(find_schematic_view(schematic_views(cell), args.schematicname))
    schematic = Schematic.from_view(view, config=config)
    for skipped in schematic.skipped:
        logger.info("Not converted: %s", skipped)

    try:
        out = _open_target(args.target, args.force)
    except FileExistsError:
        raise FileExistsError(f'Target file "{args.target}" exists, use --force to overwrite')
    try:
        if args.standalone:
            out.write(generate_tikz_document(schematic))
        else:
            schematic.write_to(out)
    finally:
        if out is not sys.stdout:
            out.close()
    if args.target != "-":
        logger.info("TikZ code written to %s", args.target)


def _list_cells(args: argparse.Namespace) -> None:
    _print_names(element_names(_read_cells(args.source)), "Cells:")


def _list_schematics(args: argparse.Namespace) -> None:
    cells = _read_cells(args.source)
    if args.cellname:
        cell = find_cell(cells, args.cellname)
        _print_names(element_names(schematic_views(cell)), "Schematics:")
        return
    for cell, name in zip(cells, element_names(cells)):
        if name:
            _print_names(element_names(schematic_views(cell)), f"Schematics of {name}:")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="abl2tikz",
        description="Convert Keysight ADS schematics (ABL/XML) to CircuiTikZ",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    convert = commands.add_parser("convert", help="Convert one schematic to CircuiTikZ")
    convert.add_argument("source", help="The ABL/XML source file; - for stdin")
    convert.add_argument(
        "target",
        nargs="?",
        default="-",
        help="The CircuiTikZ target file (default: stdout)",
    )
    convert.add_argument(
        "-c",
        "--cellname",
        default="",
        help="The name of the cell to use (default: first cell in file)",
    )
    convert.add_argument(
        "-s",
        "--schematicname",
        default="",
        help="The name of the schematic of the cell (default: first schematic)",
    )
    convert.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Overwrite the target file if it exists",
    )
    convert.add_argument(
        "--scale",
        type=float,
        default=DEFAULT_SCALE,
        help=f"Source unit to TikZ unit factor (default: {DEFAULT_SCALE})",
    )
    convert.add_argument(
        "--snap-radius",
        type=_snap_radius,
        default=1.0,
        help="Largest terminal to wire distance in source units, 'none' for unbounded (default: 1.0)",
    )
    convert.add_argument(
        "--standalone",
        action="store_true",
        help="Wrap the picture in a standalone LaTeX document",
    )
    convert.set_defaults(handler=_convert)

    list_cells = commands.add_parser("list-cells", help="List all cells in an ABL/XML source file")
    list_cells.add_argument("source", help="The ABL/XML source file; - for stdin")
    list_cells.set_defaults(handler=_list_cells)

    list_schematics = commands.add_parser(
        "list-schematics",
        help="List the schematics of a cell, or of all cells",
    )
    list_schematics.add_argument("source", help="The ABL/XML source file; - for stdin")
    list_schematics.add_argument(
        "-c",
        "--cellname",
        default="",
        help="The name of the cell to use (default: all cells)",
    )
    list_schematics.set_defaults(handler=_list_schematics)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        args.handler(args)
    except (StructureError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1)


if __name__ == "__main__":
    main(sys.argv[1:])
