from .geometry import Coordinate, CoordinatePool, normalize_angle
from .model import Component, Net, NetTable, Pin, Placed, Placement, ShapeKind, Skipped, Wire
from .catalog import (
    NodeStencil,
    OrientedStencil,
    PathStencil,
    RenderTemplate,
    StencilCatalog,
    TIKZ_STENCILS,
    default_catalog,
)
from .config import ConversionConfig, get_default_config, set_default_config
from .placement import PlacementEngine
from .quantities import format_parameter, to_siunitx
from .reader import (
    StructureError,
    element_names,
    find_cell,
    find_schematic_view,
    load_view,
    parse_file,
    parse_string,
    read_cell,
    read_view,
    schematic_views,
)
from .schematic import Schematic, build_schematics
from .tikz_codegen import generate_tikz_code, generate_tikz_document, latex_escape_keep_math, write_tikz

__all__ = [
    'Coordinate',
    'CoordinatePool',
    'normalize_angle',
    'Component',
    'Net',
    'NetTable',
    'Pin',
    'Placed',
    'Placement',
    'ShapeKind',
    'Skipped',
    'Wire',
    'NodeStencil',
    'OrientedStencil',
    'PathStencil',
    'RenderTemplate',
    'StencilCatalog',
    'TIKZ_STENCILS',
    'default_catalog',
    'ConversionConfig',
    'get_default_config',
    'set_default_config',
    'PlacementEngine',
    'format_parameter',
    'to_siunitx',
    'StructureError',
    'element_names',
    'find_cell',
    'find_schematic_view',
    'load_view',
    'parse_file',
    'parse_string',
    'read_cell',
    'read_view',
    'schematic_views',
    'Schematic',
    'build_schematics',
    'generate_tikz_code',
    'generate_tikz_document',
    'latex_escape_keep_math',
    'write_tikz',
]
