"""Schematic → CircuiTikZ code generation helpers."""

from .generator import (
    generate_tikz_code,
    generate_tikz_document,
    write_tikz,
)
from .utils import format_label, latex_escape_keep_math

__all__ = [
    "format_label",
    "generate_tikz_code",
    "generate_tikz_document",
    "latex_escape_keep_math",
    "write_tikz",
]
