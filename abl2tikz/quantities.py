"""Conversion of ADS parameter values (``1k1Ohm``, ``2.2 uF``) to siunitx markup."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

_QUANTITY_RE = re.compile(r"^\s*(\d*)\s*([a-zA-Zµ,.]?)\s*(\d+)\s*([a-zA-ZµΩ]*)\s*$")

SI_UNITS: List[Tuple[str, str]] = [
    ("Ampere", r"\ampere"),
    ("A", r"\ampere"),
    ("Coulomb", r"\coulomb"),
    ("C", r"\coulomb"),
    ("Farad", r"\farad"),
    ("F", r"\farad"),
    ("Hertz", r"\hertz"),
    ("Hz", r"\hertz"),
    ("Henry", r"\henry"),
    ("H", r"\henry"),
    ("Ohm", r"\ohm"),
    ("Ω", r"\ohm"),
    ("Siemens", r"\siemens"),
    ("S", r"\siemens"),
    ("Tesla", r"\tesla"),  # a bare "T" is the tera prefix
    ("Volt", r"\volt"),
    ("V", r"\volt"),
    ("Watt", r"\watt"),
    ("W", r"\watt"),
]

SI_PREFIXES: List[Tuple[str, str]] = [
    ("f", r"\femto"),
    ("p", r"\pico"),
    ("n", r"\nano"),
    ("µ", r"\micro"),
    ("u", r"\micro"),
    ("m", r"\milli"),
    ("K", r"\kilo"),
    ("k", r"\kilo"),
    ("M", r"\mega"),
    ("G", r"\giga"),
    ("T", r"\tera"),
]


@dataclass(frozen=True)
class ParameterFormat:
    suggested_unit: Optional[str] = None
    force_unit: Optional[str] = None


# Visible ADS parameters rendered as the symbol annotation.
PARAMETER_FORMATS: Dict[str, ParameterFormat] = {
    "R": ParameterFormat(suggested_unit="Ohm"),
    "C": ParameterFormat(suggested_unit="uF"),
    "L": ParameterFormat(suggested_unit="nH"),
    "F": ParameterFormat(suggested_unit="Hz"),
}


def _format_number(value: float) -> str:
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return f"{value:g}"


def _split_number(text: str) -> Optional[Tuple[float, str]]:
    try:
        value = float(text)
    except ValueError:
        value = None
    if value is not None:
        return (value, "") if math.isfinite(value) else None

    match = _QUANTITY_RE.match(text)
    if not match:
        return None
    whole, delimiter, fraction, rest = match.groups()
    if delimiter:
        value = float(f"{whole or '0'}.{fraction}")
        unit = rest if delimiter in ",." else delimiter + rest  # 1k1Ohm: the prefix doubles as decimal mark
    else:
        value = float(whole + fraction)
        unit = rest
    return value, unit


def _unit_macros(unit: str) -> Optional[Tuple[str, str]]:
    """(prefix macros, unit macros) of ``unit``, ``None`` when part of it is unknown."""

    macros = ""
    while unit:
        found = next(((key, macro) for key, macro in SI_UNITS if unit.endswith(key)), None)
        if found is None:
            break
        macros = found[1] + macros
        unit = unit[: -len(found[0])]
    prefixes = ""
    while unit:
        found = next(((key, macro) for key, macro in SI_PREFIXES if unit.endswith(key)), None)
        if found is None:
            break
        prefixes = found[1] + prefixes
        unit = unit[: -len(found[0])]
    if unit:
        return None
    return prefixes, macros


def to_siunitx(text: str, suggested_unit: Optional[str] = None, force_unit: Optional[str] = None) -> str:
    """Render ``text`` as ``\\SI{value}{unit}``; text that does not parse is returned as is."""

    parsed = _split_number(text)
    if parsed is None:
        return text
    value, unit = parsed
    unit = force_unit or unit or suggested_unit or ""

    parts = _unit_macros(unit)
    if parts is None:
        return text
    prefixes, units = parts
    if not units and suggested_unit and not force_unit:
        # "1k" for a resistor keeps the resistor's base unit
        suggested = _unit_macros(suggested_unit)
        if suggested is not None:
            units = suggested[1]
    macros = prefixes + units
    if macros:
        return f"\\SI{{{_format_number(value)}}}{{{macros}}}"
    return f"\\num{{{_format_number(value)}}}"


def format_parameter(name: str, value: str) -> Optional[str]:
    """siunitx value for a known parameter name, ``None`` for parameters that are not rendered."""

    fmt = PARAMETER_FORMATS.get(name)
    if fmt is None:
        return None
    return to_siunitx(value, fmt.suggested_unit, fmt.force_unit)
