"""Typed records produced by the ABL reader and consumed by :class:`~abl2tikz.schematic.Schematic`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .model import Placement


@dataclass
class TerminalRecord:
    terminal_index: int
    terminal_name: str = ""
    net_name: Optional[str] = None


@dataclass
class ParameterRecord:
    name: str
    value: str
    visible: bool = True


@dataclass
class WireRecord:
    net_name: str
    points: str  # space separated "x,y" pairs in source units


@dataclass
class InstanceRecord:
    library_name: str
    cell_name: str
    instance_name: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    parameters: List[ParameterRecord] = field(default_factory=list)
    placement: Optional[Placement] = None
    terminals: List[TerminalRecord] = field(default_factory=list)

    @property
    def visible_parameters(self) -> List[ParameterRecord]:
        return [param for param in self.parameters if param.visible]


@dataclass
class ViewRecord:
    name: str
    wires: List[WireRecord] = field(default_factory=list)
    instances: List[InstanceRecord] = field(default_factory=list)


@dataclass
class CellRecord:
    name: str
    views: List[ViewRecord] = field(default_factory=list)
