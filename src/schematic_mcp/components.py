"""
Component type catalogue.

Each component type is a record of its local geometry: port offsets
relative to the component centre and a local bounding box. Instances
reference a type by ``type_id``; port world positions are derived by
rotating the local offsets by the instance's quarter turns and
translating by its position.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from schematic_mcp.geometry import rotate_quarter
from schematic_mcp.models import CellBounds, ComponentInstance, Point


class PortLocator(Protocol):
    """Anything that can report the world positions of an instance's ports."""

    def port_world_positions(self, inst: ComponentInstance) -> list[Point]:
        ...


@dataclass(frozen=True)
class ComponentType:
    """A two-terminal symbol laid out along its local x axis.

    Ports sit at (-port_offset, 0) and (+port_offset, 0). The local
    bounding box spans the ports horizontally and +/- half_height
    vertically.
    """
    type_id: str
    display_name: str
    port_offset: float
    half_height: float
    port_names: tuple[str, str] = ("A", "B")
    default_params: dict[str, float] = field(default_factory=dict)

    def local_ports(self) -> list[tuple[str, Point]]:
        return [
            (self.port_names[0], Point(-self.port_offset, 0)),
            (self.port_names[1], Point(self.port_offset, 0)),
        ]

    def local_bounds(self) -> CellBounds:
        return CellBounds(
            -self.port_offset, -self.half_height,
            self.port_offset * 2, self.half_height * 2,
        )


# Port offsets are multiples of the default 25-unit grid so ports land
# on grid intersections.
_TYPES: dict[str, ComponentType] = {
    t.type_id: t
    for t in (
        ComponentType("resistor", "Resistor", 75, 14, default_params={"R": 100}),
        ComponentType("battery", "Battery", 75, 30, ("+", "-"), {"V": 9}),
        ComponentType("bulb", "Bulb", 75, 22, default_params={"P": 5}),
        ComponentType("capacitor", "Capacitor", 75, 30, default_params={"C": 1}),
        ComponentType("switch", "Switch", 50, 18, default_params={"closed": 0}),
        ComponentType("varResistor", "Var. Resistor", 50, 28, default_params={"R": 100}),
        ComponentType("ammeter", "Ammeter", 75, 22),
        ComponentType("voltmeter", "Voltmeter", 75, 22),
    )
}


def get_component_type(type_id: str) -> ComponentType:
    """Look up a component type; raises KeyError for unknown ids."""
    try:
        return _TYPES[type_id]
    except KeyError:
        raise KeyError(f"Unknown component type: {type_id}") from None


def list_component_types() -> list[ComponentType]:
    return list(_TYPES.values())


class ComponentCatalog:
    """Registry-backed :class:`PortLocator` with bounding-box support."""

    def port_world_positions(self, inst: ComponentInstance) -> list[Point]:
        return [pos for _, pos in self.named_port_positions(inst)]

    def named_port_positions(self, inst: ComponentInstance) -> list[tuple[str, Point]]:
        ctype = get_component_type(inst.type_id)
        return [
            (name, inst.pos + rotate_quarter(offset, inst.rotation))
            for name, offset in ctype.local_ports()
        ]

    def world_bounds(self, inst: ComponentInstance) -> CellBounds:
        """Rotated, translated axis-aligned bounding box of *inst*."""
        local = get_component_type(inst.type_id).local_bounds()
        corners = [
            Point(local.x, local.y),
            Point(local.right, local.y),
            Point(local.right, local.bottom),
            Point(local.x, local.bottom),
        ]
        world = [inst.pos + rotate_quarter(c, inst.rotation) for c in corners]
        min_x = min(p.x for p in world)
        min_y = min(p.y for p in world)
        max_x = max(p.x for p in world)
        max_y = max(p.y for p in world)
        return CellBounds(min_x, min_y, max_x - min_x, max_y - min_y)
