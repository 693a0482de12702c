"""
Core model classes for the schematic editor.

Provides the typed building blocks shared by every other module: grid
points, wire segments, placed component instances and the editable
schematic state that owns them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Axis(Enum):
    """Orientation of an axis-aligned segment."""
    H = "h"
    V = "v"


class SelectionKind(Enum):
    COMPONENT = "component"
    WIRE = "wire"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Point:
    """A 2-D grid coordinate. Equality is exact; there is no tolerance."""
    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class WireSegment:
    """A single axis-aligned wire segment in world space.

    Segment ids are not stable: every canonicalization pass hands out
    fresh ones, so callers must not keep an id across a normalize,
    splice or commit.
    """
    id: str
    a: Point
    b: Point

    @property
    def axis(self) -> Optional[Axis]:
        """H or V for axis-aligned segments, None for diagonals."""
        if self.a.y == self.b.y and self.a.x != self.b.x:
            return Axis.H
        if self.a.x == self.b.x and self.a.y != self.b.y:
            return Axis.V
        return None

    def has_endpoint(self, p: Point) -> bool:
        return self.a == p or self.b == p

    def key(self) -> tuple[str, float, float, float]:
        """Geometry key: (axis, constant coordinate, min, max)."""
        if self.a.x == self.b.x:
            return ("v", self.a.x, min(self.a.y, self.b.y), max(self.a.y, self.b.y))
        return ("h", self.a.y, min(self.a.x, self.b.x), max(self.a.x, self.b.x))

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "a": self.a.to_dict(), "b": self.b.to_dict()}


@dataclass
class ComponentInstance:
    """A placed component.

    ``pos`` is the snapped world-space centre; ``rotation`` counts quarter
    turns (0..3) applied to the type's local port offsets.
    """
    id: str
    type_id: str
    pos: Point
    rotation: int = 0
    params: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type_id": self.type_id,
            "pos": self.pos.to_dict(),
            "rotation": self.rotation * 90,
            "params": dict(self.params),
        }


@dataclass(frozen=True)
class Selection:
    """The single selected item, either a component or a wire."""
    kind: SelectionKind
    id: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "id": self.id}


@dataclass
class CellBounds:
    """Axis-aligned bounding box."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains_point(self, px: float, py: float) -> bool:
        """Inclusive: points on the border count as inside."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom


@dataclass
class EditorConfig:
    """Configuration for a schematic editor session."""
    grid_size: int = 25
    # World (canvas) bounds; dragged symbols must stay inside
    canvas_x: float = 0
    canvas_y: float = 0
    canvas_width: float = 1200
    canvas_height: float = 800
    # Click tolerance around wires, in world units
    wire_hit_tolerance: float = 6

    @property
    def canvas(self) -> CellBounds:
        return CellBounds(self.canvas_x, self.canvas_y, self.canvas_width, self.canvas_height)


@dataclass
class Schematic:
    """Editable schematic state: components, canonical wires and selection.

    This is drawing state only, not simulation state.
    """
    name: str = "schematic"
    components: list[ComponentInstance] = field(default_factory=list)
    wires: list[WireSegment] = field(default_factory=list)
    selection: Optional[Selection] = None

    # internal counter
    _next_id: int = field(default=1, init=False, repr=False)

    def next_id(self, prefix: str = "") -> str:
        """Generate a sequential, collision-free id."""
        cid = f"{prefix}{self._next_id}"
        self._next_id += 1
        return cid

    def find_component(self, component_id: str) -> ComponentInstance | None:
        for c in self.components:
            if c.id == component_id:
                return c
        return None

    def find_wire(self, wire_id: str) -> WireSegment | None:
        for w in self.wires:
            if w.id == wire_id:
                return w
        return None

    def add_component(
        self,
        type_id: str,
        pos: Point,
        rotation: int = 0,
        params: Optional[dict[str, float]] = None,
        component_id: Optional[str] = None,
    ) -> str:
        cid = component_id or self.next_id("c")
        self.components.append(
            ComponentInstance(
                id=cid,
                type_id=type_id,
                pos=pos,
                rotation=rotation % 4,
                params=dict(params or {}),
            )
        )
        return cid

    def remove_component(self, component_id: str) -> bool:
        before = len(self.components)
        self.components = [c for c in self.components if c.id != component_id]
        return len(self.components) != before

    def remove_wire(self, wire_id: str) -> bool:
        before = len(self.wires)
        self.wires = [w for w in self.wires if w.id != wire_id]
        return len(self.wires) != before

    def wire_geometry(self) -> set[tuple[str, float, float, float]]:
        """The canonical wire set as geometry keys, ignoring ids."""
        return {w.key() for w in self.wires}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _uid() -> str:
    return uuid.uuid4().hex[:12]


def snap_to_grid(value: float, grid_size: int = 25) -> float:
    """Snap a coordinate to the nearest grid line."""
    return round(value / grid_size) * grid_size


def snap_point(p: Point, grid_size: int = 25) -> Point:
    """Snap a world-space point to the nearest grid intersection."""
    return Point(snap_to_grid(p.x, grid_size), snap_to_grid(p.y, grid_size))
