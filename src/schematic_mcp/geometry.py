"""
Geometry primitives for Manhattan wiring.

- Exact quarter-turn rotation (no floating point error)
- Free-form elbow routing between two points
- Anchor-preserving routing used while a symbol is dragged
"""

from __future__ import annotations

from schematic_mcp.models import Axis, Point

# A leg is one straight piece of a route; it carries no identity.
Leg = tuple[Point, Point]


def rotate_quarter(p: Point, turns: int) -> Point:
    """Rotate *p* about the origin by ``turns`` x 90 degrees.

    Uses the SVG convention (+x right, +y down), so one turn maps
    (x, y) to (-y, x).
    """
    turns %= 4
    if turns == 0:
        return Point(p.x, p.y)
    if turns == 1:
        return Point(-p.y, p.x)
    if turns == 2:
        return Point(-p.x, -p.y)
    return Point(p.y, -p.x)


def is_aligned(a: Point, b: Point) -> bool:
    """True if *a* and *b* share an x or a y coordinate."""
    return a.x == b.x or a.y == b.y


def route_freeform(a: Point, b: Point) -> list[Leg]:
    """Manhattan route between two points.

    Aligned points give a single leg. Otherwise the route is an elbow that
    always goes horizontal first: a -> (b.x, a.y) -> b.
    """
    if is_aligned(a, b):
        return [(a, b)]
    mid = Point(b.x, a.y)
    return [(a, mid), (mid, b)]


def route_from_anchor(fixed: Point, target: Point, incoming_axis: Axis) -> list[Leg]:
    """Manhattan route from a fixed anchor to a moving target.

    The route leaves *fixed* along *incoming_axis*, the orientation of the
    wire that was severed, so a dragged symbol pulls its wires instead of
    re-elbowing them at an arbitrary joint.
    """
    if is_aligned(fixed, target):
        return [(fixed, target)]
    if incoming_axis == Axis.H:
        mid = Point(target.x, fixed.y)
    else:
        mid = Point(fixed.x, target.y)
    return [(fixed, mid), (mid, target)]
