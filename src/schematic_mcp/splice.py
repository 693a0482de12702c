"""
Auto-splicing of two-port components into straight wire runs.

A two-port component visually occupies the straight span between its
ports. Once the ports are forced junctions, the wire directly between
them duplicates the component body and is removed, unless something else
is attached along that span.
"""

from __future__ import annotations

from typing import Callable, Iterable

from schematic_mcp.components import PortLocator
from schematic_mcp.models import ComponentInstance, Point, WireSegment, _uid
from schematic_mcp.normalize import normalize_wires

PortPair = tuple[Point, Point]


def _two_port_pairs(
    components: Iterable[ComponentInstance],
    ports: PortLocator,
) -> list[PortPair]:
    """Port pairs of every component with exactly two ports.

    Components with any other port count are skipped, not rejected.
    """
    pairs: list[PortPair] = []
    for inst in components:
        positions = ports.port_world_positions(inst)
        if len(positions) != 2:
            continue
        pairs.append((positions[0], positions[1]))
    return pairs


def _strictly_between(p: Point, p1: Point, p2: Point) -> bool:
    """True if *p* lies on the p1-p2 line strictly inside the span."""
    if p1.x == p2.x:
        return p.x == p1.x and min(p1.y, p2.y) < p.y < max(p1.y, p2.y)
    if p1.y == p2.y:
        return p.y == p1.y and min(p1.x, p2.x) < p.x < max(p1.x, p2.x)
    return False


def _splice_between(wires: list[WireSegment], pair: PortPair) -> list[WireSegment]:
    p1, p2 = pair
    vertical = p1.x == p2.x
    horizontal = p1.y == p2.y
    if p1 == p2 or not (vertical or horizontal):
        return wires

    # A foreign endpoint inside the span is a junction we would sever.
    for w in wires:
        for ep in (w.a, w.b):
            if ep == p1 or ep == p2:
                continue
            if _strictly_between(ep, p1, p2):
                return wires

    if vertical:
        x = p1.x
        lo, hi = min(p1.y, p2.y), max(p1.y, p2.y)
        return [
            w for w in wires
            if not (
                w.a.x == w.b.x == x
                and lo <= min(w.a.y, w.b.y)
                and max(w.a.y, w.b.y) <= hi
            )
        ]

    y = p1.y
    lo, hi = min(p1.x, p2.x), max(p1.x, p2.x)
    return [
        w for w in wires
        if not (
            w.a.y == w.b.y == y
            and lo <= min(w.a.x, w.b.x)
            and max(w.a.x, w.b.x) <= hi
        )
    ]


def splice_components(
    segments: Iterable[WireSegment],
    components: Iterable[ComponentInstance],
    ports: PortLocator,
    make_id: Callable[[], str] = _uid,
) -> list[WireSegment]:
    """Normalize wires with component ports as forced junctions, then splice.

    1. Cut the network at every two-port component's ports.
    2. For each port pair that is axis-aligned, delete the wire span
       between the ports, but only when no other segment endpoint lies
       strictly inside that span.

    Returns the new canonical wire list (fresh ids).
    """
    segments = list(segments)
    if not segments:
        return []

    pairs = _two_port_pairs(components, ports)
    port_points = [p for pair in pairs for p in pair]

    out = normalize_wires(segments, port_points, make_id)
    for pair in pairs:
        out = _splice_between(out, pair)
    return out
