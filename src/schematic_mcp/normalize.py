"""
Wire canonicalization.

User actions leave the wire list full of overlaps, duplicates and long
runs. ``normalize_wires`` rewrites it into the unique minimal form:

1. Orient each segment and drop zero-length ones
2. Merge collinear overlaps / end-to-end touches into maximal runs
3. Collect junctions (run ends, extra points, crossings, T-junctions)
4. Split every run at the junctions lying on it
5. Dedupe by geometry and hand out fresh ids
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Iterable

from schematic_mcp.models import Axis, Point, WireSegment, _uid


class GeometryError(ValueError):
    """Raised when a segment is not axis-aligned (a caller contract violation)."""

    def __init__(self, a: Point, b: Point) -> None:
        self.a = a
        self.b = b
        super().__init__(
            f"Non-Manhattan segment: ({a.x},{a.y}) -> ({b.x},{b.y})"
        )


@dataclass(frozen=True)
class _Run:
    """Oriented axis-aligned span: a <= b along the varying coordinate."""
    a: Point
    b: Point
    axis: Axis

    @property
    def const(self) -> float:
        return self.a.y if self.axis == Axis.H else self.a.x

    @property
    def lo(self) -> float:
        return self.a.x if self.axis == Axis.H else self.a.y

    @property
    def hi(self) -> float:
        return self.b.x if self.axis == Axis.H else self.b.y

    def contains(self, p: Point) -> bool:
        """Inclusive containment of *p* in this span."""
        if self.axis == Axis.H:
            return p.y == self.a.y and self.a.x <= p.x <= self.b.x
        return p.x == self.a.x and self.a.y <= p.y <= self.b.y


def _orient(a: Point, b: Point) -> _Run | None:
    """Validate and orient a pair; None for zero-length pairs."""
    if a.x != b.x and a.y != b.y:
        raise GeometryError(a, b)
    if a == b:
        return None
    if a.x == b.x:
        return _Run(a, b, Axis.V) if a.y <= b.y else _Run(b, a, Axis.V)
    return _Run(a, b, Axis.H) if a.x <= b.x else _Run(b, a, Axis.H)


def _make_run(axis: Axis, const: float, lo: float, hi: float) -> _Run:
    if axis == Axis.H:
        return _Run(Point(lo, const), Point(hi, const), Axis.H)
    return _Run(Point(const, lo), Point(const, hi), Axis.V)


def _merge_collinear(segs: list[_Run]) -> list[_Run]:
    """Merge overlapping / touching intervals that share a line.

    Horizontals are grouped by y, verticals by x. Within a group the
    classic sorted interval sweep applies.
    """
    groups: dict[tuple[Axis, float], list[_Run]] = defaultdict(list)
    for s in segs:
        groups[(s.axis, s.const)].append(s)

    runs: list[_Run] = []
    for (axis, const), group in groups.items():
        group.sort(key=lambda s: (s.lo, s.hi))
        cur_lo, cur_hi = group[0].lo, group[0].hi
        for s in group[1:]:
            if s.lo <= cur_hi:
                # Overlap or touch: extend
                cur_hi = max(cur_hi, s.hi)
                continue
            runs.append(_make_run(axis, const, cur_lo, cur_hi))
            cur_lo, cur_hi = s.lo, s.hi
        runs.append(_make_run(axis, const, cur_lo, cur_hi))
    return runs


def _collect_junctions(runs: list[_Run], extra: Iterable[Point]) -> set[Point]:
    """Run endpoints, extra points and perpendicular crossings."""
    junctions: set[Point] = set()
    for r in runs:
        junctions.add(r.a)
        junctions.add(r.b)
    junctions.update(extra)

    horizontals = [r for r in runs if r.axis == Axis.H]
    verticals = [r for r in runs if r.axis == Axis.V]
    for v in verticals:
        ix = v.a.x
        for h in horizontals:
            iy = h.a.y
            if h.a.x <= ix <= h.b.x and v.a.y <= iy <= v.b.y:
                junctions.add(Point(ix, iy))
    return junctions


def _cuts_per_run(runs: list[_Run], junctions: set[Point]) -> dict[_Run, list[Point]]:
    """Assign every junction to each run it lies on (ends included).

    This one containment sweep is also what turns an endpoint landing in
    the middle of another run into a T-junction. Splitting never creates
    new points, so no second pass is needed.
    """
    by_y: dict[float, list[Point]] = defaultdict(list)
    by_x: dict[float, list[Point]] = defaultdict(list)
    for p in junctions:
        by_y[p.y].append(p)
        by_x[p.x].append(p)

    cuts: dict[_Run, list[Point]] = {}
    for r in runs:
        candidates = by_y[r.a.y] if r.axis == Axis.H else by_x[r.a.x]
        on_run = [p for p in candidates if r.contains(p)]
        if r.axis == Axis.H:
            on_run.sort(key=lambda p: p.x)
        else:
            on_run.sort(key=lambda p: p.y)
        cuts[r] = on_run
    return cuts


def normalize_wires(
    segments: Iterable[WireSegment],
    extra_junction_points: Iterable[Point] = (),
    make_id: Callable[[], str] = _uid,
) -> list[WireSegment]:
    """Canonicalize a set of Manhattan wire segments.

    Args:
        segments: Input segments; ids are ignored.
        extra_junction_points: Points that must become vertices wherever
            they lie on the network (e.g. component ports).
        make_id: Id source for the output segments.

    Returns:
        The minimal segment list in which every junction on the network is
        a vertex and no two segments partially overlap. Every segment gets
        a fresh id. Running it again on its own output is a no-op up to ids.

    Raises:
        GeometryError: if any input segment is diagonal.
    """
    base: list[_Run] = []
    for w in segments:
        r = _orient(w.a, w.b)
        if r is not None:
            base.append(r)
    if not base:
        return []

    runs = _merge_collinear(base)
    junctions = _collect_junctions(runs, extra_junction_points)
    cuts = _cuts_per_run(runs, junctions)

    pieces: dict[tuple[str, float, float, float], _Run] = {}
    for r in runs:
        pts = cuts[r]
        for p, q in zip(pts, pts[1:]):
            if p == q:
                continue
            piece = _Run(p, q, r.axis)
            pieces[(r.axis.value, r.const, piece.lo, piece.hi)] = piece

    ordered = sorted(pieces.items(), key=lambda kv: kv[0])
    return [WireSegment(id=make_id(), a=r.a, b=r.b) for _, r in ordered]
