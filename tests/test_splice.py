"""Tests for auto-splicing of two-port components."""

from schematic_mcp.components import ComponentCatalog
from schematic_mcp.models import ComponentInstance, Point, WireSegment
from schematic_mcp.splice import splice_components


class FixedPorts:
    """Port locator returning hard-coded positions per component id."""

    def __init__(self, ports: dict[str, list[Point]]) -> None:
        self.ports = ports

    def port_world_positions(self, inst: ComponentInstance) -> list[Point]:
        return self.ports[inst.id]


def _seg(ax: float, ay: float, bx: float, by: float) -> WireSegment:
    return WireSegment("in", Point(ax, ay), Point(bx, by))


def _inst(cid: str) -> ComponentInstance:
    return ComponentInstance(id=cid, type_id="opaque", pos=Point(0, 0))


def _geometry(wires: list[WireSegment]) -> set[tuple]:
    return {w.key() for w in wires}


def test_full_splice_removes_span() -> None:
    """A wire exactly between the ports disappears."""
    ports = FixedPorts({"r1": [Point(0, 0), Point(100, 0)]})
    out = splice_components([_seg(0, 0, 100, 0)], [_inst("r1")], ports)
    assert out == []


def test_splice_aborts_on_t_junction() -> None:
    """A branch joining between the ports keeps the span."""
    ports = FixedPorts({"r1": [Point(0, 0), Point(100, 0)]})
    out = splice_components(
        [_seg(0, 0, 100, 0), _seg(50, 0, 50, 50)], [_inst("r1")], ports,
    )
    assert _geometry(out) == {
        ("h", 0, 0, 50), ("h", 0, 50, 100), ("v", 50, 0, 50),
    }


def test_splice_keeps_wire_outside_ports() -> None:
    """Only the span between the ports is removed."""
    ports = FixedPorts({"r1": [Point(100, 0), Point(200, 0)]})
    out = splice_components([_seg(0, 0, 300, 0)], [_inst("r1")], ports)
    assert _geometry(out) == {("h", 0, 0, 100), ("h", 0, 200, 300)}


def test_vertical_port_pair() -> None:
    """Vertical port pairs splice vertical runs."""
    ports = FixedPorts({"r1": [Point(0, 150), Point(0, 0)]})
    out = splice_components(
        [_seg(0, -50, 0, 200), _seg(0, -50, 100, -50)], [_inst("r1")], ports,
    )
    assert _geometry(out) == {
        ("v", 0, -50, 0), ("v", 0, 150, 200), ("h", -50, 0, 100),
    }


def test_unaligned_ports_only_split() -> None:
    """Unaligned ports are junctions but never splice."""
    ports = FixedPorts({"x1": [Point(50, 0), Point(100, 50)]})
    out = splice_components([_seg(0, 0, 100, 0)], [_inst("x1")], ports)
    assert _geometry(out) == {("h", 0, 0, 50), ("h", 0, 50, 100)}


def test_components_without_two_ports_are_skipped() -> None:
    """Components without exactly two ports are ignored."""
    ports = FixedPorts({
        "one": [Point(50, 0)],
        "three": [Point(10, 0), Point(20, 0), Point(30, 0)],
        "none": [],
    })
    out = splice_components(
        [_seg(0, 0, 100, 0)],
        [_inst("one"), _inst("three"), _inst("none")],
        ports,
    )
    # Not even used as junctions
    assert _geometry(out) == {("h", 0, 0, 100)}


def test_dangling_end_inside_span_aborts_splice() -> None:
    ports = FixedPorts({"r1": [Point(0, 0), Point(100, 0)]})
    out = splice_components([_seg(-100, 0, 50, 0)], [_inst("r1")], ports)
    # The free end at (50,0) sits strictly between the ports
    assert _geometry(out) == {("h", 0, -100, 0), ("h", 0, 0, 50)}


def test_two_components_on_one_line() -> None:
    """Each component on a shared line splices its own span."""
    ports = FixedPorts({
        "r1": [Point(0, 0), Point(100, 0)],
        "r2": [Point(200, 0), Point(300, 0)],
    })
    out = splice_components(
        [_seg(-50, 0, 350, 0)], [_inst("r1"), _inst("r2")], ports,
    )
    assert _geometry(out) == {
        ("h", 0, -50, 0), ("h", 0, 100, 200), ("h", 0, 300, 350),
    }


def test_empty_wires() -> None:
    ports = FixedPorts({"r1": [Point(0, 0), Point(100, 0)]})
    assert splice_components([], [_inst("r1")], ports) == []


def test_with_component_catalog() -> None:
    catalog = ComponentCatalog()
    resistor = ComponentInstance(id="r1", type_id="resistor", pos=Point(200, 100))
    out = splice_components(
        [_seg(0, 100, 400, 100)], [resistor], catalog,
    )
    assert _geometry(out) == {("h", 100, 0, 125), ("h", 100, 275, 400)}


def test_rotated_component_splices_vertical_wire() -> None:
    """A quarter-turned resistor splices a vertical wire."""
    catalog = ComponentCatalog()
    resistor = ComponentInstance(id="r1", type_id="resistor", pos=Point(100, 200), rotation=1)
    out = splice_components(
        [_seg(100, 0, 100, 400)], [resistor], catalog,
    )
    assert _geometry(out) == {("v", 100, 0, 125), ("v", 100, 275, 400)}
