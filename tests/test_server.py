"""Tests for the MCP server tools (5-tool architecture)."""

import json

from schematic_mcp.server import (
    _schematics,
    agent_guide,
    component,
    component_catalog,
    drag,
    inspect,
    schematic,
    wire,
)


def setup_function() -> None:
    """Clear schematics between tests."""
    _schematics.clear()


def _series_circuit(name: str = "t") -> str:
    """A resistor at (300, 200) with a straight wire drawn through it."""
    schematic(action="create", name=name)
    placed = json.loads(component(action="place", name=name, type_id="resistor", x=300, y=200))
    wire(action="draw", name=name, points=[{"x": 100, "y": 200}, {"x": 500, "y": 200}])
    return placed["id"]


def _keys(wires: list[dict]) -> set[tuple]:
    keys = set()
    for w in wires:
        a, b = w["a"], w["b"]
        if a["x"] == b["x"]:
            keys.add(("v", a["x"], min(a["y"], b["y"]), max(a["y"], b["y"])))
        else:
            keys.add(("h", a["y"], min(a["x"], b["x"]), max(a["x"], b["x"])))
    return keys


def test_create_list_and_state() -> None:
    """Create a schematic, then list it and read its state."""
    result = schematic(action="create", name="demo", grid_size=20, width=600, height=400)
    assert "created" in result

    listing = json.loads(schematic(action="list"))
    assert listing == [{"name": "demo", "components": 0, "wires": 0}]

    state = json.loads(schematic(action="state", name="demo"))
    assert state["grid_size"] == 20
    assert state["canvas"]["width"] == 600
    assert state["reroute_owner"] is None


def test_place_reports_ports() -> None:
    """Placement returns the snapped position and named port positions."""
    schematic(action="create", name="p")
    placed = json.loads(component(action="place", name="p", type_id="battery", x=212, y=190))
    assert placed["pos"] == {"x": 200, "y": 200}
    assert placed["ports"] == {"+": {"x": 125, "y": 200}, "-": {"x": 275, "y": 200}}


def test_place_rotated() -> None:
    """Rotation is given in degrees and turns the ports."""
    schematic(action="create", name="p")
    placed = json.loads(component(
        action="place", name="p", type_id="resistor", x=300, y=300, rotation=90,
    ))
    assert placed["ports"]["A"] == {"x": 300, "y": 225}
    comps = json.loads(inspect(action="components", name="p"))
    assert comps[0]["rotation"] == 90


def test_draw_wire_returns_canonical_list() -> None:
    """Drawing returns the canonical wire list."""
    schematic(action="create", name="w")
    wires = json.loads(wire(action="draw", name="w", points=[
        {"x": 0, "y": 0}, {"x": 100, "y": 100},
    ]))
    assert _keys(wires) == {("h", 0, 0, 100), ("v", 100, 0, 100)}


def test_draw_through_component_splices() -> None:
    """A wire drawn straight through a component is spliced."""
    _series_circuit()
    wires = json.loads(inspect(action="wires", name="t"))
    assert _keys(wires) == {("h", 200, 100, 225), ("h", 200, 375, 500)}


def test_add_segments_merges() -> None:
    """Raw overlapping segments merge into one run."""
    schematic(action="create", name="a")
    wires = json.loads(wire(action="add", name="a", segments=[
        {"a": {"x": 0, "y": 0}, "b": {"x": 50, "y": 0}},
        {"a": {"x": 100, "y": 0}, "b": {"x": 25, "y": 0}},
    ]))
    assert _keys(wires) == {("h", 0, 0, 100)}


def test_delete_wire_by_current_id() -> None:
    """Wire ids are single-use: they change after every edit."""
    schematic(action="create", name="d")
    wires = json.loads(wire(action="draw", name="d", points=[
        {"x": 0, "y": 0}, {"x": 100, "y": 100},
    ]))
    remaining = json.loads(wire(action="delete", name="d", wire_id=wires[0]["id"]))
    assert len(remaining) == 1
    result = wire(action="delete", name="d", wire_id=wires[0]["id"])
    assert "not found" in result


def test_drag_session_round_trip() -> None:
    """Begin, move away and back, commit: the wires are unchanged."""
    cid = _series_circuit()
    before = _keys(json.loads(inspect(action="wires", name="t")))

    status = json.loads(drag(action="begin", name="t", component_id=cid))
    assert status["reroute_owner"] == cid
    assert status["wire_count"] == 0
    assert len(status["attachments"]) == 2

    status = json.loads(drag(action="move", name="t", x=300, y=300))
    assert len(status["preview"]) == 4

    drag(action="move", name="t", x=300, y=200)
    status = json.loads(drag(action="commit", name="t"))
    assert status["reroute_owner"] is None
    assert _keys(json.loads(inspect(action="wires", name="t"))) == before


def test_drag_commit_keeps_moved_route() -> None:
    """The committed wires follow the previewed route."""
    cid = _series_circuit()
    drag(action="begin", name="t", component_id=cid)
    drag(action="move", name="t", x=300, y=300)
    preview = json.loads(inspect(action="preview", name="t"))
    assert {"a": {"x": 100, "y": 200}, "b": {"x": 225, "y": 200}} in preview

    drag(action="commit", name="t")
    assert _keys(json.loads(inspect(action="wires", name="t"))) == {
        ("h", 200, 100, 225), ("v", 225, 200, 300),
        ("h", 200, 375, 500), ("v", 375, 200, 300),
    }


def test_pointer_drag() -> None:
    """A pointer drag keeps the grab offset; end keeps the session."""
    cid = _series_circuit()
    status = json.loads(drag(action="start", name="t", component_id=cid, x=310, y=205))
    assert status["dragging"] == cid

    drag(action="move", name="t", x=410, y=205)
    status = json.loads(drag(action="end", name="t"))
    assert status["dragging"] is None
    assert status["reroute_owner"] == cid

    comps = json.loads(inspect(action="components", name="t"))
    assert comps[0]["pos"] == {"x": 400, "y": 200}


def test_move_outside_canvas_rejected() -> None:
    """Moves outside the canvas are rejected without side effects."""
    cid = _series_circuit()
    drag(action="begin", name="t", component_id=cid)
    result = drag(action="move", name="t", x=5000, y=200)
    assert "rejected" in result
    comps = json.loads(inspect(action="components", name="t"))
    assert comps[0]["pos"] == {"x": 300, "y": 200}


def test_move_without_session_rejected() -> None:
    """Moving with no active session is rejected."""
    _series_circuit()
    assert "rejected" in drag(action="move", name="t", x=100, y=100)


def test_select_begins_and_empty_click_commits() -> None:
    """Clicking a component begins a session; empty space commits it."""
    cid = _series_circuit()
    result = json.loads(drag(action="select", name="t", x=300, y=200))
    assert result["selection"] == {"kind": "component", "id": cid}
    assert result["reroute_owner"] == cid

    result = json.loads(drag(action="select", name="t", x=1000, y=700))
    assert result["selection"] is None
    assert result["reroute_owner"] is None
    assert len(json.loads(inspect(action="wires", name="t"))) == 2


def test_delete_component_mid_drag() -> None:
    """Deleting the dragged component drops its detached wires."""
    cid = _series_circuit()
    drag(action="begin", name="t", component_id=cid)
    assert "deleted" in component(action="delete", name="t", component_id=cid)
    assert json.loads(inspect(action="wires", name="t")) == []
    status = json.loads(drag(action="status", name="t"))
    assert status["reroute_owner"] is None


def test_delete_unknown_component() -> None:
    """Deleting a missing component is a no-op."""
    _series_circuit()
    result = component(action="delete", name="t", component_id="c404")
    assert "not found" in result


def test_rotate_component() -> None:
    """Rotation turns the ports a quarter turn clockwise."""
    cid = _series_circuit()
    result = component(action="rotate", name="t", component_id=cid)
    assert "90°" in result
    ports = json.loads(inspect(action="ports", name="t"))
    assert ports[cid] == [{"x": 300, "y": 125}, {"x": 300, "y": 275}]


def test_inspect_hit() -> None:
    """Hit testing reports components, wires and misses."""
    cid = _series_circuit()
    assert json.loads(inspect(action="hit", name="t", x=300, y=200)) == {
        "kind": "component", "id": cid,
    }
    assert json.loads(inspect(action="hit", name="t", x=150, y=203))["kind"] == "wire"
    assert json.loads(inspect(action="hit", name="t", x=700, y=700)) is None


def test_clear() -> None:
    """Clearing removes all components and wires."""
    _series_circuit()
    assert "cleared" in schematic(action="clear", name="t")
    state = json.loads(schematic(action="state", name="t"))
    assert state["components"] == []
    assert state["wires"] == []


def test_component_types() -> None:
    """The types action lists the catalogue."""
    types = json.loads(component(action="types"))
    by_id = {t["type_id"]: t for t in types}
    assert by_id["switch"]["port_offset"] == 50
    assert by_id["battery"]["ports"] == ["+", "-"]


def test_resources() -> None:
    """Both resources render."""
    assert "resistor" in component_catalog()
    assert "drag(action='begin'" in agent_guide()


def test_error_handling() -> None:
    """Unknown schematics and empty names produce errors."""
    result = wire(action="normalize", name="nonexistent")
    assert "not found" in result
    result = drag(action="status", name="")
    assert "Error" in result


def test_drawing_ends_pointer_drag() -> None:
    """Drawing a wire mid-drag commits the session and clears the drag."""
    cid = _series_circuit()
    drag(action="start", name="t", component_id=cid, x=300, y=200)
    drag(action="move", name="t", x=300, y=300)
    wire(action="draw", name="t", points=[{"x": 600, "y": 600}, {"x": 700, "y": 600}])

    status = json.loads(drag(action="status", name="t"))
    assert status["reroute_owner"] is None
    assert status["dragging"] is None
    assert status["wire_count"] == 5
