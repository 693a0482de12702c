"""
Schematic MCP Server - edit Manhattan-wired circuit schematics via Model
Context Protocol.

Exposes 5 tools that let an LLM agent place components, draw wires and
drag components around while their wires follow.

Tools:
  1. schematic - lifecycle: create, list, state, clear
  2. wire      - wiring:    draw chains, add raw segments, delete, normalize
  3. component - symbols:   place, rotate, delete, list types
  4. drag      - reroute:   select, begin, start, move, end, commit, status
  5. inspect   - read-only: wires, components, preview, ports, hit
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any

from mcp.server.fastmcp import FastMCP

from schematic_mcp.components import list_component_types
from schematic_mcp.editor import SchematicEditor
from schematic_mcp.hit_test import hit_test
from schematic_mcp.models import EditorConfig, Point
from schematic_mcp.normalize import GeometryError
from schematic_mcp.validation import (
    ValidationError,
    validate_action,
    validate_canvas_extent,
    validate_grid_size,
    validate_list,
    validate_non_empty_string,
    validate_number,
    validate_points,
    validate_rotation,
    validate_segment_dict,
    _COMPONENT_ACTIONS,
    _DRAG_ACTIONS,
    _INSPECT_ACTIONS,
    _SCHEMATIC_ACTIONS,
    _WIRE_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging - suppress routine FastMCP INFO messages that VS Code shows
# as warnings (they go to stderr which VS Code labels [warning]).
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("schematic-mcp")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "schematic-mcp",
    instructions=(
        "MCP server for editing circuit schematics with Manhattan wiring.\n\n"
        "=== ONLY 5 TOOLS - use the 'action' parameter to pick the operation ===\n\n"
        "1. schematic(action, ...) - lifecycle: create, list, state, clear.\n"
        "2. wire(action, ...) - wiring: draw, add, delete, normalize.\n"
        "3. component(action, ...) - symbols: place, rotate, delete, types.\n"
        "4. drag(action, ...) - move a component with its wires following:\n"
        "   select, begin, start, move, end, commit, status.\n"
        "5. inspect(action, ...) - read-only: wires, components, preview,\n"
        "   ports, hit.\n\n"
        "=== RULES ===\n"
        "- ALL coordinates are snapped to the grid (25 units by default).\n"
        "- Wires are horizontal/vertical only; diagonals are rejected.\n"
        "- Wire ids change after EVERY edit. Re-read them before deleting.\n"
        "- A dragged component keeps its wires attached until you commit\n"
        "  (or select something else, which commits automatically).\n"
        "- Read the guide at schematic://guide/agent for recipes.\n"
    ),
)

# In-memory editor registry: name -> SchematicEditor
# Guarded by _schematics_lock for thread-safety.
_schematics: dict[str, SchematicEditor] = {}
_schematics_lock = threading.Lock()


# ===================================================================
# RESOURCES
# ===================================================================

@mcp.resource("schematic://components")
def component_catalog() -> str:
    """Return all available component types as a reference."""
    entries: list[str] = []
    for t in list_component_types():
        params = ", ".join(f"{k}={v}" for k, v in t.default_params.items()) or "-"
        entries.append(
            f"  {t.type_id}: {t.display_name} (ports {t.port_names[0]}/{t.port_names[1]} "
            f"at ±{t.port_offset}, defaults {params})"
        )
    return "Available component types:\n" + "\n".join(entries)


@mcp.resource("schematic://guide/agent")
def agent_guide() -> str:
    """Guide for AI agents on how to use the schematic MCP tools."""
    return """# Schematic MCP - Agent Guide

## Quick recipe: a resistor in series with a battery
```
1. schematic(action='create', name='demo')
2. component(action='place', name='demo', type_id='battery', x=200, y=200)
3. component(action='place', name='demo', type_id='resistor', x=600, y=200)
4. wire(action='draw', name='demo', points=[{"x": 275, "y": 200}, {"x": 525, "y": 200}])
```

## Moving a component with its wires attached
```
drag(action='begin', name='demo', component_id='c2')
drag(action='move', name='demo', x=600, y=350)   # repeat as needed
drag(action='commit', name='demo')
```
While the session is active, inspect(action='preview') shows the
provisional route. Wires leave their fixed end along the direction they
originally had, so they look pulled rather than re-elbowed.

## Things to know
- Ports of two-terminal parts sit ±75 (switch/varResistor: ±50) from the
  centre along the component's axis; rotation turns them by 90°.
- A straight wire running exactly between a component's two ports is
  removed automatically (the component body replaces it), unless another
  wire joins that span.
- Deleting a component during a drag drops its detached wires.
"""


# ===================================================================
# Internal helpers
# ===================================================================

def _get_editor(name: str) -> SchematicEditor | None:
    with _schematics_lock:
        return _schematics.get(name)


def _legs_to_json(legs: list[tuple[Point, Point]]) -> list[dict[str, Any]]:
    return [{"a": a.to_dict(), "b": b.to_dict()} for a, b in legs]


# ===================================================================
# TOOL 1: schematic - lifecycle
# ===================================================================

@mcp.tool()
def schematic(
    action: str,
    name: str = "",
    grid_size: int = 25,
    width: float = 1200,
    height: float = 800,
) -> str:
    """Schematic lifecycle management.

    Actions:
      create - Create a new empty schematic. Params: name, grid_size, width, height.
      list   - List all in-memory schematics. No params needed.
      state  - Full JSON state (components, wires, selection, session). Params: name.
      clear  - Remove all components and wires. Params: name.

    Args:
        action: One of: create, list, state, clear.
        name: Schematic name (key in memory).
        grid_size: Grid spacing in world units (create only).
        width: Canvas width (create only).
        height: Canvas height (create only).

    Returns:
        Result string or JSON depending on action.
    """
    try:
        action = validate_action(action, "schematic", _SCHEMATIC_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "list":
        with _schematics_lock:
            items = list(_schematics.items())
        result = [
            {"name": n, "components": len(ed.schematic.components),
             "wires": len(ed.schematic.wires)}
            for n, ed in items
        ]
        return json.dumps(result, indent=2)

    try:
        name = validate_non_empty_string(name, "name")
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "create":
        try:
            validate_grid_size(grid_size)
            validate_canvas_extent(width, "width")
            validate_canvas_extent(height, "height")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        config = EditorConfig(grid_size=grid_size, canvas_width=width, canvas_height=height)
        with _schematics_lock:
            _schematics[name] = SchematicEditor(name, config)
        return f"Schematic '{name}' created ({width}x{height}, grid {grid_size})."

    ed = _get_editor(name)
    if ed is None:
        return f"Error: schematic '{name}' not found."

    if action == "state":
        return json.dumps(ed.state(), indent=2)

    elif action == "clear":
        ed.clear_selection()
        ed.schematic.components.clear()
        ed.schematic.wires.clear()
        return f"Schematic '{name}' cleared."

    else:
        return f"Error: unknown schematic action '{action}'. Use: create, list, state, clear."


# ===================================================================
# TOOL 2: wire - wiring
# ===================================================================

@mcp.tool()
def wire(
    action: str,
    name: str = "",
    points: list[dict[str, Any]] | None = None,
    segments: list[dict[str, Any]] | None = None,
    wire_id: str = "",
) -> str:
    """Wire drawing and maintenance.

    Actions:
      draw      - Draw a wire chain through points; consecutive points are joined
                  with a horizontal-first elbow. Params: name, points (>= 2).
      add       - Add raw axis-aligned segments. Params: name,
                  segments=[{"a": {"x":..,"y":..}, "b": {"x":..,"y":..}}].
      delete    - Delete one wire segment by id. Params: name, wire_id.
      normalize - Re-canonicalize all wires (merge, split, splice). Params: name.

    Wire ids are regenerated after every wire-changing action.

    Returns:
        JSON with the resulting wire list, or an error string.
    """
    try:
        action = validate_action(action, "wire", _WIRE_ACTIONS)
        name = validate_non_empty_string(name, "name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    ed = _get_editor(name)
    if ed is None:
        return f"Error: schematic '{name}' not found."

    if action == "draw":
        try:
            pts = validate_points(points, "points", min_length=2)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        ed.draw_wire(pts)

    elif action == "add":
        try:
            raw = validate_list(segments, "segments", min_length=1)
            pairs = [validate_segment_dict(s, i) for i, s in enumerate(raw)]
        except ValidationError as exc:
            return f"Error: {exc.message}"
        try:
            ed.add_segments(pairs)
        except GeometryError as exc:
            logger.warning("Rejected diagonal segment for '%s': %s", name, exc)
            return f"Error: {exc}"

    elif action == "delete":
        try:
            wire_id = validate_non_empty_string(wire_id, "wire_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        if not ed.delete_wire(wire_id):
            return f"Wire '{wire_id}' not found; nothing deleted."

    elif action == "normalize":
        ed.normalize()

    else:
        return f"Error: unknown wire action '{action}'. Use: draw, add, delete, normalize."

    return json.dumps([w.to_dict() for w in ed.schematic.wires], indent=2)


# ===================================================================
# TOOL 3: component - symbols
# ===================================================================

@mcp.tool()
def component(
    action: str,
    name: str = "",
    type_id: str = "",
    x: float = 0,
    y: float = 0,
    rotation: int = 0,
    component_id: str = "",
) -> str:
    """Component placement and editing.

    Actions:
      place  - Place a component. Params: name, type_id, x, y, rotation (0/90/180/270).
               Existing wires through the new ports are cut (and spliced) at once.
      rotate - Rotate a component 90° clockwise. Params: name, component_id.
      delete - Delete a component (drops an active drag session on it).
               Params: name, component_id.
      types  - List the available component types. No params needed.

    Returns:
        JSON or a result string.
    """
    try:
        action = validate_action(action, "component", _COMPONENT_ACTIONS)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "types":
        return json.dumps(
            [{"type_id": t.type_id, "name": t.display_name,
              "ports": list(t.port_names), "port_offset": t.port_offset,
              "params": t.default_params}
             for t in list_component_types()],
            indent=2,
        )

    try:
        name = validate_non_empty_string(name, "name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    ed = _get_editor(name)
    if ed is None:
        return f"Error: schematic '{name}' not found."

    if action == "place":
        try:
            type_id = validate_non_empty_string(type_id, "type_id")
            validate_number(x, "x")
            validate_number(y, "y")
            turns = validate_rotation(rotation)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        try:
            cid = ed.place_component(type_id, x, y, turns)
        except KeyError as exc:
            return f"Error: {exc.args[0]}"
        except ValueError as exc:
            return f"Error: {exc}"
        inst = ed.schematic.find_component(cid)
        ports = ed.catalog.named_port_positions(inst)
        return json.dumps({
            "id": cid,
            "pos": inst.pos.to_dict(),
            "ports": {pname: pos.to_dict() for pname, pos in ports},
        })

    try:
        component_id = validate_non_empty_string(component_id, "component_id")
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "rotate":
        if not ed.rotate_component(component_id):
            return f"Component '{component_id}' not found; nothing rotated."
        inst = ed.schematic.find_component(component_id)
        return f"Component '{component_id}' rotated to {inst.rotation * 90}°."

    elif action == "delete":
        if not ed.delete_component(component_id):
            return f"Component '{component_id}' not found; nothing deleted."
        return f"Component '{component_id}' deleted."

    else:
        return f"Error: unknown component action '{action}'. Use: place, rotate, delete, types."


# ===================================================================
# TOOL 4: drag - move and reroute
# ===================================================================

@mcp.tool()
def drag(
    action: str,
    name: str = "",
    component_id: str = "",
    x: float = 0,
    y: float = 0,
) -> str:
    """Move a component while its wires follow it.

    Actions:
      select - Click at (x, y): selects what is there. Clicking a component begins
               its reroute session; clicking elsewhere commits the active one.
      begin  - Begin a reroute session for component_id (commits any other).
      start  - Start a pointer drag on component_id with the pointer at (x, y).
      move   - With a pointer drag: move the pointer to (x, y). Without one: move
               the session owner's centre to (x, y). Positions are grid-snapped;
               positions outside the canvas are rejected.
      end    - Release the pointer (the session stays active).
      commit - Commit the preview back into canonical wires.
      status - Report the active session, attachments and preview.

    Returns:
        JSON status or an error string.
    """
    try:
        action = validate_action(action, "drag", _DRAG_ACTIONS)
        name = validate_non_empty_string(name, "name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    ed = _get_editor(name)
    if ed is None:
        return f"Error: schematic '{name}' not found."

    if action in ("select", "start", "move"):
        try:
            validate_number(x, "x")
            validate_number(y, "y")
        except ValidationError as exc:
            return f"Error: {exc.message}"

    if action == "select":
        hit = ed.select_at(x, y)
        return json.dumps({"selection": hit.to_dict() if hit else None,
                           "reroute_owner": ed.reroute.owner_id})

    elif action == "begin":
        try:
            component_id = validate_non_empty_string(component_id, "component_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        if not ed.select_component(component_id):
            return f"Component '{component_id}' not found; no session started."

    elif action == "start":
        try:
            component_id = validate_non_empty_string(component_id, "component_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        if not ed.start_drag(component_id, Point(x, y)):
            return f"Component '{component_id}' not found; no drag started."

    elif action == "move":
        if ed.move_drag is not None:
            moved = ed.drag_to(Point(x, y))
        else:
            moved = ed.reroute.update_reroute(Point(x, y))
        if not moved:
            return "Move rejected (no active session or position outside the canvas)."

    elif action == "end":
        ed.end_drag()

    elif action == "commit":
        ed.clear_selection()

    elif action == "status":
        pass

    else:
        return (
            f"Error: unknown drag action '{action}'. "
            "Use: select, begin, start, move, end, commit, status."
        )

    return json.dumps({
        "reroute_owner": ed.reroute.owner_id,
        "dragging": ed.move_drag.component_id if ed.move_drag else None,
        "attachments": [a.to_dict() for a in ed.reroute.attachments],
        "preview": _legs_to_json(ed.reroute.preview),
        "wire_count": len(ed.schematic.wires),
    }, indent=2)


# ===================================================================
# TOOL 5: inspect - read-only queries
# ===================================================================

@mcp.tool()
def inspect(
    action: str,
    name: str = "",
    x: float = 0,
    y: float = 0,
) -> str:
    """Read-only inspection of schematics.

    Actions:
      wires      - Canonical wire segments.
      components - Placed components with port world positions.
      preview    - Provisional route of the active reroute session.
      ports      - All port world positions, keyed by component id.
      hit        - What lies under (x, y) (no selection change).

    Returns:
        JSON data.
    """
    try:
        action = validate_action(action, "inspect", _INSPECT_ACTIONS)
        name = validate_non_empty_string(name, "name")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    ed = _get_editor(name)
    if ed is None:
        return f"Error: schematic '{name}' not found."

    if action == "wires":
        return json.dumps([w.to_dict() for w in ed.schematic.wires], indent=2)

    elif action == "components":
        items: list[dict[str, Any]] = []
        for inst in ed.schematic.components:
            info = inst.to_dict()
            info["ports"] = {
                pname: pos.to_dict()
                for pname, pos in ed.catalog.named_port_positions(inst)
            }
            items.append(info)
        return json.dumps(items, indent=2)

    elif action == "preview":
        return json.dumps(_legs_to_json(ed.reroute.preview), indent=2)

    elif action == "ports":
        return json.dumps({
            inst.id: [p.to_dict() for p in ed.catalog.port_world_positions(inst)]
            for inst in ed.schematic.components
        }, indent=2)

    elif action == "hit":
        try:
            validate_number(x, "x")
            validate_number(y, "y")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        hit = hit_test(ed.schematic, ed.catalog, Point(x, y), ed.config.wire_hit_tolerance)
        return json.dumps(hit.to_dict() if hit else None)

    else:
        return f"Error: unknown inspect action '{action}'. Use: wires, components, preview, ports, hit."


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    logger.info("Starting schematic-mcp server")
    mcp.run()


if __name__ == "__main__":
    main()
