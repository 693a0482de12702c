"""
Headless editor command layer.

``SchematicEditor`` is what the outer surface (the MCP server) drives:
placing components, drawing wire chains, selecting, move-dragging,
rotating and deleting. Every command that changes wires re-canonicalizes
the wire list through the splicer before returning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from schematic_mcp.components import ComponentCatalog, get_component_type
from schematic_mcp.geometry import route_freeform
from schematic_mcp.hit_test import hit_test
from schematic_mcp.models import (
    EditorConfig,
    Point,
    Schematic,
    Selection,
    SelectionKind,
    WireSegment,
    snap_point,
)
from schematic_mcp.reroute import RerouteManager
from schematic_mcp.splice import splice_components

logger = logging.getLogger("schematic-mcp.editor")


@dataclass
class MoveDrag:
    """An in-progress pointer drag of a component."""
    component_id: str
    offset: Point  # component position minus pointer position at drag start


class SchematicEditor:
    """Editable schematic plus its reroute session and move-drag state."""

    def __init__(self, name: str = "schematic", config: Optional[EditorConfig] = None) -> None:
        self.config = config or EditorConfig()
        self.schematic = Schematic(name=name)
        self.catalog = ComponentCatalog()
        self.reroute = RerouteManager(
            self.schematic,
            self.catalog,
            grid_size=self.config.grid_size,
            canvas=self.config.canvas,
        )
        self.move_drag: Optional[MoveDrag] = None

    # ----- helpers -----

    def snap(self, p: Point) -> Point:
        return snap_point(p, self.config.grid_size)

    def _new_wire_id(self) -> str:
        return self.schematic.next_id("w")

    def normalize(self) -> int:
        """Re-canonicalize the wire list (merge, segment, splice)."""
        self.schematic.wires = splice_components(
            self.schematic.wires,
            self.schematic.components,
            self.catalog,
            self._new_wire_id,
        )
        return len(self.schematic.wires)

    # ----- placement -----

    def place_component(self, type_id: str, x: float, y: float, rotation: int = 0) -> str:
        """Place a component at the snapped position; returns its id.

        Wires already running through the new ports are cut there (and
        spliced if they span both). Raises KeyError for unknown types and
        ValueError outside the canvas.
        """
        ctype = get_component_type(type_id)
        pos = self.snap(Point(x, y))
        if not self.config.canvas.contains_point(pos.x, pos.y):
            raise ValueError(f"position ({pos.x}, {pos.y}) is outside the canvas")
        # Placing ends any selection / reroute session
        self.clear_selection()
        cid = self.schematic.add_component(
            type_id, pos, rotation=rotation, params=ctype.default_params,
        )
        self.normalize()
        return cid

    # ----- wiring -----

    def draw_wire(self, points: Iterable[Point]) -> int:
        """Draw a chain of Manhattan legs through *points* (snapped).

        Consecutive points are joined horizontal-first. Returns the number
        of canonical wires afterwards. Any selection or drag ends first.
        """
        self.clear_selection()
        snapped = [self.snap(p) for p in points]
        for a, b in zip(snapped, snapped[1:]):
            for p, q in route_freeform(a, b):
                if p == q:
                    continue
                self.schematic.wires.append(WireSegment(id=self._new_wire_id(), a=p, b=q))
        return self.normalize()

    def add_segments(self, pairs: Iterable[tuple[Point, Point]]) -> int:
        """Insert raw segments and re-canonicalize.

        A diagonal pair raises GeometryError and leaves the wires untouched.
        """
        self.clear_selection()
        previous = list(self.schematic.wires)
        self.schematic.wires.extend(
            WireSegment(id=self._new_wire_id(), a=a, b=b) for a, b in pairs
        )
        try:
            return self.normalize()
        except ValueError:
            self.schematic.wires = previous
            raise

    # ----- selection & drag -----

    def select_at(self, x: float, y: float) -> Optional[Selection]:
        """Click at a world point: select what is there.

        Clicking anything but the current reroute owner commits its
        session; clicking a component begins a session for it.
        """
        hit = hit_test(
            self.schematic, self.catalog, Point(x, y), self.config.wire_hit_tolerance,
        )
        if hit is None:
            self.clear_selection()
            return None

        owner = self.reroute.owner_id
        if owner and (hit.kind != SelectionKind.COMPONENT or hit.id != owner):
            self.reroute.commit_reroute()
            self.move_drag = None

        # The wire may have been re-identified by the commit above
        if hit.kind == SelectionKind.WIRE and self.schematic.find_wire(hit.id) is None:
            hit = hit_test(
                self.schematic, self.catalog, Point(x, y), self.config.wire_hit_tolerance,
            )

        self.schematic.selection = hit
        if hit is not None and hit.kind == SelectionKind.COMPONENT:
            self.reroute.begin_reroute(hit.id)
        return hit

    def select_component(self, component_id: str) -> bool:
        """Select a component by id and begin its reroute session."""
        if self.schematic.find_component(component_id) is None:
            return False
        self.reroute.begin_reroute(component_id)
        self.schematic.selection = Selection(SelectionKind.COMPONENT, component_id)
        return True

    def start_drag(self, component_id: str, pointer: Point) -> bool:
        inst = self.schematic.find_component(component_id)
        if inst is None:
            return False
        if self.reroute.owner_id != component_id:
            self.select_component(component_id)
        self.move_drag = MoveDrag(component_id, inst.pos - pointer)
        return True

    def drag_to(self, pointer: Point) -> bool:
        """Continue a move drag; False if rejected or nothing is dragged."""
        drag = self.move_drag
        if drag is None:
            return False
        if self.schematic.find_component(drag.component_id) is None:
            self.move_drag = None
            return False
        return self.reroute.update_reroute(pointer + drag.offset)

    def end_drag(self) -> None:
        """Release the pointer. The reroute session stays attached."""
        self.move_drag = None

    def clear_selection(self) -> None:
        self.reroute.commit_reroute()
        self.move_drag = None
        self.schematic.selection = None

    # ----- commands -----

    def rotate_selection(self) -> bool:
        sel = self.schematic.selection
        if sel is None or sel.kind != SelectionKind.COMPONENT:
            return False
        return self.rotate_component(sel.id)

    def rotate_component(self, component_id: str) -> bool:
        """Rotate a component a quarter turn clockwise about its centre."""
        inst = self.schematic.find_component(component_id)
        if inst is None:
            return False
        if self.reroute.owner_id == component_id:
            self.reroute.commit_reroute()
            self.move_drag = None
        inst.rotation = (inst.rotation + 1) % 4
        self.normalize()
        return True

    def delete_selection(self) -> bool:
        sel = self.schematic.selection
        if sel is None:
            return False
        if sel.kind == SelectionKind.COMPONENT:
            return self.delete_component(sel.id)
        return self.delete_wire(sel.id)

    def delete_component(self, component_id: str) -> bool:
        """Delete a component; its active reroute session is dropped.

        Detached wires are not reinserted as floating stubs.
        """
        self.reroute.discard_for(component_id)
        if self.move_drag and self.move_drag.component_id == component_id:
            self.move_drag = None
        removed = self.schematic.remove_component(component_id)
        if removed:
            self._drop_selection(component_id)
            logger.debug("Deleted component %s", component_id)
        return removed

    def delete_wire(self, wire_id: str) -> bool:
        removed = self.schematic.remove_wire(wire_id)
        if removed:
            self._drop_selection(wire_id)
            self.normalize()
        return removed

    def _drop_selection(self, item_id: str) -> None:
        if self.schematic.selection and self.schematic.selection.id == item_id:
            self.schematic.selection = None

    # ----- views -----

    def state(self) -> dict[str, object]:
        return {
            "name": self.schematic.name,
            "grid_size": self.config.grid_size,
            "canvas": {
                "x": self.config.canvas_x, "y": self.config.canvas_y,
                "width": self.config.canvas_width, "height": self.config.canvas_height,
            },
            "components": [c.to_dict() for c in self.schematic.components],
            "wires": [w.to_dict() for w in self.schematic.wires],
            "selection": self.schematic.selection.to_dict() if self.schematic.selection else None,
            "reroute_owner": self.reroute.owner_id,
            "dragging": self.move_drag.component_id if self.move_drag else None,
        }
