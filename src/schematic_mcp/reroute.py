"""
Move-and-reroute sessions.

While a component is being dragged, the wire segments touching its ports
are detached from the canonical wire list and replaced by a live preview
routed from each wire's fixed end to the port's moving position. The
preview is committed back into canonical wires when the drag session ends
or when another component takes ownership.

States: Idle -> Attached -> Idle. There is no cancel: every attached
session commits, even after a zero-distance drag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from schematic_mcp.components import ComponentCatalog, PortLocator
from schematic_mcp.geometry import Leg, route_from_anchor
from schematic_mcp.models import (
    Axis,
    CellBounds,
    ComponentInstance,
    Point,
    Schematic,
    WireSegment,
    snap_point,
)
from schematic_mcp.splice import splice_components

logger = logging.getLogger("schematic-mcp.reroute")


@dataclass(frozen=True)
class DragAttachment:
    """One severed wire end captured when a reroute session begins."""
    fixed: Point          # the end that stays put
    incoming_axis: Axis   # orientation of the severed segment
    port_offset: Point    # port position minus component position at capture

    def to_dict(self) -> dict[str, object]:
        return {
            "fixed": self.fixed.to_dict(),
            "incoming_axis": self.incoming_axis.value,
            "port_offset": self.port_offset.to_dict(),
        }


@dataclass
class RerouteSession:
    owner_id: str
    attachments: list[DragAttachment] = field(default_factory=list)
    preview: list[Leg] = field(default_factory=list)


class RerouteManager:
    """Owns the (at most one) active reroute session of a schematic.

    All mutation goes through :meth:`begin_reroute`, :meth:`update_reroute`
    and :meth:`commit_reroute`; :meth:`discard_for` is the teardown path
    used when the owning component is deleted.
    """

    def __init__(
        self,
        schematic: Schematic,
        ports: Optional[PortLocator] = None,
        grid_size: int = 25,
        canvas: Optional[CellBounds] = None,
        make_id: Optional[Callable[[], str]] = None,
    ) -> None:
        self.schematic = schematic
        self.ports = ports or ComponentCatalog()
        self.grid_size = grid_size
        self.canvas = canvas
        self.make_id = make_id or (lambda: schematic.next_id("w"))
        self._session: Optional[RerouteSession] = None

    # ----- read-only views -----

    @property
    def owner_id(self) -> Optional[str]:
        return self._session.owner_id if self._session else None

    @property
    def is_attached(self) -> bool:
        return self._session is not None

    @property
    def attachments(self) -> list[DragAttachment]:
        return list(self._session.attachments) if self._session else []

    @property
    def preview(self) -> list[Leg]:
        return list(self._session.preview) if self._session else []

    # ----- session protocol -----

    def begin_reroute(self, symbol_id: str) -> None:
        """Detach the wires touching *symbol_id*'s ports and start a preview.

        No-op when the symbol already owns the session or does not exist.
        A session owned by another symbol is committed first.
        """
        if self._session and self._session.owner_id == symbol_id:
            return
        inst = self.schematic.find_component(symbol_id)
        if inst is None:
            return
        if self._session is not None:
            self.commit_reroute()

        attachments: list[DragAttachment] = []
        for port in self.ports.port_world_positions(inst):
            kept: list[WireSegment] = []
            for w in self.schematic.wires:
                if not w.has_endpoint(port):
                    kept.append(w)
                    continue
                fixed = w.b if w.a == port else w.a
                attachments.append(
                    DragAttachment(
                        fixed=fixed,
                        incoming_axis=w.axis or Axis.H,
                        port_offset=port - inst.pos,
                    )
                )
            self.schematic.wires = kept

        self._session = RerouteSession(owner_id=symbol_id, attachments=attachments)
        self._rebuild_preview(inst)
        logger.debug(
            "Reroute begun for %s with %d attachment(s)", symbol_id, len(attachments)
        )

    def update_reroute(self, candidate: Point) -> bool:
        """Move the owning symbol to *candidate* and regenerate the preview.

        The candidate is grid-snapped first. Returns False (no state
        change) if the snapped position falls outside the canvas or there
        is nothing to move.
        """
        if self._session is None:
            return False
        inst = self.schematic.find_component(self._session.owner_id)
        if inst is None:
            self._teardown("owner deleted during drag")
            return False

        snapped = snap_point(candidate, self.grid_size)
        if self.canvas is not None and not self.canvas.contains_point(snapped.x, snapped.y):
            return False

        inst.pos = snapped
        self._rebuild_preview(inst)
        return True

    def commit_reroute(self) -> None:
        """Turn the preview back into canonical wires and return to Idle."""
        session = self._session
        if session is None:
            return
        if self.schematic.find_component(session.owner_id) is None:
            self._teardown("owner deleted before commit")
            return

        for a, b in session.preview:
            if a == b:
                continue
            self.schematic.wires.append(WireSegment(id=self.make_id(), a=a, b=b))

        self.schematic.wires = splice_components(
            self.schematic.wires,
            self.schematic.components,
            self.ports,
            self.make_id,
        )
        self._session = None
        logger.debug(
            "Reroute committed for %s (%d wire(s) now canonical)",
            session.owner_id, len(self.schematic.wires),
        )

    def discard_for(self, symbol_id: str) -> None:
        """Drop the session owned by *symbol_id* without reinserting wires."""
        if self._session and self._session.owner_id == symbol_id:
            self._teardown("owner deleted")

    # ----- internals -----

    def _rebuild_preview(self, inst: ComponentInstance) -> None:
        assert self._session is not None
        preview: list[Leg] = []
        for att in self._session.attachments:
            port_pos = inst.pos + att.port_offset
            preview.extend(route_from_anchor(att.fixed, port_pos, att.incoming_axis))
        self._session.preview = preview

    def _teardown(self, reason: str) -> None:
        assert self._session is not None
        logger.debug(
            "Reroute session for %s torn down (%s); %d attachment(s) dropped",
            self._session.owner_id, reason, len(self._session.attachments),
        )
        self._session = None
