"""
Input validation for schematic MCP server tool parameters.

Provides reusable validators that produce clear error messages for all
parameters received from Copilot / LLM callers.
"""

from __future__ import annotations

from typing import Any

from schematic_mcp.models import Point


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    """Validate a numeric value and optional range."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    if min_val is not None and value < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {value}."
        )
    if max_val is not None and value > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {value}."
        )
    return value


def validate_int(
    value: Any,
    field_name: str,
    *,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    """Validate an integer value and optional range."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be an integer, got {type(value).__name__}."
        )
    if min_val is not None and value < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {value}."
        )
    if max_val is not None and value > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {value}."
        )
    return value


def validate_list(value: Any, field_name: str, *, min_length: int = 0) -> list:
    """Ensure *value* is a list with at least *min_length* items."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    if len(value) < min_length:
        raise ValidationError(
            f"'{field_name}' must have at least {min_length} item(s), got {len(value)}."
        )
    return value


# ---------------------------------------------------------------------------
# Composite / domain validators
# ---------------------------------------------------------------------------

_SCHEMATIC_ACTIONS = {"CREATE", "LIST", "STATE", "CLEAR"}
_WIRE_ACTIONS = {"DRAW", "ADD", "DELETE", "NORMALIZE"}
_COMPONENT_ACTIONS = {"PLACE", "ROTATE", "DELETE", "TYPES"}
_DRAG_ACTIONS = {"SELECT", "BEGIN", "START", "MOVE", "END", "COMMIT", "STATUS"}
_INSPECT_ACTIONS = {"WIRES", "COMPONENTS", "PREVIEW", "PORTS", "HIT"}

_VALID_ROTATIONS = {0, 90, 180, 270}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


def validate_grid_size(value: Any) -> int:
    """Validate grid size (1..100)."""
    return validate_int(value, "grid_size", min_val=1, max_val=100)


def validate_canvas_extent(value: Any, field_name: str) -> float:
    """Validate a canvas width/height (> 0)."""
    return validate_number(value, field_name, min_val=1)


def validate_rotation(value: Any) -> int:
    """Validate a rotation in degrees and return it as quarter turns."""
    if not isinstance(value, int) or isinstance(value, bool) or value not in _VALID_ROTATIONS:
        raise ValidationError(
            f"'rotation' must be one of 0, 90, 180, 270, got {value!r}."
        )
    return value // 90


def validate_point_dict(p: Any, field_name: str) -> Point:
    """Validate a {"x": .., "y": ..} dict and return a Point."""
    if not isinstance(p, dict):
        raise ValidationError(f"'{field_name}' must be a dict with 'x' and 'y'.")
    for key in ("x", "y"):
        if key not in p:
            raise ValidationError(f"'{field_name}' missing required key '{key}'.")
        if not isinstance(p[key], (int, float)) or isinstance(p[key], bool):
            raise ValidationError(f"'{field_name}': '{key}' must be a number.")
    return Point(p["x"], p["y"])


def validate_points(value: Any, field_name: str, *, min_length: int = 0) -> list[Point]:
    """Validate a list of point dicts."""
    items = validate_list(value, field_name, min_length=min_length)
    return [validate_point_dict(p, f"{field_name}[{i}]") for i, p in enumerate(items)]


def validate_segment_dict(s: Any, index: int) -> tuple[Point, Point]:
    """Validate a {"a": {x,y}, "b": {x,y}} segment dict.

    Only the shape is checked here; whether the segment is axis-aligned is
    the canonicalizer's contract.
    """
    if not isinstance(s, dict):
        raise ValidationError(f"Segment at index {index} must be a dict/object.")
    for key in ("a", "b"):
        if key not in s:
            raise ValidationError(f"Segment at index {index} missing required key '{key}'.")
    return (
        validate_point_dict(s["a"], f"segments[{index}].a"),
        validate_point_dict(s["b"], f"segments[{index}].b"),
    )
