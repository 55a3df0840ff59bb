"""
Numeris - Validation adapter

Turns pydantic error entries into {field, message} pairs a client can show
next to the offending input.
"""

from typing import Any, Dict, Iterable, List


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def field_message(error: Dict[str, Any]) -> str:
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}
    field = _field_name(error.get("loc", ()))

    if kind == "missing":
        return f"this {field} is required"
    if kind in ("string_too_short", "too_short"):
        return f"the minimum length is {ctx.get('min_length', '')}".strip()
    if kind in ("string_too_long", "too_long"):
        return f"the maximum length is {ctx.get('max_length', '')}".strip()
    if kind == "value_error":
        return str(error.get("msg", "")).replace("Value error, ", "", 1)
    return str(error.get("msg", "invalid value"))


def field_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Map every error entry to {"field": ..., "message": ...}."""
    return [
        {"field": _field_name(e.get("loc", ())), "message": field_message(e)}
        for e in errors
    ]
