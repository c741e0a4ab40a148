"""Rendering of traversal results."""

from __future__ import annotations

import json
from typing import Dict, Iterable, List

from .models import TraversalResult

_INDENT = "    "


def _block(title: str, items: Iterable[str]) -> List[str]:
    ordered = sorted(items)
    if not ordered:
        return []
    return [f"{title}:", *(f"{_INDENT}{item}" for item in ordered)]


def render_text(result: TraversalResult) -> str:
    """Render the sorted class and archive listings; empty blocks are omitted."""
    lines = _block("Classes", result.classes) + _block("Required JARs", result.archives)
    return "\n".join(lines) + "\n" if lines else ""


def result_to_dict(result: TraversalResult) -> Dict[str, object]:
    return {
        "classes": sorted(result.classes),
        "archives": sorted(result.archives),
        "unresolved": sorted(result.unresolved),
        "failed": sorted(result.failed),
        "origins": {name: result.origins[name] for name in sorted(result.origins)},
    }


def render_json(result: TraversalResult) -> str:
    return json.dumps(result_to_dict(result), indent=2) + "\n"


RENDERERS = {
    "text": render_text,
    "json": render_json,
}


__all__ = ["RENDERERS", "render_json", "render_text", "result_to_dict"]
