from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


LABEL = "views"
COLOR = "blue"

NO_CACHE_HEADERS: Dict[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

# Badge geometry in 1/10 px units; the exported image is scaled down by 10.
LABEL_WIDTH = 390
LABEL_TEXT_LENGTH = 290
DIGIT_WIDTH = 80
VALUE_PADDING = 60
MIN_VALUE_WIDTH = 150
VIEWBOX_HEIGHT = 200
EXPORT_HEIGHT = 20
LABEL_COLOR = "#555"
VALUE_COLOR = "#08C"

_SVG_TEMPLATE = """\
<svg xmlns="http://www.w3.org/2000/svg" width="{export_width:g}" height="{export_height}" viewBox="0 0 {total_width} {viewbox_height}" role="img" aria-label="{label}: {message}">
  <title>{label}: {message}</title>
  <g>
    <rect fill="{label_color}" width="{label_width}" height="{viewbox_height}"/>
    <rect fill="{value_color}" x="{label_width}" width="{value_width}" height="{viewbox_height}"/>
  </g>
  <g aria-hidden="true" fill="#fff" text-anchor="start" font-family="Verdana,DejaVu Sans,sans-serif" font-size="110">
    <text x="60" y="148" textLength="{label_text_length}" fill="#000" opacity="0.1">{label}</text>
    <text x="50" y="138" textLength="{label_text_length}">{label}</text>
    <text x="{value_shadow_x}" y="148" textLength="{value_text_length}" fill="#000" opacity="0.1">{message}</text>
    <text x="{value_x}" y="138" textLength="{value_text_length}">{message}</text>
  </g>
</svg>"""


@dataclass(frozen=True)
class RenderedBody:
    content: str
    media_type: str
    headers: Dict[str, str] = field(default_factory=dict)


def value_width(message: str) -> int:
    """Width of the value segment; grows with digit count, never below 150."""
    return max(MIN_VALUE_WIDTH, len(message) * DIGIT_WIDTH + VALUE_PADDING)


def _json(content: Any) -> str:
    return json.dumps(content, separators=(",", ":"), ensure_ascii=False)


def render_badge(views: int) -> RenderedBody:
    message = str(views)
    width = value_width(message)
    total = LABEL_WIDTH + width
    svg = _SVG_TEMPLATE.format(
        export_width=total / 10,
        export_height=EXPORT_HEIGHT,
        total_width=total,
        viewbox_height=VIEWBOX_HEIGHT,
        label=LABEL,
        message=message,
        label_color=LABEL_COLOR,
        value_color=VALUE_COLOR,
        label_width=LABEL_WIDTH,
        value_width=width,
        label_text_length=LABEL_TEXT_LENGTH,
        value_shadow_x=LABEL_WIDTH + 40,
        value_x=LABEL_WIDTH + 30,
        value_text_length=len(message) * DIGIT_WIDTH - 10,
    )
    return RenderedBody(svg, "image/svg+xml", dict(NO_CACHE_HEADERS))


def render_badgen(views: int) -> RenderedBody:
    # https://badgen.net/https
    payload = {"subject": LABEL, "status": str(views), "color": COLOR}
    return RenderedBody(_json(payload), "application/json", dict(NO_CACHE_HEADERS))


def render_shields(views: int) -> RenderedBody:
    # https://shields.io/badges/endpoint-badge
    payload = {
        "schemaVersion": 1,
        "label": LABEL,
        "message": str(views),
        "color": COLOR,
        "style": "flat-square",
        "cacheSeconds": 0,
    }
    return RenderedBody(_json(payload), "application/json", dict(NO_CACHE_HEADERS))


def render_stats(views: int) -> RenderedBody:
    return RenderedBody(_json({"views": views}), "application/json")


def render_stats_batch(views_by_key: Mapping[str, int]) -> RenderedBody:
    payload = {key: {"views": views} for key, views in views_by_key.items()}
    return RenderedBody(_json(payload), "application/json")
