from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


MISSING_KEY = "Missing key in path"
MISSING_KEYS = "Missing keys query parameter. Use ?keys=key1,key2,key3"


class Mode(str, Enum):
    BADGE = "badge"
    BADGEN = "badgen"
    SHIELDS = "shields"
    STATS = "stats"
    STATS_BATCH = "stats-batch"

    @property
    def increments(self) -> bool:
        return self in (Mode.BADGE, Mode.BADGEN, Mode.SHIELDS)


class RouteError(ValueError):
    """Request could not be mapped to a render request."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class RenderRequest:
    mode: Mode
    keys: List[str]

    @property
    def key(self) -> str:
        return self.keys[0]


def parse_mode(segment: str) -> Mode | None:
    try:
        return Mode(segment)
    except ValueError:
        return None


def parse_batch_keys(raw: str | None) -> List[str]:
    """Split ?keys=a, b,c into trimmed keys; empty elements are kept as ''."""
    if not raw:
        raise RouteError(400, MISSING_KEYS)
    return [k.strip() for k in raw.split(",")]


def split_raw_path(raw_path: str) -> Tuple[str, str]:
    """Split '/<mode>/<rest>' without percent-decoding, so '/stats/a%2Fb' keeps 'a%2Fb'."""
    parts = raw_path.split("/", 2)
    mode = parts[1] if len(parts) > 1 else ""
    rest = parts[2] if len(parts) > 2 else ""
    return mode, rest


def resolve(mode_segment: str, rest: str = "", keys_param: str | None = None) -> RenderRequest:
    """Map the first path segment, the remaining path and ?keys= to a request.

    Only the segment right after the mode is used as the key; deeper segments
    are ignored. stats-batch ignores the path entirely.
    """
    mode = parse_mode(mode_segment)
    if mode is None:
        raise RouteError(404, "Not Found")
    if mode is Mode.STATS_BATCH:
        return RenderRequest(mode=mode, keys=parse_batch_keys(keys_param))

    key = rest.split("/", 1)[0]
    if not key:
        raise RouteError(400, MISSING_KEY)
    return RenderRequest(mode=mode, keys=[key])
