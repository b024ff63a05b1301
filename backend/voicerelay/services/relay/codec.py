"""Persisted slot layout.

Game state is stored as a JSON list of 4-element rows:
``[first_clip, second_clip, display_name, first_clip_ts]``. Any storage
backend must round-trip exactly this shape.
"""

import json
from typing import Any, List, Optional

from .engine import GameState, ParticipantSlot


def to_rows(state: GameState) -> List[List[Any]]:
    return [
        [slot.first_clip, slot.second_clip, slot.display_name, slot.first_clip_ts]
        for slot in state
    ]


def from_rows(rows: List[Any]) -> GameState:
    slots = []
    for pos, row in enumerate(rows):
        if not isinstance(row, (list, tuple)) or len(row) != 4:
            raise ValueError(f"slot {pos} is not a 4-element row: {row!r}")
        first_clip, second_clip, display_name, first_clip_ts = row
        for field in (first_clip, second_clip, display_name):
            if field is not None and not isinstance(field, str):
                raise ValueError(f"slot {pos} has a non-string field: {field!r}")
        if first_clip_ts is not None and (isinstance(first_clip_ts, bool) or not isinstance(first_clip_ts, int)):
            raise ValueError(f"slot {pos} has a non-integer timestamp: {first_clip_ts!r}")
        # Values are kept exactly as stored so rows round-trip unchanged
        slots.append(ParticipantSlot(first_clip, second_clip, display_name, first_clip_ts))
    return tuple(slots)


def dump_slots(state: GameState) -> str:
    return json.dumps(to_rows(state))


def load_slots(raw: Optional[str]) -> GameState:
    if not raw:
        return ()
    rows = json.loads(raw)
    if not isinstance(rows, list):
        raise ValueError('slot data must be a JSON list')
    return from_rows(rows)
