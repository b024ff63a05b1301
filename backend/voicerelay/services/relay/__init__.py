"""Relay domain services: turn engine, slot codec and clip storage.

The turn engine is pure logic over an immutable tuple of slots. HTTP
routes and socket handlers load the slots, call into the engine and
persist whatever it hands back, keeping transport concerns out of the
game mechanics.
"""

from .engine import (
    TIMEOUT_MS,
    ParticipantSlot,
    TurnStatus,
    VisibleEntry,
    compute_status,
    compute_visible,
    evaluate,
    reclaim_expired,
    record_first,
    record_second,
    reset,
)
from .errors import InvalidTransition, MissingPayload, PersistenceFailure, RelayError

__all__ = [
    'TIMEOUT_MS',
    'ParticipantSlot',
    'TurnStatus',
    'VisibleEntry',
    'compute_status',
    'compute_visible',
    'evaluate',
    'reclaim_expired',
    'record_first',
    'record_second',
    'reset',
    'InvalidTransition',
    'MissingPayload',
    'PersistenceFailure',
    'RelayError',
]
