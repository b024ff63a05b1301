"""Turn engine for the voice relay.

Every function here is pure: it takes a game state (a tuple of
``ParticipantSlot``) plus an injected clock reading in epoch milliseconds
and returns new values. Nothing is mutated, nothing is persisted. Callers
are expected to hold a per-game lock across evaluate -> mutate -> persist.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, Optional, Tuple

from .errors import InvalidTransition

# A first clip without its reply is abandoned after two minutes
TIMEOUT_MS = 2 * 60 * 1000


def default_name(player_number: int) -> str:
    return f"Player {player_number}"


@dataclass(frozen=True)
class ParticipantSlot:
    first_clip: Optional[str] = None
    second_clip: Optional[str] = None
    display_name: Optional[str] = ''
    first_clip_ts: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.first_clip and self.second_clip)

    @property
    def is_empty(self) -> bool:
        return not self.first_clip and not self.second_clip


GameState = Tuple[ParticipantSlot, ...]


@dataclass(frozen=True)
class TurnStatus:
    is_new_player: bool
    player_number: int
    can_record_first: bool = False
    can_record_second: bool = False
    needs_second_file: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_new_player': self.is_new_player,
            'player_number': self.player_number,
            'can_record_first': self.can_record_first,
            'can_record_second': self.can_record_second,
            'needs_second_file': self.needs_second_file,
        }


def _fresh(player_number: int) -> TurnStatus:
    return TurnStatus(is_new_player=True, player_number=player_number, can_record_first=True)


def _is_expired(slot: ParticipantSlot, now: int) -> bool:
    return slot.first_clip_ts is not None and (now - slot.first_clip_ts) > TIMEOUT_MS


def evaluate(state: GameState, now: int) -> Tuple[GameState, TurnStatus]:
    """Decide who may record what next.

    Returns the state to continue with alongside the status. The returned
    state differs from the input only when the last slot timed out: its
    first clip and timestamp are cleared in place, keeping the turn number,
    and a new participant is offered that same slot.
    """
    state = tuple(state)
    if not state:
        return state, _fresh(1)

    count = len(state)
    last = state[-1]

    if last.is_complete:
        return state, _fresh(count + 1)

    if last.first_clip and not last.second_clip:
        if _is_expired(last, now):
            reclaimed = replace(last, first_clip=None, first_clip_ts=None)
            return state[:-1] + (reclaimed,), _fresh(count)
        return state, TurnStatus(
            is_new_player=False,
            player_number=count,
            can_record_second=True,
            needs_second_file=True,
        )

    if last.is_empty:
        return state, TurnStatus(is_new_player=False, player_number=count, can_record_first=True)

    # A reply without an opening clip; no action can repair it
    return state, TurnStatus(is_new_player=False, player_number=count)


def compute_status(state: GameState, now: int) -> TurnStatus:
    """Status only; the reclaimed state (if any) is discarded."""
    return evaluate(state, now)[1]


def reclaim_expired(state: GameState, now: int) -> GameState:
    return evaluate(state, now)[0]


@dataclass(frozen=True)
class VisibleEntry:
    player_number: int
    player_name: str
    first_clip: Optional[str] = None
    second_clip: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'player_number': self.player_number,
            'player_name': self.player_name,
            'first_clip': self.first_clip,
            'second_clip': self.second_clip,
        }


class VisibleProjection:
    """What observers may see of a game state.

    Entries are built on iteration, so the projection is cheap to create
    and can be iterated any number of times.
    """

    def __init__(self, state: GameState):
        self._state = tuple(state)

    def __len__(self) -> int:
        return len(self._state)

    def __iter__(self) -> Iterator[VisibleEntry]:
        slots = self._state
        for i, slot in enumerate(slots):
            revealed = i + 1 < len(slots) and bool(slots[i + 1].first_clip)
            yield VisibleEntry(
                player_number=i + 1,
                player_name=slot.display_name or default_name(i + 1),
                first_clip=slot.first_clip or None,
                second_clip=slot.second_clip if (slot.second_clip and revealed) else None,
            )

    def to_list(self):
        return [entry.to_dict() for entry in self]


def compute_visible(state: GameState) -> VisibleProjection:
    return VisibleProjection(state)


def record_first(
    state: GameState, clip_ref: str, display_name: Optional[str], now: int
) -> Tuple[GameState, int]:
    """Give the next eligible slot its first clip.

    Reuses the last slot when it holds no clips (after a reclamation),
    otherwise appends a new one. Returns the new state and the 0-based
    index of the slot that received the clip.
    """
    state, status = evaluate(state, now)
    if not status.can_record_first:
        raise InvalidTransition('Not ready to record first audio', action='record_first')

    if state and state[-1].is_empty:
        index = len(state) - 1
    else:
        index = len(state)

    slot = ParticipantSlot(
        first_clip=clip_ref,
        second_clip=None,
        display_name=display_name or default_name(index + 1),
        first_clip_ts=now,
    )
    if index < len(state):
        return state[:index] + (slot,), index
    return state + (slot,), index


def record_second(
    state: GameState, clip_ref: str, display_name: Optional[str], now: int
) -> GameState:
    state, status = evaluate(state, now)
    if not status.needs_second_file:
        raise InvalidTransition('Not ready to record second audio', action='record_second')

    last = state[-1]
    finished = replace(
        last,
        second_clip=clip_ref,
        display_name=display_name or last.display_name,
        first_clip_ts=None,
    )
    return state[:-1] + (finished,)


def reset() -> GameState:
    return ()
