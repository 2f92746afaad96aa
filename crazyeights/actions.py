"""Action value objects and helpers for applying them."""

from __future__ import annotations

from dataclasses import dataclass

from . import rules
from .cards import Suit
from .state import MatchState, MatchStatus, Turn


@dataclass(frozen=True)
class DrawAction:
    """Action describing a draw (or a skipped turn on an empty deck)."""

    fumble: bool = False


@dataclass(frozen=True)
class PlayAction:
    """Action describing a card play, with the suit to name for a wild card."""

    card_id: str
    suit: Suit | None = None


Action = DrawAction | PlayAction


def legal_actions(state: MatchState, actor: Turn) -> list[Action]:
    """Return every action ``actor`` may take in ``state``."""

    if state.status is not MatchStatus.PLAYING or state.turn is not actor:
        return []
    options: list[Action] = [PlayAction(card_id=card.id) for card in rules.legal_plays(state, actor)]
    options.append(DrawAction())
    return options


def apply_action(state: MatchState, actor: Turn, action: Action) -> MatchState:
    """Apply ``action`` for ``actor`` using the rules engine.

    A wild :class:`PlayAction` carrying a ``suit`` resolves the suit choice in
    the same step unless the play already ended the match.
    """

    if isinstance(action, DrawAction):
        return rules.apply_draw(state, actor)
    if isinstance(action, PlayAction):
        next_state = rules.apply_play(state, actor, action.card_id)
        if action.suit is not None and next_state.status is MatchStatus.CHOOSING_SUIT:
            next_state = rules.apply_suit_choice(next_state, action.suit, actor)
        return next_state
    raise ValueError(f"Unknown action {action!r}")
