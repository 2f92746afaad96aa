"""Rule utilities for Crazy Eights.

Every move-application helper takes the current :class:`MatchState` and
returns a new one. Invalid moves raise :class:`IllegalMove` before anything is
built, so the caller's state is never partially updated.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace

from .cards import WILD_RANK, Card, Suit
from .state import MatchConfig, MatchState, MatchStatus, Turn, deal_new_match

__all__ = [
    "IllegalMove",
    "is_legal_play",
    "legal_plays",
    "find_card",
    "apply_play",
    "apply_draw",
    "apply_suit_choice",
    "reset_match",
]

logger = logging.getLogger(__name__)


class IllegalMove(RuntimeError):
    """Raised when a play, draw or suit choice violates a precondition."""


def _reject(message: str) -> IllegalMove:
    logger.debug("rejected move: %s", message)
    return IllegalMove(message)


def is_legal_play(card: Card, state: MatchState) -> bool:
    """Return ``True`` if ``card`` may be played onto the pile right now."""

    if state.status is not MatchStatus.PLAYING:
        return False
    if card.rank == WILD_RANK:
        return True
    return card.suit == state.current_suit or card.rank == state.current_rank


def legal_plays(state: MatchState, actor: Turn) -> list[Card]:
    """Return the cards in ``actor``'s hand that are legal plays, in hand order."""

    return [card for card in state.hand(actor) if is_legal_play(card, state)]


def find_card(state: MatchState, actor: Turn, card_id: str) -> Card:
    """Resolve ``card_id`` inside ``actor``'s hand."""

    for card in state.hand(actor):
        if card.id == card_id:
            return card
    raise _reject(f"card {card_id!r} is not in the {actor.value}'s hand")


def _check_turn(state: MatchState, actor: Turn) -> None:
    if state.status is MatchStatus.GAME_OVER:
        raise _reject("the match is already over")
    if state.turn is not actor:
        raise _reject(f"it is not the {actor.value}'s turn")


def _with_hand(state: MatchState, actor: Turn, hand: tuple[Card, ...], **changes) -> MatchState:
    if actor is Turn.PLAYER:
        return replace(state, player_hand=hand, **changes)
    return replace(state, opponent_hand=hand, **changes)


def apply_play(state: MatchState, actor: Turn, card: Card | str) -> MatchState:
    """Play ``card`` (a card or its identifier) from ``actor``'s hand.

    A non-wild card sets the current suit/rank and passes the turn. A wild card
    enters ``choosing_suit`` and keeps the turn until a suit is chosen. Either
    way, emptying the hand ends the match immediately with ``actor`` as winner.
    """

    _check_turn(state, actor)
    card_id = card if isinstance(card, str) else card.id
    held = find_card(state, actor, card_id)
    if not is_legal_play(held, state):
        raise _reject(f"{held.label()} does not match {state.current_rank.value} of {state.current_suit.value}")

    hand = tuple(c for c in state.hand(actor) if c.id != held.id)
    discard_pile = state.discard_pile + (held,)

    if not hand:
        return _with_hand(
            state,
            actor,
            hand,
            discard_pile=discard_pile,
            current_suit=state.current_suit if held.is_wild else held.suit,
            current_rank=held.rank,
            status=MatchStatus.GAME_OVER,
            winner=actor,
        )

    if held.is_wild:
        return _with_hand(
            state,
            actor,
            hand,
            discard_pile=discard_pile,
            current_rank=WILD_RANK,
            status=MatchStatus.CHOOSING_SUIT,
        )

    return _with_hand(
        state,
        actor,
        hand,
        discard_pile=discard_pile,
        current_suit=held.suit,
        current_rank=held.rank,
        turn=actor.other(),
    )


def apply_draw(state: MatchState, actor: Turn) -> MatchState:
    """Draw the top card of the deck for ``actor`` and pass the turn.

    With an empty deck the turn is skipped: nothing is drawn and the turn
    passes. Drawing is allowed even when a legal play exists.
    """

    _check_turn(state, actor)
    if state.status is not MatchStatus.PLAYING:
        raise _reject("a suit must be chosen before drawing")

    if not state.deck:
        return replace(state, turn=actor.other())

    drawn = state.deck[-1]
    return _with_hand(
        state,
        actor,
        state.hand(actor) + (drawn,),
        deck=state.deck[:-1],
        turn=actor.other(),
    )


def apply_suit_choice(state: MatchState, suit: Suit | str, actor: Turn | None = None) -> MatchState:
    """Resolve a pending wild card by naming the new suit."""

    if state.status is not MatchStatus.CHOOSING_SUIT:
        raise _reject("no wild card is awaiting a suit choice")
    if actor is not None and actor is not state.turn:
        raise _reject(f"the {actor.value} did not play the wild card")
    try:
        chosen = Suit(suit)
    except ValueError:
        raise _reject(f"unknown suit {suit!r}") from None

    return replace(
        state,
        current_suit=chosen,
        status=MatchStatus.PLAYING,
        turn=state.turn.other(),
    )


def reset_match(config: MatchConfig | None = None, rng: random.Random | None = None) -> MatchState:
    """Return a freshly shuffled and dealt match."""

    return deal_new_match(config, rng)
