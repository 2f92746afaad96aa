"""Decision policy for the computer opponent."""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from . import rules
from .actions import Action, DrawAction, PlayAction
from .cards import Card, Suit
from .state import MatchState, MatchStatus, Turn

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def random(self) -> float: ...


def choose_suit(hand: Iterable[Card], played: Card | None = None) -> Suit:
    """Return the most frequent suit among ``hand`` once ``played`` is removed.

    Ties go to the suit that comes first in enumeration order; an empty hand
    yields the first suit.
    """

    counts = Counter(card.suit for card in hand if played is None or card.id != played.id)
    best = next(iter(Suit))
    for suit in Suit:
        if counts[suit] > counts[best]:
            best = suit
    return best


@dataclass(slots=True)
class OpponentPolicy:
    """Plays the first legal non-wild card, fumbling into a draw half the time.

    The fumble keeps the opponent beatable; with ``fumble_chance=0`` it plays
    whenever it can.
    """

    fumble_chance: float = 0.5
    rng: RandomSource = field(default_factory=random.Random)

    def choose_action(self, state: MatchState, seat: Turn = Turn.OPPONENT) -> Action:
        """Return the action ``seat`` takes this turn."""

        if state.status is not MatchStatus.PLAYING or state.turn is not seat:
            raise rules.IllegalMove("the opponent may only act on its own turn while play is open")

        playable = rules.legal_plays(state, seat)
        if not playable:
            logger.debug("%s has no legal play; drawing", seat.value)
            return DrawAction()

        if self.rng.random() < self.fumble_chance:
            logger.debug("%s fumbles with %d legal play(s)", seat.value, len(playable))
            return DrawAction(fumble=True)

        card = next((c for c in playable if not c.is_wild), playable[0])
        if not card.is_wild:
            return PlayAction(card_id=card.id)
        suit = choose_suit(state.hand(seat), played=card)
        logger.debug("%s plays wild %s naming %s", seat.value, card.id, suit.value)
        return PlayAction(card_id=card.id, suit=suit)
