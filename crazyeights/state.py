"""Core match state data structures for Crazy Eights."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

from .cards import DECK_SIZE, WILD_RANK, Card, Rank, Suit, build_deck


class Turn(str, Enum):
    """The two seats at the table."""

    PLAYER = "player"
    OPPONENT = "opponent"

    def other(self) -> "Turn":
        return Turn.OPPONENT if self is Turn.PLAYER else Turn.PLAYER


class MatchStatus(str, Enum):
    """High-level phases of a match."""

    PLAYING = "playing"
    CHOOSING_SUIT = "choosing_suit"
    GAME_OVER = "game_over"


@dataclass(slots=True)
class MatchConfig:
    """Runtime configuration for a single match."""

    hand_size: int = 8
    thinking_delay: float = 1.5
    fumble_chance: float = 0.5
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.hand_size <= 0:
            raise ValueError("hand_size must be positive")
        if self.hand_size * 2 >= DECK_SIZE:
            raise ValueError("hand_size leaves no card to start the discard pile")
        if self.thinking_delay < 0:
            raise ValueError("thinking_delay must not be negative")
        if not 0.0 <= self.fumble_chance <= 1.0:
            raise ValueError("fumble_chance must be within [0, 1]")

    def make_rng(self) -> random.Random:
        """Return a random source seeded from ``seed`` (unseeded when ``None``)."""

        return random.Random(self.seed)


@dataclass(frozen=True, slots=True)
class MatchState:
    """Authoritative snapshot of a match in progress.

    The deck's top card and the discard pile's head are both the *last*
    element of their tuples. Instances are never mutated; the rules engine
    returns a new value for every accepted move.
    """

    deck: tuple[Card, ...]
    player_hand: tuple[Card, ...]
    opponent_hand: tuple[Card, ...]
    discard_pile: tuple[Card, ...]
    current_suit: Suit
    current_rank: Rank
    turn: Turn = Turn.PLAYER
    status: MatchStatus = MatchStatus.PLAYING
    winner: Turn | None = None

    def hand(self, actor: Turn) -> tuple[Card, ...]:
        """Return the hand held by ``actor``."""

        return self.player_hand if actor is Turn.PLAYER else self.opponent_hand

    @property
    def discard_head(self) -> Card | None:
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def deck_remaining(self) -> int:
        return len(self.deck)

    @property
    def is_over(self) -> bool:
        return self.status is MatchStatus.GAME_OVER


@dataclass(frozen=True, slots=True)
class MatchSnapshot:
    """Read-only view handed to the presentation layer."""

    player_hand: tuple[Card, ...]
    opponent_hand_size: int
    discard_head: Card | None
    current_suit: Suit
    current_rank: Rank
    turn: Turn
    status: MatchStatus
    winner: Turn | None
    deck_remaining: int
    message: str = ""

    @classmethod
    def from_state(cls, state: MatchState, message: str = "") -> "MatchSnapshot":
        return cls(
            player_hand=state.player_hand,
            opponent_hand_size=len(state.opponent_hand),
            discard_head=state.discard_head,
            current_suit=state.current_suit,
            current_rank=state.current_rank,
            turn=state.turn,
            status=state.status,
            winner=state.winner,
            deck_remaining=state.deck_remaining,
            message=message,
        )


def deal_from_deck(deck_cards: list[Card], hand_size: int = 8) -> MatchState:
    """Deal a match from an already ordered deck.

    The first ``hand_size`` cards go to the player, the next ``hand_size`` to
    the opponent, and the first non-wild card of the remainder starts the
    discard pile (the card at index 0 when every remaining card is wild).
    """

    if len(deck_cards) <= hand_size * 2:
        raise ValueError("insufficient cards in deck for requested hand size")

    remaining = list(deck_cards)
    player_hand = tuple(remaining[:hand_size])
    opponent_hand = tuple(remaining[hand_size : hand_size * 2])
    del remaining[: hand_size * 2]

    start_index = next((idx for idx, card in enumerate(remaining) if card.rank != WILD_RANK), 0)
    first_card = remaining.pop(start_index)

    return MatchState(
        deck=tuple(remaining),
        player_hand=player_hand,
        opponent_hand=opponent_hand,
        discard_pile=(first_card,),
        current_suit=first_card.suit,
        current_rank=first_card.rank,
    )


def deal_new_match(config: MatchConfig | None = None, rng: random.Random | None = None) -> MatchState:
    """Shuffle a fresh deck and return an initialised ``MatchState``."""

    config = config or MatchConfig()
    rng = rng or config.make_rng()
    return deal_from_deck(build_deck(rng), config.hand_size)


def all_card_ids(state: MatchState) -> list[str]:
    """Return the identifiers of every card in the match, wherever it lies."""

    return [
        card.id
        for pile in (state.deck, state.player_hand, state.opponent_hand, state.discard_pile)
        for card in pile
    ]


def card_count(state: MatchState) -> int:
    return len(state.deck) + len(state.player_hand) + len(state.opponent_hand) + len(state.discard_pile)
