"""Card abstractions and deck helpers for Crazy Eights."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator


class Suit(str, Enum):
    """Enumeration of the four houses used as suits."""

    GRYFFINDOR = "Gryffindor"
    HUFFLEPUFF = "Hufflepuff"
    SLYTHERIN = "Slytherin"
    RAVENCLAW = "Ravenclaw"


class Rank(str, Enum):
    """Enumeration of the fourteen ranks in display order."""

    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"


WILD_RANK = Rank.EIGHT
DECK_SIZE = len(Suit) * len(Rank)

RANK_NAMES: dict[Rank, str] = {
    Rank.ONE: "Year 1",
    Rank.TWO: "Year 2",
    Rank.THREE: "Year 3",
    Rank.FOUR: "Year 4",
    Rank.FIVE: "Year 5",
    Rank.SIX: "Year 6",
    Rank.SEVEN: "Year 7",
    Rank.EIGHT: "The Chosen One",
    Rank.NINE: "Prefect",
    Rank.TEN: "Head Student",
    Rank.JACK: "Professor",
    Rank.QUEEN: "Headmaster",
    Rank.KING: "Founder",
    Rank.ACE: "Ancient Magic",
}


@dataclass(frozen=True, slots=True)
class SuitTheme:
    """Presentation metadata attached to each suit."""

    name: str
    color: str
    accent: str
    icon: str


SUIT_THEMES: dict[Suit, SuitTheme] = {
    Suit.GRYFFINDOR: SuitTheme(name="Gryffindor", color="#740001", accent="#D3A625", icon="🦁"),
    Suit.HUFFLEPUFF: SuitTheme(name="Hufflepuff", color="#ECB939", accent="#372E29", icon="🦡"),
    Suit.SLYTHERIN: SuitTheme(name="Slytherin", color="#1A472A", accent="#5D5D5D", icon="🐍"),
    Suit.RAVENCLAW: SuitTheme(name="Ravenclaw", color="#0E1A40", accent="#946B2D", icon="🦅"),
}


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing a single card.

    Gameplay equality is by ``id``: hands and piles are searched by identifier,
    never by the (suit, rank) pair.
    """

    id: str
    suit: Suit
    rank: Rank

    @property
    def is_wild(self) -> bool:
        """Return ``True`` when the card carries the wild rank."""

        return self.rank == WILD_RANK

    @property
    def rank_name(self) -> str:
        return RANK_NAMES[self.rank]

    def label(self) -> str:
        """Create a short display label such as ``"Q of Slytherin"``."""

        return f"{self.rank.value} of {self.suit.value}"


def _card_token(rng: random.Random) -> str:
    return f"{rng.getrandbits(36):09x}"


def full_deck(rng: random.Random | None = None) -> Iterator[Card]:
    """Yield every suit/rank combination once, in enumeration order."""

    rng = rng or random.Random()
    for suit in Suit:
        for rank in Rank:
            yield Card(id=f"{suit.value}-{rank.value}-{_card_token(rng)}", suit=suit, rank=rank)


def build_deck(rng: random.Random | None = None) -> list[Card]:
    """Return a freshly identified, uniformly shuffled deck."""

    rng = rng or random.Random()
    deck = list(full_deck(rng))
    rng.shuffle(deck)
    return deck


def format_cards(cards: Iterable[Card]) -> str:
    return ", ".join(card.label() for card in cards)
