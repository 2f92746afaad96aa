"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..cards import RANK_NAMES, SUIT_THEMES, Card, Rank, Suit
from ..state import MatchSnapshot, MatchStatus, Turn


def format_suit(suit: Suit) -> str:
    """Return Rich markup for ``suit`` using its house colours."""

    theme = SUIT_THEMES[suit]
    return f"{theme.icon} [bold {theme.accent} on {theme.color}]{theme.name}[/]"


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    theme = SUIT_THEMES[card.suit]
    style = f"bold {theme.accent} on {theme.color}"
    if card.is_wild:
        style = f"bold reverse {theme.accent}"
    return f"[{style}] {card.rank.value} {theme.icon} [/]"


def describe_card(card: Card) -> str:
    return f"{format_card(card)} {card.rank_name} of {card.suit.value}"


def _target_markup(suit: Suit, rank: Rank) -> str:
    return f"{format_suit(suit)} / {rank.value} ({RANK_NAMES[rank]})"


def render_snapshot(snapshot: MatchSnapshot, *, title: str = "Crazy Eights") -> RenderableType:
    """Return a Rich panel describing the table as seen by the human."""

    grid = Table.grid(expand=True, padding=(0, 1))
    grid.add_column(justify="left", style="cyan")
    grid.add_column(justify="left")

    head = format_card(snapshot.discard_head) if snapshot.discard_head else "[dim]empty[/dim]"
    grid.add_row("Discard", head)
    grid.add_row("Match", _target_markup(snapshot.current_suit, snapshot.current_rank))
    grid.add_row("Deck", f"{snapshot.deck_remaining} card(s)")
    grid.add_row("Opponent", f"{snapshot.opponent_hand_size} card(s)")

    if snapshot.status is MatchStatus.GAME_OVER:
        label = "You win!" if snapshot.winner is Turn.PLAYER else "The AI wins."
        grid.add_row("Status", f"[bold green]{label}[/bold green]")
    elif snapshot.status is MatchStatus.CHOOSING_SUIT:
        grid.add_row("Status", "[bold magenta]Choosing a House[/bold magenta]")
    else:
        who = "[bold yellow]You[/bold yellow]" if snapshot.turn is Turn.PLAYER else "[cyan]AI[/cyan]"
        grid.add_row("Turn", who)

    hand = " ".join(format_card(card) for card in snapshot.player_hand) or "[dim]Empty hand[/dim]"
    components: list[RenderableType] = [
        grid,
        Panel(Text.from_markup(hand), title="Your Hand", box=box.SQUARE, border_style="blue"),
    ]
    if snapshot.message:
        components.append(Text.from_markup(f"[italic]{snapshot.message}[/italic]"))
    return Panel(Group(*components), title=title, padding=(0, 1), border_style="yellow")
