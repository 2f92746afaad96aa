"""Typer entry-point wiring for the Crazy Eights CLI."""

from __future__ import annotations

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .. import benchmark
from ..logging_utils import setup_logging
from ..state import MatchConfig

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()


def _build_config(seed: int | None, delay: float, fumble_chance: float, hand_size: int) -> MatchConfig:
    try:
        return MatchConfig(
            hand_size=hand_size,
            thinking_delay=delay,
            fumble_chance=fumble_chance,
            seed=seed,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def play(
    seed: int | None = typer.Option(None, help="Random seed for reproducible games (omit for randomness)."),
    delay: float = typer.Option(1.5, min=0.0, help="Seconds the opponent 'thinks' before moving."),
    fumble_chance: float = typer.Option(
        0.5,
        min=0.0,
        max=1.0,
        help="Chance the opponent draws instead of playing a legal card.",
    ),
    hand_size: int = typer.Option(8, min=1, help="Cards dealt to each player."),
    log_level: str | None = typer.Option(None, help="Log level (defaults to $LOG_LEVEL or WARNING)."),
) -> None:
    """Play a match against the computer in the terminal."""

    config = _build_config(seed, delay, fumble_chance, hand_size)

    from .textual_app import run_textual_app

    run_textual_app(config, log_level=log_level)


@app.command("simulate")
def simulate(
    matches: int = typer.Option(200, min=1, help="Number of self-play matches."),
    seed: int = typer.Option(123, help="Random seed for the simulation."),
    fumble_chance: float = typer.Option(0.5, min=0.0, max=1.0, help="Opponent fumble chance."),
    max_turns: int = typer.Option(500, min=1, help="Actions before a match counts as stalled."),
    log_level: str | None = typer.Option(None, help="Log level (defaults to $LOG_LEVEL or WARNING)."),
) -> None:
    """Measure the opponent's win rate against a greedy baseline."""

    setup_logging(log_level)
    report = benchmark.run_self_play(
        matches,
        seed=seed,
        fumble_chance=fumble_chance,
        max_turns=max_turns,
    )

    table = Table(title="Self-Play Results", box=box.SIMPLE_HEAVY)
    table.add_column("Seat", justify="center")
    table.add_column("Wins", justify="right")
    table.add_row("Baseline (player)", str(report.player_wins))
    table.add_row("Opponent", str(report.opponent_wins))
    table.add_row("Stalled", str(report.stalled))
    console.print(table)
    console.print(
        f"[cyan]Opponent win rate {report.opponent_win_rate:.1%} "
        f"over {report.matches} match(es), {report.average_turns:.1f} actions on average.[/cyan]"
    )


def main() -> None:
    """Entry-point for ``python -m crazyeights.cli``."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
