"""CLI entry point."""

from __future__ import annotations

from typing import Optional

import typer
from dotenv import load_dotenv

# Load MACAU_* settings from a .env file
load_dotenv()

app = typer.Typer(help="Macau card game: one human against CPU players")


def _setup(log_level: Optional[str]):
    from macau.engine import GameConfig
    from macau.engine.errors import ValidationError
    from macau.logging_utils import LOG_LEVEL, setup_logging

    setup_logging(log_level or LOG_LEVEL)
    try:
        return GameConfig.from_env()
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _check_players(players: int, config) -> None:
    if not config.min_players <= players <= config.max_players:
        raise typer.BadParameter(
            f"Player count must be between {config.min_players} and {config.max_players}, got {players}",
            param_hint="--players",
        )


@app.command()
def play(
    players: int = typer.Option(4, "--players", "-n", help="Number of players (2-10), seat 0 is you"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    speed: float = typer.Option(1.0, "--speed", help="CPU pacing speed-up factor (0 = no waiting)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR"),
) -> None:
    """Play a game in the terminal against CPU opponents."""
    from macau.agents.human_agent import HumanAgent
    from macau.engine.scheduler import PacedScheduler
    from macau.orchestration.game_runner import GameRunner

    config = _setup(log_level)
    _check_players(players, config)
    runner = GameRunner(
        players,
        human_agent=HumanAgent(name="you"),
        seed=seed,
        config=config,
        scheduler=PacedScheduler(speed=speed),
    )
    result = runner.run()
    typer.echo(f"\nWinner: {result.winner or 'None'}")
    typer.echo(f"Turns: {result.num_turns}")


@app.command()
def simulate(
    players: int = typer.Option(4, "--players", "-n", help="Number of CPU players (2-10)"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    show_history: bool = typer.Option(False, "--history", help="Print every game event"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR"),
) -> None:
    """Run a single all-CPU game."""
    from macau.orchestration.game_runner import GameRunner

    config = _setup(log_level)
    _check_players(players, config)
    result = GameRunner(players, seed=seed, config=config).run()
    if show_history:
        for line in result.history:
            typer.echo(f"> {line}")
    typer.echo(f"Winner: {result.winner or 'None'}")
    typer.echo(f"Turns: {result.num_turns}")
    for name, size in result.final_hand_sizes.items():
        typer.echo(f"  {name}: {size} cards left")


@app.command()
def tournament(
    players: int = typer.Option(4, "--players", "-n", help="Number of CPU players (2-10)"),
    games: int = typer.Option(100, "--games", "-g", help="Number of games"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR"),
) -> None:
    """Run a batch of all-CPU games."""
    from macau.orchestration.tournament import run_tournament

    config = _setup(log_level)
    _check_players(players, config)
    result = run_tournament(players, num_games=games, seed=seed, config=config)
    typer.echo("Tournament results:")
    for name, w in sorted(result.wins.items(), key=lambda x: -x[1]):
        typer.echo(f"  {name}: {w} wins")
    if result.draws:
        typer.echo(f"  no winner: {result.draws}")
    typer.echo(f"Average turns: {result.average_turns:.1f}")
    typer.echo(f"Special effects: {dict(result.stats.special_effects)}")
    typer.echo(f"Macau calls: {sum(result.stats.macau_calls.values())}, "
               f"Stop Macau calls: {result.stats.stop_macau_calls}")


if __name__ == "__main__":
    app()
