"""Tests for game runners, agents and the CLI."""

import random

from typer.testing import CliRunner

from macau.agents import HumanAgent, PolicyAgent
from macau.cli import app
from macau.engine import Card, DeclareSuit, DrawCard, GameConfig, PlayCard, Suit, TurnEngine
from macau.orchestration import GameRunner, run_tournament

C = Card.parse


def test_cpu_only_game_finishes() -> None:
    runner = GameRunner(4, seed=3)
    result = runner.run()
    assert result.winner in result.player_names
    assert result.player_names == ("CPU 1", "CPU 2", "CPU 3", "CPU 4")
    assert result.num_turns > 1
    assert sum(result.stats.cards_played.values()) > 0
    assert runner.engine.card_total() == 52
    assert runner.engine.events.subscriber_count == 0


def test_same_seed_same_game() -> None:
    first = GameRunner(3, seed=99).run()
    second = GameRunner(3, seed=99).run()
    assert first.history == second.history
    assert first.winner == second.winner


def test_policy_agent_plays_human_seat() -> None:
    result = GameRunner(3, human_agent=PolicyAgent("Bot"), seed=11).run()
    assert result.player_names[0] == "Player"
    assert result.winner is not None


def test_policy_agent_choices() -> None:
    engine = TurnEngine(config=GameConfig(), rng=random.Random(0))
    engine.load_position([[C("J♥"), C("7♠"), C("8♠")], [C("4♣"), C("5♣")]], top_discard=C("5♥"))
    player = engine.players[0]
    agent = PolicyAgent("Bot")

    action = agent.get_action(engine.view(player), engine.legal_actions(player), player.name)
    assert action == PlayCard(card=C("J♥"))
    engine.play_card(C("J♥"), player)

    action = agent.get_action(engine.view(player), engine.legal_actions(player), player.name)
    assert action == DeclareSuit(suit=Suit.SPADES)


def test_human_agent_retries_bad_input() -> None:
    engine = TurnEngine(config=GameConfig(), rng=random.Random(0))
    engine.load_position([[C("7♥"), C("8♣")], [C("4♣"), C("5♣")]], top_discard=C("5♥"))
    player = engine.players[0]
    answers = iter(["x", "99", "1"])
    printed = []
    agent = HumanAgent("you", input_fn=lambda prompt: next(answers), output_fn=printed.append)

    action = agent.get_action(engine.view(player), engine.legal_actions(player), player.name)
    assert action == DrawCard()
    assert printed.count("Invalid. Try again.") == 2
    assert "Your hand: 7♥ 8♣" in printed


def test_human_agent_eof() -> None:
    def closed(prompt):
        raise EOFError

    engine = TurnEngine(config=GameConfig(), rng=random.Random(0))
    engine.load_position([[C("7♥"), C("8♣")], [C("4♣"), C("5♣")]], top_discard=C("5♥"))
    player = engine.players[0]
    agent = HumanAgent(input_fn=closed, output_fn=lambda line: None)
    assert agent.get_action(engine.view(player), engine.legal_actions(player), player.name) is None


def test_scripted_human_game() -> None:
    agent = HumanAgent("you", input_fn=lambda prompt: "0", output_fn=lambda line: None)
    result = GameRunner(2, human_agent=agent, seed=5).run()
    assert result.winner in ("Player", "CPU 1")


def test_tournament() -> None:
    result = run_tournament(3, num_games=5, seed=1)
    assert result.games == 5
    assert sum(result.wins.values()) + result.draws == 5
    assert result.average_turns > 0
    assert sum(result.stats.cards_played.values()) > 0


def test_cli_simulate() -> None:
    result = CliRunner().invoke(app, ["simulate", "--players", "3", "--seed", "7", "--history"])
    assert result.exit_code == 0
    assert "Winner: CPU" in result.output
    assert "> game state -> player_turn" in result.output


def test_cli_tournament() -> None:
    result = CliRunner().invoke(app, ["tournament", "--players", "2", "--games", "3", "--seed", "1"])
    assert result.exit_code == 0
    assert "Tournament results:" in result.output


def test_cli_rejects_bad_player_count() -> None:
    for command in ("play", "simulate", "tournament"):
        result = CliRunner().invoke(app, [command, "--players", "11"])
        assert result.exit_code == 2
        assert isinstance(result.exception, SystemExit)
