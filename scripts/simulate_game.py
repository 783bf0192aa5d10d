"""Simulate a game with CPU players and a scripted human seat."""

from macau.agents.policy_agent import PolicyAgent
from macau.logging_utils import setup_logging
from macau.orchestration.game_runner import GameRunner


def main():
    setup_logging("INFO")
    runner = GameRunner(4, human_agent=PolicyAgent("Bot"), seed=42)
    result = runner.run()

    for line in result.history:
        print(f"> {line}")
    print(f"Game finished! Winner: {result.winner}")
    print(f"Turns: {result.num_turns}")
    print(f"Stats: {result.stats.as_dict()}")


if __name__ == "__main__":
    main()
