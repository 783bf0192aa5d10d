"""Unit tests for CPU pacing and cancellation."""

import logging
import random

from macau.engine import GameConfig, GameState, ImmediateScheduler, PacedScheduler, TurnEngine, VirtualClock


def test_immediate_scheduler_runs_nested_callbacks_in_order() -> None:
    scheduler = ImmediateScheduler()
    order = []

    def first():
        order.append("first")
        scheduler.call_later(1.0, lambda: order.append("nested"))
        order.append("first done")

    scheduler.call_later(0.0, first)
    assert order == ["first", "first done", "nested"]
    assert scheduler.pending == 0


def test_virtual_clock_orders_by_due_time() -> None:
    clock = VirtualClock()
    order = []
    clock.call_later(2.0, lambda: order.append("b"))
    clock.call_later(1.0, lambda: order.append("a"))
    clock.call_later(2.0, lambda: order.append("c"))

    assert clock.advance(1.5) == 1
    assert order == ["a"]
    assert clock.now == 1.5
    assert clock.next_due() == 2.0
    assert clock.run_until_idle() == 2
    assert order == ["a", "b", "c"]


def test_run_until_idle_step_limit() -> None:
    clock = VirtualClock()

    def again():
        clock.call_later(1.0, again)

    clock.call_later(0.0, again)
    assert clock.run_until_idle(max_steps=5) == 5
    assert clock.pending == 1


def test_paced_scheduler_sleeps_scaled(monkeypatch) -> None:
    waits = []
    monkeypatch.setattr("macau.engine.scheduler.time.sleep", waits.append)
    scheduler = PacedScheduler(speed=2.0)
    scheduler.call_later(1.0, lambda: None)
    scheduler.run_until_idle()
    assert waits == [0.5]

    fast = PacedScheduler(speed=0)
    fast.call_later(1.0, lambda: None)
    fast.run_until_idle()
    assert waits == [0.5]


def test_cpu_turn_waits_for_the_clock() -> None:
    clock = VirtualClock()
    engine = TurnEngine(config=GameConfig(cpu_delay=0.5), rng=random.Random(3), scheduler=clock)
    engine.start_new_game(2, is_simulation=True)
    assert clock.pending == 1

    clock.advance(0.4)
    assert not any(" played " in line or " drew " in line for line in engine.history)

    clock.advance(0.2)
    assert any(line.startswith("CPU 1 played") or line == "CPU 1 drew a card" for line in engine.history)

    clock.run_until_idle()
    assert engine.state is GameState.GAME_OVER
    assert engine.winner is not None
    assert engine.card_total() == 52


def test_reset_drops_queued_cpu_steps(caplog) -> None:
    clock = VirtualClock()
    engine = TurnEngine(config=GameConfig(cpu_delay=0.5), rng=random.Random(3), scheduler=clock)
    engine.start_new_game(3, is_simulation=True)
    engine.start_new_game(3, is_simulation=True)
    assert clock.pending == 2

    with caplog.at_level(logging.DEBUG, logger="macau.engine.turn_engine"):
        clock.advance(0.0)
    assert "Dropped CPU step from game 1" in caplog.text
    assert clock.pending == 1
    assert not any(" played " in line for line in engine.history)
