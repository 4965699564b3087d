"""Tests for the game controller and its event channel."""

import pytest

from tictactoe.events import (
    BoardReset,
    EventBus,
    GameConcluded,
    GameDrawn,
    GameController,
    LineCompleted,
    MarkPlaced,
)
from tictactoe.game import InvalidMove


def record(bus, *event_types):
    seen = []
    for event_type in event_types:
        bus.subscribe(event_type, seen.append)
    return seen


def test_successful_move_publishes_mark():
    controller = GameController()
    seen = record(controller.bus, MarkPlaced, LineCompleted)
    controller.play(1, 2)
    assert seen == [MarkPlaced(row=1, col=2, mark="X")]


def test_rejected_move_publishes_nothing():
    controller = GameController()
    controller.play(0, 0)
    seen = record(controller.bus, MarkPlaced, LineCompleted, BoardReset)
    with pytest.raises(InvalidMove):
        controller.play(0, 0)
    assert seen == []


def test_winning_move_publishes_line_after_mark():
    controller = GameController()
    for row, col in [(0, 0), (2, 0), (1, 1), (2, 2), (0, 1)]:
        controller.play(row, col)
    seen = record(controller.bus, MarkPlaced, LineCompleted)
    controller.play(2, 1)
    assert seen == [
        MarkPlaced(row=2, col=1, mark="O"),
        LineCompleted(player="O", line=((2, 0), (2, 1), (2, 2))),
    ]


def test_reset_of_finished_game_signals_conclusion_once():
    controller = GameController()
    for row, col in [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]:
        controller.play(row, col)
    seen = record(controller.bus, GameConcluded, BoardReset)
    controller.reset()
    controller.reset()
    assert len([e for e in seen if isinstance(e, GameConcluded)]) == 1
    assert seen[0].status.winner == "X"
    assert seen[1:] == [BoardReset(), BoardReset()]
    assert not controller.status().is_over


def test_reset_mid_game_does_not_signal_conclusion():
    controller = GameController()
    controller.play(0, 0)
    seen = record(controller.bus, GameConcluded)
    controller.reset()
    assert seen == []


def test_unsubscribe_and_handler_errors_propagate():
    bus = EventBus()
    calls = []
    bus.subscribe(BoardReset, calls.append)
    bus.unsubscribe(BoardReset, calls.append)
    bus.unsubscribe(BoardReset, calls.append)
    bus.publish(BoardReset())
    assert calls == []

    def boom(event):
        raise RuntimeError("renderer failed")

    bus.subscribe(BoardReset, boom)
    with pytest.raises(RuntimeError):
        bus.publish(BoardReset())


def test_drawn_game_publishes_draw_not_line():
    controller = GameController()
    moves = [(0, 0), (0, 1), (0, 2), (1, 1), (1, 0), (1, 2), (2, 1), (2, 0)]
    for row, col in moves:
        controller.play(row, col)
    seen = record(controller.bus, LineCompleted, GameDrawn)
    controller.play(2, 2)
    assert seen == [GameDrawn()]
