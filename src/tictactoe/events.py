"""Game events and the controller that publishes them.

The board never calls out to renderers or ad code. Instead a
``GameController`` drives the board and publishes typed events on an
``EventBus``; collaborators subscribe to the event types they care about.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, DefaultDict, List, Type, TypeVar

from .game import Board, GameStatus, Line, Player

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkPlaced:
    row: int
    col: int
    mark: Player


@dataclass(frozen=True)
class LineCompleted:
    player: Player
    line: Line


@dataclass(frozen=True)
class GameDrawn:
    pass


@dataclass(frozen=True)
class GameConcluded:
    status: GameStatus


@dataclass(frozen=True)
class BoardReset:
    pass


E = TypeVar("E")
Handler = Callable[[object], None]


class EventBus:
    """Synchronous publish/subscribe channel keyed by event type."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> None:
        self._handlers[event_type].append(handler)  # type: ignore[arg-type]

    def unsubscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> None:
        try:
            self._handlers[event_type].remove(handler)  # type: ignore[arg-type]
        except ValueError:
            pass

    def publish(self, event: object) -> None:
        # Handlers run in subscription order; errors propagate to the publisher
        for handler in list(self._handlers[type(event)]):
            handler(event)


@dataclass
class GameController:
    """Drives a ``Board`` and announces what happened on ``bus``."""

    board: Board = field(default_factory=Board)
    bus: EventBus = field(default_factory=EventBus)

    def status(self) -> GameStatus:
        return self.board.status()

    def play(self, row: int, col: int) -> GameStatus:
        player = self.board.current_player
        status = self.board.place_mark(row, col)
        logger.debug("%s placed at (%d, %d) -> %s", player, row, col, status.state)
        self.bus.publish(MarkPlaced(row=row, col=col, mark=player))
        if status.winner is not None and status.line is not None:
            self.bus.publish(LineCompleted(player=status.winner, line=status.line))
        elif status.is_over:
            self.bus.publish(GameDrawn())
        return status

    def reset(self) -> None:
        previous = self.board.status()
        self.board.reset()
        if previous.is_over:
            self.bus.publish(GameConcluded(status=previous))
        self.bus.publish(BoardReset())
