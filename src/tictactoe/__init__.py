"""Tic-tac-toe package exposing the board rules, game events and the web app factory."""

from .events import EventBus, GameController
from .game import Board, GameStatus, InvalidMove
from .ui import create_app

__all__ = [
    "Board",
    "EventBus",
    "GameController",
    "GameStatus",
    "InvalidMove",
    "create_app",
]
