"""Boards service module for whiteboard functionality."""

from .access import AccessControlEvaluator, BoardAccess
from .elements import BoardElement, ElementsRepository, get_elements_repository
from .repository import (
    Board,
    BoardPermission,
    BoardsRepository,
    get_boards_repository,
)
from .service import BoardDetail, BoardsService, ElementFields, get_boards_service

__all__ = [
    "AccessControlEvaluator",
    "Board",
    "BoardAccess",
    "BoardDetail",
    "BoardElement",
    "BoardPermission",
    "BoardsRepository",
    "BoardsService",
    "ElementFields",
    "ElementsRepository",
    "get_boards_repository",
    "get_boards_service",
    "get_elements_repository",
]
