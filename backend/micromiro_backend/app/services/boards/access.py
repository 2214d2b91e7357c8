"""Board access control: who may view or edit a board."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from micromiro_backend.app.core.errors import NotFoundError

from .repository import Board, BoardPermission, BoardsRepository

BOARD_NOT_FOUND = "Board not found"


@dataclass(frozen=True)
class BoardAccess:
    """A board together with the caller's rights on it.

    Rules:
    - the creator can view and edit, and no grant row changes that
    - any grant row (read-only or not) or ``is_public`` allows viewing
    - only a grant with ``can_edit`` allows a non-creator to edit
    """

    board: Board
    user_id: int
    permission: Optional[BoardPermission]

    @property
    def is_creator(self) -> bool:
        return self.board.creator_id == self.user_id

    @property
    def can_view(self) -> bool:
        return self.is_creator or self.board.is_public or self.permission is not None

    @property
    def can_edit(self) -> bool:
        if self.is_creator:
            return True
        return self.permission is not None and self.permission.can_edit


class AccessControlEvaluator:
    """Read-only evaluation of board rights against ownership and grants."""

    def __init__(self, boards: BoardsRepository) -> None:
        self.boards = boards

    def evaluate(self, user_id: int, board_id: int) -> BoardAccess:
        """Load the board and the caller's grant once, for several checks.

        Raises:
            NotFoundError: If the board does not exist
        """
        board = self.boards.get_board(board_id)
        if board is None:
            raise NotFoundError(BOARD_NOT_FOUND)

        permission = None
        if board.creator_id != user_id:
            permission = self.boards.get_permission(board_id, user_id)

        return BoardAccess(board=board, user_id=user_id, permission=permission)

    def can_view(self, user_id: int, board_id: int) -> bool:
        return self.evaluate(user_id, board_id).can_view

    def can_edit(self, user_id: int, board_id: int) -> bool:
        return self.evaluate(user_id, board_id).can_edit
