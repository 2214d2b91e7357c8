"""Boards service: board and element use cases with authorization."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from micromiro_backend.app.core.errors import ForbiddenError, NotFoundError, ValidationError
from micromiro_backend.app.services.auth.repository import UsersRepository, get_users_repository

from .access import BOARD_NOT_FOUND, AccessControlEvaluator, BoardAccess
from .elements import BoardElement, ElementsRepository, get_elements_repository
from .repository import Board, BoardPermission, BoardsRepository, get_boards_repository

logger = logging.getLogger(__name__)

ELEMENT_NOT_FOUND = "Element not found on this board"


@dataclass
class BoardDetail:
    """A board with all of its elements."""

    board: Board
    elements: List[BoardElement]


@dataclass
class ElementFields:
    """Mutable element attributes, written together on create and update."""

    type: str
    content: Optional[str] = None
    position_x: int = 0
    position_y: int = 0
    width: int = 0
    height: int = 0


class BoardsService:
    """Service for board operations.

    Every operation takes the authenticated user id explicitly and checks
    access before touching storage.
    """

    def __init__(
        self,
        boards: BoardsRepository,
        elements: ElementsRepository,
        users: UsersRepository,
    ) -> None:
        self.boards = boards
        self.elements = elements
        self.users = users
        self.access = AccessControlEvaluator(boards)

    # ========== Helpers ==========

    def _require_edit(self, user_id: int, board_id: int) -> BoardAccess:
        access = self.access.evaluate(user_id, board_id)
        if not access.can_edit:
            logger.debug("Edit denied user_id=%s board_id=%s", user_id, board_id)
            raise ForbiddenError("You do not have permission to edit this board")
        return access

    def _require_creator(self, user_id: int, board_id: int, action: str) -> BoardAccess:
        access = self.access.evaluate(user_id, board_id)
        if not access.is_creator:
            logger.debug("%s denied user_id=%s board_id=%s", action, user_id, board_id)
            raise ForbiddenError(f"Only the board creator can {action}")
        return access

    @staticmethod
    def _check_title(title: str) -> str:
        if not (title or "").strip():
            raise ValidationError("Board title is required")
        return title

    # ========== Boards ==========

    def create_board(
        self,
        user_id: int,
        title: str,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> Board:
        """Create a board owned by ``user_id``. Any authenticated user may create."""
        board_id = self.boards.create_board(
            creator_id=user_id,
            title=self._check_title(title),
            description=description,
            is_public=is_public,
        )
        logger.info("Board created board_id=%s creator_id=%s", board_id, user_id)

        board = self.boards.get_board(board_id)
        if board is None:
            raise NotFoundError(BOARD_NOT_FOUND)
        return board

    def list_boards(self, user_id: int) -> List[Board]:
        """Boards the user created, then boards shared with them by a grant.

        Public boards without ownership or a grant are not included.
        """
        return self.boards.list_owned_boards(user_id) + self.boards.list_shared_boards(user_id)

    def get_board(self, user_id: int, board_id: int) -> BoardDetail:
        """Board with its elements. Missing and invisible boards look the same."""
        access = self.access.evaluate(user_id, board_id)
        if not access.can_view:
            logger.debug("View denied user_id=%s board_id=%s", user_id, board_id)
            raise NotFoundError("Board not found or access denied")

        return BoardDetail(board=access.board, elements=self.elements.list_elements(board_id))

    def update_board(
        self,
        user_id: int,
        board_id: int,
        title: str,
        description: Optional[str],
        is_public: bool,
    ) -> Board:
        """Overwrite title, description and visibility. Nothing is kept from the old row."""
        self._require_edit(user_id, board_id)

        if not self.boards.update_board(board_id, title, description, is_public):
            raise NotFoundError(BOARD_NOT_FOUND)

        board = self.boards.get_board(board_id)
        if board is None:
            raise NotFoundError(BOARD_NOT_FOUND)
        return board

    def delete_board(self, user_id: int, board_id: int) -> None:
        """Delete a board with all of its elements and grants, atomically.

        Only the creator may delete; edit grants never allow it.
        """
        self._require_creator(user_id, board_id, "delete it")

        with self.boards.pool.transaction() as con:
            element_count = self.elements.delete_elements_for_board(board_id, con=con)
            grant_count = self.boards.delete_permissions_for_board(board_id, con=con)
            if not self.boards.delete_board(board_id, con=con):
                raise NotFoundError(BOARD_NOT_FOUND)

        logger.info(
            "Board deleted board_id=%s elements=%s permissions=%s",
            board_id,
            element_count,
            grant_count,
        )

    # ========== Elements ==========

    def create_element(self, user_id: int, board_id: int, fields: ElementFields) -> BoardElement:
        """Place a new element on the board."""
        self._require_edit(user_id, board_id)
        if not (fields.type or "").strip():
            raise ValidationError("Element type is required")

        element_id = self.elements.create_element(
            board_id=board_id,
            element_type=fields.type,
            content=fields.content,
            position_x=fields.position_x,
            position_y=fields.position_y,
            width=fields.width,
            height=fields.height,
        )

        element = self.elements.get_element(board_id, element_id)
        if element is None:
            raise NotFoundError(ELEMENT_NOT_FOUND)
        return element

    def update_element(
        self, user_id: int, board_id: int, element_id: int, fields: ElementFields
    ) -> BoardElement:
        """Overwrite every field of an element that belongs to ``board_id``."""
        self._require_edit(user_id, board_id)

        # Not atomic with the update; a concurrent delete surfaces as NotFound below
        if self.elements.get_element(board_id, element_id) is None:
            raise NotFoundError(ELEMENT_NOT_FOUND)

        updated = self.elements.update_element(
            board_id=board_id,
            element_id=element_id,
            element_type=fields.type,
            content=fields.content,
            position_x=fields.position_x,
            position_y=fields.position_y,
            width=fields.width,
            height=fields.height,
        )
        element = self.elements.get_element(board_id, element_id) if updated else None
        if element is None:
            raise NotFoundError(ELEMENT_NOT_FOUND)
        return element

    def delete_element(self, user_id: int, board_id: int, element_id: int) -> None:
        self._require_edit(user_id, board_id)

        if not self.elements.delete_element(board_id, element_id):
            raise NotFoundError(ELEMENT_NOT_FOUND)

    # ========== Permission grants ==========

    def list_permissions(self, user_id: int, board_id: int) -> List[BoardPermission]:
        self._require_creator(user_id, board_id, "manage permissions")
        return self.boards.list_permissions(board_id)

    def grant_permission(
        self, user_id: int, board_id: int, target_user_id: int, can_edit: bool
    ) -> BoardPermission:
        """Grant view (and optionally edit) rights to another user.

        Granting again replaces ``can_edit``.
        """
        access = self._require_creator(user_id, board_id, "manage permissions")

        if target_user_id == access.board.creator_id:
            raise ValidationError("The board creator's rights cannot be changed")
        if self.users.get_user(target_user_id) is None:
            raise NotFoundError("User not found")

        permission = self.boards.upsert_permission(board_id, target_user_id, can_edit)
        logger.info(
            "Permission granted board_id=%s user_id=%s can_edit=%s",
            board_id,
            target_user_id,
            can_edit,
        )
        return permission

    def revoke_permission(self, user_id: int, board_id: int, target_user_id: int) -> None:
        self._require_creator(user_id, board_id, "manage permissions")

        if not self.boards.delete_permission(board_id, target_user_id):
            raise NotFoundError("Permission not found")
        logger.info("Permission revoked board_id=%s user_id=%s", board_id, target_user_id)


@lru_cache(maxsize=1)
def get_boards_service() -> BoardsService:
    """Get boards service singleton."""
    return BoardsService(
        get_boards_repository(),
        get_elements_repository(),
        get_users_repository(),
    )
