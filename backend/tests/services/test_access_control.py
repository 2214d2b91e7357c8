"""Tests for board access control decisions."""

from __future__ import annotations

import pytest

from micromiro_backend.app.core.errors import NotFoundError
from micromiro_backend.app.services.boards import AccessControlEvaluator, BoardsRepository


@pytest.fixture
def evaluator(boards_repo: BoardsRepository) -> AccessControlEvaluator:
    return AccessControlEvaluator(boards_repo)


@pytest.fixture
def private_board(boards_repo: BoardsRepository, owner: int) -> int:
    return boards_repo.create_board(owner, "Private", is_public=False)


@pytest.fixture
def public_board(boards_repo: BoardsRepository, owner: int) -> int:
    return boards_repo.create_board(owner, "Public", is_public=True)


class TestCreatorRights:
    """The creator always has full rights."""

    def test_creator_can_view_and_edit(self, evaluator, private_board, owner):
        access = evaluator.evaluate(owner, private_board)

        assert access.is_creator
        assert access.can_view
        assert access.can_edit

    def test_grant_row_cannot_reduce_creator_rights(
        self, evaluator, boards_repo, private_board, owner
    ):
        """Even a read-only row for the creator leaves edit rights intact."""
        boards_repo.upsert_permission(private_board, owner, can_edit=False)

        assert evaluator.can_edit(owner, private_board)


class TestPrivateBoards:
    """Other users need a grant on private boards."""

    def test_stranger_denied(self, evaluator, private_board, other):
        assert evaluator.can_view(other, private_board) is False
        assert evaluator.can_edit(other, private_board) is False

    def test_read_only_grant_allows_view_only(
        self, evaluator, boards_repo, private_board, other
    ):
        boards_repo.upsert_permission(private_board, other, can_edit=False)

        assert evaluator.can_view(other, private_board) is True
        assert evaluator.can_edit(other, private_board) is False

    def test_edit_grant_allows_view_and_edit(
        self, evaluator, boards_repo, private_board, other
    ):
        boards_repo.upsert_permission(private_board, other, can_edit=True)

        assert evaluator.can_view(other, private_board) is True
        assert evaluator.can_edit(other, private_board) is True

    def test_revoked_grant_denies_again(self, evaluator, boards_repo, private_board, other):
        boards_repo.upsert_permission(private_board, other, can_edit=True)
        boards_repo.delete_permission(private_board, other)

        assert evaluator.can_view(other, private_board) is False


class TestPublicBoards:
    """Public boards are readable by anyone, editable only with rights."""

    def test_anyone_can_view(self, evaluator, public_board, other):
        assert evaluator.can_view(other, public_board) is True

    def test_public_does_not_grant_edit(self, evaluator, public_board, other):
        assert evaluator.can_edit(other, public_board) is False

    def test_read_only_grant_still_no_edit(self, evaluator, boards_repo, public_board, other):
        boards_repo.upsert_permission(public_board, other, can_edit=False)

        assert evaluator.can_view(other, public_board) is True
        assert evaluator.can_edit(other, public_board) is False


class TestMissingBoard:
    def test_evaluate_raises_not_found(self, evaluator, owner):
        with pytest.raises(NotFoundError):
            evaluator.evaluate(owner, 9999)

    def test_can_view_raises_not_found(self, evaluator, owner):
        with pytest.raises(NotFoundError):
            evaluator.can_view(owner, 9999)

    def test_can_edit_raises_not_found(self, evaluator, owner):
        with pytest.raises(NotFoundError):
            evaluator.can_edit(owner, 9999)
