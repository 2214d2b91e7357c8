"""Boards API router."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from micromiro_backend.app.api.deps import get_current_identity, get_service
from micromiro_backend.app.services.auth import Identity
from micromiro_backend.app.services.boards import (
    Board,
    BoardElement,
    BoardPermission,
    BoardsService,
    ElementFields,
)

router = APIRouter(prefix="/protected/boards", tags=["boards"])


# ========== Request/Response Models ==========

class CreateBoardRequest(BaseModel):
    """Request to create a board."""
    title: str
    description: Optional[str] = None
    is_public: bool = False


class UpdateBoardRequest(BaseModel):
    """Request to update a board. Omitted fields are reset, not kept."""
    title: str = ""
    description: Optional[str] = None
    is_public: bool = False


class BoardResponse(BaseModel):
    """Board response."""
    id: int
    title: str
    description: Optional[str]
    creator_id: int
    is_public: bool
    created_at: str
    updated_at: str


class CreateElementRequest(BaseModel):
    """Request to place an element on a board."""
    type: str = Field(..., description="Free-form tag, e.g. note or shape")
    content: Optional[str] = None
    position_x: int = 0
    position_y: int = 0
    width: int = 0
    height: int = 0


class UpdateElementRequest(BaseModel):
    """Request to update an element. Omitted fields are reset, not kept."""
    type: str = ""
    content: Optional[str] = None
    position_x: int = 0
    position_y: int = 0
    width: int = 0
    height: int = 0


class ElementResponse(BaseModel):
    """Board element response."""
    id: int
    board_id: int
    type: str
    content: Optional[str]
    position_x: int
    position_y: int
    width: int
    height: int
    created_at: str
    updated_at: str


class BoardDetailResponse(BaseModel):
    """Board with its elements."""
    board: BoardResponse
    elements: List[ElementResponse]


class GrantPermissionRequest(BaseModel):
    can_edit: bool = False


class PermissionResponse(BaseModel):
    id: int
    board_id: int
    user_id: int
    can_edit: bool
    created_at: str
    updated_at: str


class MessageResponse(BaseModel):
    message: str


class BoardCreatedResponse(MessageResponse):
    board_id: int


class ElementCreatedResponse(MessageResponse):
    element_id: int


# ========== Helper Functions ==========

def _board_response(board: Board) -> BoardResponse:
    return BoardResponse(
        id=board.id,
        title=board.title,
        description=board.description,
        creator_id=board.creator_id,
        is_public=board.is_public,
        created_at=board.created_at.isoformat(),
        updated_at=board.updated_at.isoformat(),
    )


def _element_response(element: BoardElement) -> ElementResponse:
    return ElementResponse(
        id=element.id,
        board_id=element.board_id,
        type=element.type,
        content=element.content,
        position_x=element.position_x,
        position_y=element.position_y,
        width=element.width,
        height=element.height,
        created_at=element.created_at.isoformat(),
        updated_at=element.updated_at.isoformat(),
    )


def _permission_response(permission: BoardPermission) -> PermissionResponse:
    return PermissionResponse(
        id=permission.id,
        board_id=permission.board_id,
        user_id=permission.user_id,
        can_edit=permission.can_edit,
        created_at=permission.created_at.isoformat(),
        updated_at=permission.updated_at.isoformat(),
    )


def _element_fields(payload: CreateElementRequest | UpdateElementRequest) -> ElementFields:
    return ElementFields(
        type=payload.type,
        content=payload.content,
        position_x=payload.position_x,
        position_y=payload.position_y,
        width=payload.width,
        height=payload.height,
    )


# ========== Board Endpoints ==========

@router.post("", response_model=BoardCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_board(
    payload: CreateBoardRequest,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> BoardCreatedResponse:
    """Create a new board owned by the caller."""
    board = service.create_board(
        identity.user_id,
        title=payload.title,
        description=payload.description,
        is_public=payload.is_public,
    )
    return BoardCreatedResponse(message="Board created successfully", board_id=board.id)


@router.get("", response_model=List[BoardResponse])
def list_boards(
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> List[BoardResponse]:
    """List boards the caller created or was granted access to."""
    return [_board_response(board) for board in service.list_boards(identity.user_id)]


@router.get("/{board_id}", response_model=BoardDetailResponse)
def get_board(
    board_id: int,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> BoardDetailResponse:
    """Get board details with elements."""
    detail = service.get_board(identity.user_id, board_id)
    return BoardDetailResponse(
        board=_board_response(detail.board),
        elements=[_element_response(element) for element in detail.elements],
    )


@router.put("/{board_id}", response_model=MessageResponse)
def update_board(
    board_id: int,
    payload: UpdateBoardRequest,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> MessageResponse:
    """Update a board."""
    service.update_board(
        identity.user_id,
        board_id,
        title=payload.title,
        description=payload.description,
        is_public=payload.is_public,
    )
    return MessageResponse(message="Board updated successfully")


@router.delete("/{board_id}", response_model=MessageResponse)
def delete_board(
    board_id: int,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> MessageResponse:
    """Delete a board with its elements and permissions."""
    service.delete_board(identity.user_id, board_id)
    return MessageResponse(message="Board deleted successfully")


# ========== Element Endpoints ==========

@router.post(
    "/{board_id}/elements",
    response_model=ElementCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_element(
    board_id: int,
    payload: CreateElementRequest,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> ElementCreatedResponse:
    """Create a new board element."""
    element = service.create_element(identity.user_id, board_id, _element_fields(payload))
    return ElementCreatedResponse(message="Element created successfully", element_id=element.id)


@router.put("/{board_id}/elements/{element_id}", response_model=MessageResponse)
def update_element(
    board_id: int,
    element_id: int,
    payload: UpdateElementRequest,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> MessageResponse:
    """Update a board element."""
    service.update_element(identity.user_id, board_id, element_id, _element_fields(payload))
    return MessageResponse(message="Element updated successfully")


@router.delete("/{board_id}/elements/{element_id}", response_model=MessageResponse)
def delete_element(
    board_id: int,
    element_id: int,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> MessageResponse:
    """Delete a board element."""
    service.delete_element(identity.user_id, board_id, element_id)
    return MessageResponse(message="Element deleted successfully")


# ========== Permission Endpoints ==========

@router.get("/{board_id}/permissions", response_model=List[PermissionResponse])
def list_permissions(
    board_id: int,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> List[PermissionResponse]:
    """List grants on a board (creator only)."""
    permissions = service.list_permissions(identity.user_id, board_id)
    return [_permission_response(permission) for permission in permissions]


@router.put("/{board_id}/permissions/{user_id}", response_model=PermissionResponse)
def grant_permission(
    board_id: int,
    user_id: int,
    payload: GrantPermissionRequest,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> PermissionResponse:
    """Grant or change another user's rights on a board (creator only)."""
    permission = service.grant_permission(
        identity.user_id, board_id, user_id, can_edit=payload.can_edit
    )
    return _permission_response(permission)


@router.delete("/{board_id}/permissions/{user_id}", response_model=MessageResponse)
def revoke_permission(
    board_id: int,
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    service: BoardsService = Depends(get_service),
) -> MessageResponse:
    """Revoke another user's grant on a board (creator only)."""
    service.revoke_permission(identity.user_id, board_id, user_id)
    return MessageResponse(message="Permission revoked successfully")
