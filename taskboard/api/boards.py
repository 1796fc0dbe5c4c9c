"""Boards API router: CRUD, membership, ownership, statistics."""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from taskboard.api.deps import get_board_service
from taskboard.schemas.schemas import (
    BoardCreate, BoardMemberAdd, BoardOut, BoardStatistics, BoardUpdate,
    MessageResponse, OwnershipTransfer,
)
from taskboard.services.board_service import BoardService
from taskboard.core.security import get_current_user_id

router = APIRouter(prefix="/boards", tags=["boards"])


@router.post("/", response_model=BoardOut, status_code=201)
async def create_board(
    body: BoardCreate,
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """Create a board owned by the current user."""
    board = boards.create(body.name, user_id, body.description, body.color)
    return BoardOut.model_validate(board)


@router.get("/", response_model=list[BoardOut])
async def list_boards(
    search: Optional[str] = Query(None),
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """List boards the current user owns or is a member of."""
    return [BoardOut.model_validate(b) for b in boards.search(search, user_id)]


@router.get("/{board_id}", response_model=BoardOut)
async def get_board(
    board_id: str,
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """Get a single board."""
    return BoardOut.model_validate(boards.get(board_id, user_id))


@router.put("/{board_id}", response_model=BoardOut)
async def update_board(
    board_id: str,
    body: BoardUpdate,
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """Rename or restyle a board (owner only)."""
    fields = body.model_dump(exclude_unset=True)
    return BoardOut.model_validate(boards.update(board_id, fields, user_id))


@router.delete("/{board_id}", response_model=MessageResponse)
async def delete_board(
    board_id: str,
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """Deactivate a board and delete its tasks (owner only)."""
    boards.deactivate(board_id, user_id)
    return MessageResponse(message="Board deleted", detail={"id": board_id})


@router.post("/{board_id}/members", response_model=BoardOut)
async def add_member(
    board_id: str,
    body: BoardMemberAdd,
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """Invite a user to the board."""
    return BoardOut.model_validate(boards.add_member(board_id, body.user_id, user_id))


@router.delete("/{board_id}/members/{member_id}", response_model=BoardOut)
async def remove_member(
    board_id: str,
    member_id: str,
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """Remove a member from the board."""
    return BoardOut.model_validate(boards.remove_member(board_id, member_id, user_id))


@router.post("/{board_id}/transfer", response_model=BoardOut)
async def transfer_ownership(
    board_id: str,
    body: OwnershipTransfer,
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """Hand the board over to another member."""
    return BoardOut.model_validate(boards.transfer_ownership(board_id, body.new_owner_id, user_id))


@router.get("/{board_id}/statistics", response_model=BoardStatistics)
async def board_statistics(
    board_id: str,
    boards: BoardService = Depends(get_board_service),
    user_id: str = Depends(get_current_user_id),
):
    """Task counts per column, overdue count, member count."""
    return boards.statistics(board_id, user_id)
