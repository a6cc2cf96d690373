from __future__ import annotations

from typing import List

from sqlalchemy.orm import Session

from roadboard.models.board import Board
from roadboard.services.audit import write_audit
from roadboard.services.errors import NotFound
from roadboard.utils.helpers import utcnow
from roadboard.utils.validators import Patch

DEFAULT_BOARD_NAME = "All"
DEFAULT_BOARD_DESCRIPTION = "Default aggregate board (hidden in the UI)"


def find_default_board(session: Session):
    return (
        session.query(Board)
        .filter(Board.name == DEFAULT_BOARD_NAME)
        .order_by(Board.created_at.asc())
        .first()
    )


def get_or_create_default_board(session: Session) -> Board:
    """
    Board.name is not unique, so this is find-then-create rather than an
    upsert. Flushes but does not commit.
    """
    board = find_default_board(session)
    if board:
        return board
    board = Board(name=DEFAULT_BOARD_NAME, description=DEFAULT_BOARD_DESCRIPTION)
    session.add(board)
    session.flush()
    return board


def list_boards(session: Session) -> List[Board]:
    return (
        session.query(Board)
        .order_by(Board.sort_order.asc(), Board.updated_at.desc())
        .all()
    )


def get_board(session: Session, board_id: str) -> Board:
    board = session.get(Board, board_id)
    if not board:
        raise NotFound("Board", board_id)
    return board


def create_board(session: Session, data: dict) -> Board:
    board = Board(
        name=data["name"],
        description=data.get("description") or "",
        sort_order=data.get("sortOrder") or 0,
    )
    session.add(board)
    session.flush()
    write_audit(session, entity="Board", entity_id=board.id, action="CREATE", payload={"board": board.to_dict()})
    session.commit()
    return board


def update_board(session: Session, board_id: str, patch: Patch) -> Board:
    board = get_board(session, board_id)
    if patch.provided("name"):
        board.name = patch["name"]
    if patch.provided("description"):
        board.description = patch["description"] or ""
    if patch.provided("sortOrder"):
        board.sort_order = patch["sortOrder"] or 0
    board.updated_at = utcnow()
    session.flush()
    write_audit(session, entity="Board", entity_id=board.id, action="UPDATE", payload={"board": board.to_dict()})
    session.commit()
    return board


def delete_board(session: Session, board_id: str) -> None:
    """Hard delete; the board's items (and their images/tag links) go with it."""
    board = get_board(session, board_id)
    snapshot = board.to_dict()
    session.delete(board)
    write_audit(session, entity="Board", entity_id=board_id, action="DELETE", payload={"board": snapshot})
    session.commit()
