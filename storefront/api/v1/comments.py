"""Product comments: list, detail, create and edit."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.api.v1.auth import get_current_user
from storefront.api.v1.guards import not_deleted, require_entity
from storefront.core.database import get_db
from storefront.models import Comment, Role
from storefront.schemas.auth import CurrentUser
from storefront.schemas.comment import (
    CommentCreate,
    CommentListResponse,
    CommentOut,
    CommentUpdate,
)

router = APIRouter()

existing_comment = require_entity(not_deleted(Comment), "Comment not found")


@router.get("", response_model=CommentListResponse)
def list_comments(
    db: Annotated[Session, Depends(get_db)],
    product_id: int | None = None,
) -> CommentListResponse:
    """List visible comments, newest first; optionally for one product."""
    query = db.query(Comment).filter(Comment.is_delete.is_(False))
    if product_id is not None:
        query = query.filter(Comment.product_id == product_id)
    comments = query.order_by(Comment.id.desc()).all()
    return CommentListResponse(
        comments=[CommentOut.model_validate(c) for c in comments]
    )


@router.get("/{entity_id}", response_model=CommentOut)
def get_comment(comment: Annotated[Comment, Depends(existing_comment)]) -> Comment:
    return comment


@router.post("", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_comment(
    body: CommentCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> Comment:
    comment = Comment(
        user_id=current_user.id,
        product_id=body.product_id,
        content=body.content,
        is_delete=False,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


@router.put("/{entity_id}", response_model=CommentOut)
def update_comment(
    body: CommentUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    comment: Annotated[Comment, Depends(existing_comment)],
    db: Annotated[Session, Depends(get_db)],
) -> Comment:
    """Edit a comment; only its author or an admin may do so."""
    if comment.user_id != current_user.id and current_user.role != Role.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the author can edit this comment",
        )
    comment.content = body.content
    db.commit()
    db.refresh(comment)
    return comment
