"""Comment API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from wemanage.api.dependencies import get_current_user
from wemanage.api.tasks import get_task
from wemanage.database import get_db
from wemanage.models.comment import Comment
from wemanage.models.user import User
from wemanage.schemas.comment import CommentCreate, CommentResponse

router = APIRouter(prefix="/api/tasks", tags=["comments"])


@router.get("/{task_id}/comments", response_model=list[CommentResponse])
def get_comments(
    task_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a task's comments, oldest first."""
    get_task(db, task_id, current_user)
    return (
        db.query(Comment)
        .filter(Comment.task_id == task_id)
        .order_by(Comment.created_at, Comment.id)
        .all()
    )


@router.post(
    "/{task_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED
)
def add_comment(
    task_id: int,
    comment_data: CommentCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Add a comment to a task."""
    get_task(db, task_id, current_user)
    comment = Comment(content=comment_data.content, task_id=task_id, author_id=current_user.id)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment
