from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from threadline.core.database import get_db
from threadline.core.security import get_current_user
from threadline.models import User
from threadline.schemas.post import PostCreate, PostResponse
from threadline.services.posts import PostService

router = APIRouter()


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """发帖"""
    return PostService(db).create_post(current_user.id, data.title, data.content)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    db: Session = Depends(get_db),
):
    """帖子详情"""
    return PostService(db).get_post(post_id)
