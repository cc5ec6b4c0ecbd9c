from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from threadline.core.database import get_db
from threadline.core.security import create_access_token, get_current_user
from threadline.models import User
from threadline.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from threadline.services.users import UserService

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=create_access_token({"sub": user.id}),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
):
    """注册并直接返回登录凭证"""
    user = UserService(db).register(request.name, request.email, request.password)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
):
    """邮箱 + 密码登录"""
    user = UserService(db).authenticate(request.email, request.password)
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    return current_user
