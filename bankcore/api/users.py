"""
User API endpoints
"""
import logging
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from bankcore.api.deps import get_user_service
from bankcore.application.users import UserService
from bankcore.domain.user import USER_TYPE_BASIC, User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


# === Request/Response models ===

class CreateUserRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = None
    name: str | None = None
    type: str | None = USER_TYPE_BASIC
    number: str | None = None
    email: str | None = None
    active: bool = True


class UserResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str | None
    type: str | None
    number: str | None
    email: str | None
    active: bool


def _to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        type=user.type,
        number=user.number,
        email=user.email,
        active=user.active
    )


# === Endpoints ===

@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    req: CreateUserRequest,
    service: UserService = Depends(get_user_service)
):
    """Зарегистрировать пользователя"""
    user = User.create(
        name=req.name,
        email=req.email,
        type=req.type,
        number=req.number,
        id=req.id,
        active=req.active
    )
    return _to_response(service.register(user))


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    service: UserService = Depends(get_user_service)
):
    """Пользователь по ID"""
    return _to_response(service.get_by_id(user_id))


@router.get("/{user_id}/exists", response_model=bool)
def user_exists(
    user_id: int,
    service: UserService = Depends(get_user_service)
):
    """Есть ли пользователь с таким ID"""
    return service.exists(user_id)
