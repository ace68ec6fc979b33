"""
User API Routers

- ``auth_router``: registration, login, profile and password reset
- ``users_router``: account administration, superadmin only
- ``trainees_router``: trainee listing for admins
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import EmailStr, Field

from trainassess.api import APIResponse
from trainassess.common.auth import Identity, Operation, require
from trainassess.common.schemas import CamelModel
from trainassess.users.models import User
from trainassess.users.service import UserService

auth_router = APIRouter()
users_router = APIRouter()
trainees_router = APIRouter()


# Request Models
class RegisterRequest(CamelModel):
    name: str
    email: EmailStr
    password: str


class LoginRequest(CamelModel):
    email: str
    password: str


class ResetPasswordRequest(CamelModel):
    current_password: str
    new_password: str


class CreateUserRequest(CamelModel):
    name: str
    email: EmailStr
    password: str
    role: str = Field("trainee", description="trainee or admin")


class UpdateUserRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    password: Optional[str] = None


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def _session(user: User, token: str) -> Dict[str, Any]:
    return {"token": token, "user": user.to_dict()}


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    user, token = await service.register(payload.name, payload.email, payload.password)
    return _session(user, token)


@auth_router.post("/login")
async def login(
    payload: LoginRequest,
    service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    user, token = await service.login(payload.email, payload.password)
    return _session(user, token)


@auth_router.get("/me")
async def me(
    identity: Identity = Depends(require(Operation.VIEW_PROFILE)),
    service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    return (await service.get_profile(identity.id)).to_dict()


@auth_router.post("/reset-password")
async def reset_password(
    payload: ResetPasswordRequest,
    identity: Identity = Depends(require(Operation.RESET_PASSWORD)),
    service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    await service.reset_password(identity.id, payload.current_password, payload.new_password)
    return APIResponse.success(message="Password reset successfully")


@users_router.get("")
async def list_users(
    identity: Identity = Depends(require(Operation.MANAGE_USERS)),
    service: UserService = Depends(get_user_service)
) -> List[Dict[str, Any]]:
    return [user.to_dict() for user in await service.list_users()]


@users_router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: CreateUserRequest,
    identity: Identity = Depends(require(Operation.MANAGE_USERS)),
    service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    user = await service.create_user(payload.name, payload.email, payload.password, payload.role)
    return user.to_dict()


@users_router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: UpdateUserRequest,
    identity: Identity = Depends(require(Operation.MANAGE_USERS)),
    service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    user = await service.update_user(identity, user_id, payload.model_dump(exclude_none=True))
    return user.to_dict()


@users_router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    identity: Identity = Depends(require(Operation.MANAGE_USERS)),
    service: UserService = Depends(get_user_service)
) -> Dict[str, Any]:
    await service.delete_user(user_id)
    return APIResponse.success(message="User deleted successfully")


@trainees_router.get("")
async def list_trainees(
    identity: Identity = Depends(require(Operation.LIST_TRAINEES)),
    service: UserService = Depends(get_user_service)
) -> List[Dict[str, Any]]:
    return [user.to_dict() for user in await service.list_trainees()]
