from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from backend.auth.dependencies import get_current_user
from backend.auth.roles import Role, can_access_route, capabilities_for
from backend.models.user import User

router = APIRouter(tags=['auth'])


class CurrentUserResponse(BaseModel):
    id: int
    email: str
    full_name: str | None = None
    role: Role
    role_label: str
    capabilities: list[str]


class RouteAccessResponse(BaseModel):
    path: str
    allowed: bool


@router.get('/me', response_model=CurrentUserResponse)
def read_current_user(user: User = Depends(get_current_user)):
    return CurrentUserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        role_label=user.role.label,
        capabilities=capabilities_for(user.role),
    )


@router.get('/route-access', response_model=RouteAccessResponse)
def check_route_access(path: str = Query(...), user: User = Depends(get_current_user)):
    return RouteAccessResponse(path=path, allowed=can_access_route(user.role, path))
