from fastapi import APIRouter, Depends, Request, status

from gtd_todo.app.security import get_current_user_id
from gtd_todo.domain.user_models import LoginRequest, TokenResponse, User, UserCreate
from gtd_todo.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_service(request: Request) -> AuthService:
    return request.app.state.auth_service


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, svc: AuthService = Depends(get_service)):
    return await svc.register(payload)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, svc: AuthService = Depends(get_service)):
    return await svc.login(payload)


@router.get("/me", response_model=User)
async def me(user_id: str = Depends(get_current_user_id), svc: AuthService = Depends(get_service)):
    return await svc.get_user(user_id)
