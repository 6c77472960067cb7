"""Authentication endpoints."""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from aibvs.db import get_db
from aibvs.models.user import User
from aibvs.schemas.auth import LoginRequest, RegisterResponse, TokenResponse
from aibvs.schemas.user import UserCreate, UserRead
from aibvs.security import Identity, get_current_identity
from aibvs.services import auth as auth_service
from aibvs.services import users as user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)) -> TokenResponse:
    origin = request.client.host if request.client else None
    token, user = auth_service.authenticate(
        db,
        payload.username,
        payload.password,
        settings=request.app.state.settings,
        origin=origin,
    )
    return TokenResponse(token=token, user=UserRead.model_validate(user))


@router.get("/me", response_model=UserRead)
def me(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> User:
    """Return the profile behind the bearer token."""

    return user_service.get_user(db, identity.user_id)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> RegisterResponse:
    user = user_service.create_user(db, payload, actor=identity, action="REGISTER")
    return RegisterResponse(message="User created successfully", user=UserRead.model_validate(user))
