"""User endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from aibvs.db import get_db
from aibvs.models.user import User
from aibvs.schemas.user import UserCreate, UserRead, UserUpdate
from aibvs.security import Identity, get_current_identity
from aibvs.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead])
def list_users(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> list[User]:
    return user_service.list_users(db, actor=identity)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> User:
    """Create a new user."""

    return user_service.create_user(db, payload, actor=identity)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> User:
    return user_service.read_user(db, user_id, actor=identity)


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> User:
    return user_service.update_user(db, user_id, payload, actor=identity)


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> dict[str, str]:
    user_service.delete_user(db, user_id, actor=identity)
    return {"message": "User deleted successfully"}
