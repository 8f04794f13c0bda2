"""
Admin endpoints for staff accounts and permissions.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from api.dependencies import require_admin
from api.errors import to_http_exception
from core.database import get_db
from core.exceptions import YardError
from models.user import User
from schemas.user import UserCreate, UserResponse, UserUpdate
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db)):
    """List all staff accounts."""
    return UserService.list_users(db)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    try:
        return UserService.get_user(user_id, db)
    except YardError as exc:
        raise to_http_exception(exc)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create a new staff account."""
    try:
        return UserService.create_user(payload, db)
    except YardError as exc:
        raise to_http_exception(exc)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Update an account (role, permissions, password or active flag)."""
    if str(user_id) == str(current_user.id) and payload.is_active is False:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")
    try:
        return UserService.update_user(user_id, payload, db)
    except YardError as exc:
        raise to_http_exception(exc)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if str(user_id) == str(current_user.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    try:
        UserService.delete_user(user_id, db)
    except YardError as exc:
        raise to_http_exception(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
