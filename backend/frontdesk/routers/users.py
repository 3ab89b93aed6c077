"""
User management routes
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from frontdesk.database import get_db
from frontdesk.models.ontology import User, UserRole
from frontdesk.models.schemas import UserCreate, UserResponse
from frontdesk.security.auth import require_manager
from frontdesk.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
def list_users(
    role: Optional[UserRole] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager)
):
    """List users"""
    return UserService(db).get_users(role, is_active)


@router.post("", response_model=UserResponse)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager)
):
    """Create a guest or staff account"""
    try:
        return UserService(db).create_user(data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
