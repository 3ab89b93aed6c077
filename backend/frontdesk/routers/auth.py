"""
Authentication routes
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from frontdesk.database import get_db
from frontdesk.models.ontology import User
from frontdesk.models.schemas import LoginRequest, LoginResponse, UserResponse
from frontdesk.security.auth import create_access_token, get_current_user
from frontdesk.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange username and password for a bearer token"""
    user = UserService(db).authenticate(data.username, data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )
    return LoginResponse(
        access_token=create_access_token(user.id, user.role),
        user=UserResponse.model_validate(user)
    )


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Current user"""
    return current_user
