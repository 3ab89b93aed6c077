"""
Authentication and authorization

Bearer JWT tokens identify the acting user. Creating a booking also accepts
anonymous calls: no token means guest self-service and a NULL actor.
"""
import bcrypt
import logging
from datetime import datetime, timedelta, UTC
from typing import List, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from frontdesk.config import settings
from frontdesk.database import get_db
from frontdesk.models.ontology import User, UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(user_id: int, role: UserRole) -> str:
    """Create a JWT for a user"""
    expire = datetime.now(UTC) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)
    to_encode = {
        "sub": str(user_id),
        "role": role.value if isinstance(role, UserRole) else str(role),
        "exp": expire
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode a JWT"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials"
        )


def _load_user(token: str, db: Session) -> User:
    payload = decode_token(token)
    user = db.query(User).filter(User.id == int(payload.get("sub"))).first()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is disabled"
        )
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the authenticated user; 401/403 without a token"""
    return _load_user(credentials.credentials, db)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Resolve the user if a token was sent, else None"""
    if credentials is None:
        return None
    return _load_user(credentials.credentials, db)


def require_role(allowed_roles: List[UserRole]):
    """Dependency factory: reject users outside allowed_roles"""
    async def role_checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            logger.warning(f"User {current_user.id} ({current_user.role.value}) denied; needs {allowed_roles}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return current_user
    return role_checker


require_manager = require_role([UserRole.MANAGER])
require_staff = require_role([UserRole.MANAGER, UserRole.RECEPTIONIST])
