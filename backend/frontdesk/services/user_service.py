"""
User service - guests and staff accounts
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from frontdesk.models.ontology import User, UserRole
from frontdesk.models.schemas import UserCreate
from frontdesk.security.auth import get_password_hash, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """User service"""

    def __init__(self, db: Session):
        self.db = db

    def get_users(self, role: Optional[UserRole] = None, is_active: Optional[bool] = None) -> List[User]:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active == is_active)
        return query.order_by(User.id).all()

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, data: UserCreate) -> User:
        """Create a user with a bcrypt-hashed password"""
        if self.get_user_by_username(data.username):
            raise ValueError(f"Username '{data.username}' already exists")

        user = User(
            username=data.username,
            password_hash=get_password_hash(data.password),
            name=data.name,
            email=data.email,
            role=data.role
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User '{user.username}' created with role {user.role.value}")
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the active user matching the credentials, else None"""
        user = self.get_user_by_username(username)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user
