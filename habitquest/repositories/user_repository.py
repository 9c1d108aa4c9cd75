"""
User repository - Data access layer for User model.
"""
from typing import Optional
from sqlalchemy.orm import Session

from habitquest.models import User


class UserRepository:
    """Repository for User data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_referral_code(self, code: str) -> Optional[User]:
        return self.db.query(User).filter(User.referral_code == code).first()

    def add(self, user: User) -> User:
        """Stage a new user and assign its ID"""
        self.db.add(user)
        self.db.flush()
        return user
