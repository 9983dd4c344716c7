"""Auth: User Model"""

from sqlalchemy import Column, String

from app.models.base import BaseModel


class User(BaseModel):
    """Back-office user able to sign in"""
    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.email}>"
