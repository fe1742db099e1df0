"""User model definitions."""

import enum

from sqlalchemy import Column, Enum, Integer, String
from sqlalchemy.orm import relationship

from loan_backend.database import Base


class Role(str, enum.Enum):
    """Account roles. Managers may list, approve and reject every loan."""
    MANAGER = "Manager"
    USER = "User"


class User(Base):
    """Represents a registered borrower or manager."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone_number = Column(String)
    role = Column(
        Enum(Role, name="user_role", values_callable=lambda roles: [role.value for role in roles]),
        nullable=False,
        default=Role.USER,
    )

    loans = relationship("Loan", back_populates="user")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
