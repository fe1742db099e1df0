from pydantic import BaseModel

from loan_backend.models.user import Role, User


class SessionUser(BaseModel):
    """The logged-in user for the duration of a request."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: Role

    class Config:
        from_attributes = True

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls.model_validate(user)
