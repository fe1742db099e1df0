import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loan_backend.auth import jwt_handler
from loan_backend.auth.dependencies import get_current_user
from loan_backend.auth.principal import SessionUser
from loan_backend.database import get_db
from loan_backend.models.user import Role
from loan_backend.routes.common import database_unavailable
from loan_backend.services import account_service
from loan_backend.services.errors import AccountError

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)

MAX_PASSWORD_BYTES = 72


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=8)
    first_name: str = Field(alias='firstName', min_length=1)
    last_name: str = Field(alias='lastName', min_length=1)
    phone_number: str | None = Field(default=None, alias='phoneNumber')
    role: Role = Role.USER

    class Config:
        populate_by_name = True

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator('password')
    @classmethod
    def validate_password_length(cls, value: str) -> str:
        if len(value.encode('utf-8')) > MAX_PASSWORD_BYTES:
            raise ValueError(f'Password must be {MAX_PASSWORD_BYTES} bytes or fewer.')
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone_number: str | None = None
    role: Role

    class Config:
        from_attributes = True


@router.post('/register', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = account_service.create_account(
            db,
            email=data.email,
            password=data.password,
            first_name=data.first_name,
            last_name=data.last_name,
            phone_number=data.phone_number,
            role=data.role,
        )
    except AccountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc
    return user


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = account_service.authenticate(db, data.email, data.password)
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc

    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid email or password')

    logger.info('User id %s logged in', user.id)
    token = jwt_handler.create_access_token(subject=str(user.id), role=user.role.value)
    return TokenResponse(access_token=token)


@router.get('/me', response_model=SessionUser)
def me(current_user: SessionUser = Depends(get_current_user)):
    return current_user
