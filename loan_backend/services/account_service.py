import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from loan_backend.auth.passwords import hash_password, verify_password
from loan_backend.models.user import Role, User
from loan_backend.services.errors import AccountError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(
    r"^(?=.{1,64}@)[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)*@[^-][A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*(\.[A-Za-z]{2,})$"
)


def validate_email(email: str) -> bool:
    return EMAIL_PATTERN.match(email) is not None


def create_account(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone_number: str | None = None,
    role: Role = Role.USER,
) -> User:
    if not validate_email(email):
        raise AccountError("Invalid email format")

    if db.query(User).filter(User.email == email).first() is not None:
        raise AccountError("An account with that email already exists")

    user = User(
        email=email,
        hashed_password=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        phone_number=phone_number,
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Concurrent registration won the unique email constraint
        db.rollback()
        raise AccountError("An account with that email already exists") from exc
    db.refresh(user)

    logger.info("Account created for user id %s with role %s", user.id, user.role.value)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = db.query(User).filter(User.email == email).first()
    if user is None or not verify_password(password, user.hashed_password):
        logger.info("Failed login attempt")
        return None
    return user
