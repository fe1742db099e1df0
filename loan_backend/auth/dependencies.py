import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from loan_backend.auth import jwt_handler
from loan_backend.auth.principal import SessionUser
from loan_backend.database import get_db
from loan_backend.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> SessionUser | None:
    """Resolve the bearer token to the logged-in user, or None when there is no valid session."""
    if credentials is None:
        return None

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        logger.info("Rejected invalid or expired access token")
        return None

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        logger.info("Rejected access token with invalid subject")
        return None

    user = db.get(User, int(subject))
    if user is None:
        logger.info("Access token subject %s no longer exists", subject)
        return None
    return SessionUser.from_user(user)


def get_current_user(current_user: SessionUser | None = Depends(get_optional_user)) -> SessionUser:
    if current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not logged in")
    return current_user
