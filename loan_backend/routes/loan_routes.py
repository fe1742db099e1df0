import logging
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loan_backend.auth.dependencies import get_optional_user
from loan_backend.auth.principal import SessionUser
from loan_backend.database import get_db
from loan_backend.models.loan import LoanStatusId
from loan_backend.routes.common import database_unavailable
from loan_backend.services import loan_service
from loan_backend.services.errors import LoanAccessDeniedError, LoanNotFoundError, LoanValidationError
from loan_backend.services.loan_service import LoanResponse

router = APIRouter(tags=['loans'])

logger = logging.getLogger(__name__)

AMOUNT_MAX_DIGITS = 12
AMOUNT_DECIMAL_PLACES = 2
MAX_TERM_MONTHS = 600
# Largest id a 64-bit integer primary key can hold
MAX_ID = 2**63 - 1

PathId = Annotated[int, Path(ge=1, le=MAX_ID)]


class ReferenceId(BaseModel):
    id: int | None = Field(default=None, ge=1, le=MAX_ID)


class UpdateLoanRequest(BaseModel):
    amount: Decimal | None = Field(default=None, gt=0, max_digits=AMOUNT_MAX_DIGITS, decimal_places=AMOUNT_DECIMAL_PLACES)
    term: int | None = Field(default=None, ge=1, le=MAX_TERM_MONTHS)
    loan_types: ReferenceId | None = Field(default=None, alias='loanTypes')
    loan_status: ReferenceId | None = Field(default=None, alias='loanStatus')

    class Config:
        populate_by_name = True


class CreateLoanRequest(BaseModel):
    amount: Decimal | None = Field(default=None, gt=0, max_digits=AMOUNT_MAX_DIGITS, decimal_places=AMOUNT_DECIMAL_PLACES)
    term: int | None = Field(default=None, ge=1, le=MAX_TERM_MONTHS)
    type: int | None = Field(default=None, ge=1, le=MAX_ID)
    user_id: int | None = Field(default=None, alias='userId', ge=1, le=MAX_ID)

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


def require_login(current_user: SessionUser | None) -> SessionUser:
    if current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Not logged in')
    return current_user


def bad_request(detail: str) -> HTTPException:
    logger.error(detail)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get('', response_model=list[LoanResponse])
def get_all_loans(
    current_user: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    user = require_login(current_user)
    if not user.is_manager:
        logger.info('Access denied to get all loans for user id %s', user.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Access Denied')

    try:
        return loan_service.get_all_loans(db)
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc


@router.get('/user/{user_id}', response_model=list[LoanResponse])
def get_loans_by_user_id(
    user_id: PathId,
    current_user: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    user = require_login(current_user)

    logger.info('Searching for loans for user id %s', user_id)
    if user_id != user.id and not user.is_manager:
        logger.error('Unauthorized access to get loans for user id %s, session user id %s', user_id, user.id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Unauthorized access')

    try:
        loans = loan_service.get_loans_by_user_id(db, user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc

    if not loans:
        logger.info('No loans found for user id %s', user_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'No loans found for user id:{user_id}')
    return loans


@router.get('/{loan_id}', response_model=LoanResponse)
def get_loan_by_id(
    loan_id: PathId,
    current_user: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    user = require_login(current_user)

    try:
        loan = loan_service.get_loan_by_id(db, loan_id, user)
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc

    if loan is None:
        logger.info('Loan with id %s not found or invalid credentials', loan_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Invalid credentials or loan not found')

    logger.info('Loan id %s found for user id %s', loan_id, user.id)
    return loan


@router.delete('/{loan_id}', response_model=MessageResponse)
def delete_loan(
    loan_id: PathId,
    current_user: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    user = require_login(current_user)

    try:
        deleted = loan_service.delete_loan(db, loan_id, user)
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc

    if not deleted:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Loan not found or is approved')
    return MessageResponse(message='Loan successfully deleted')


@router.put('/{loan_id}', response_model=LoanResponse)
def update_loan(
    loan_id: PathId,
    data: UpdateLoanRequest,
    current_user: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    user = require_login(current_user)

    logger.info('Updating loan with id %s', loan_id)
    if data.amount is None:
        raise bad_request('Amount must not be null')
    if data.term is None:
        raise bad_request('Term must not be null')
    if data.loan_types is None or data.loan_types.id is None:
        raise bad_request('Loan type must not be null')

    status_id = data.loan_status.id if data.loan_status is not None else None

    try:
        updated_loan = loan_service.update_loan(
            db,
            loan_id,
            amount=data.amount,
            term=data.term,
            type_id=data.loan_types.id,
            status_id=status_id,
            requester=user,
        )
    except LoanNotFoundError as exc:
        logger.error('Loan not found with id %s', loan_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LoanAccessDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    except LoanValidationError as exc:
        raise bad_request(str(exc)) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc

    logger.info('Loan with id %s updated successfully', loan_id)
    return updated_loan


@router.post('', response_model=LoanResponse, status_code=status.HTTP_201_CREATED)
def create_loan(
    data: CreateLoanRequest,
    current_user: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    user = require_login(current_user)

    if data.amount is None:
        raise bad_request('Amount must not be null')
    if data.term is None:
        raise bad_request('Loan term must not be null')
    if data.type is None:
        raise bad_request('Loan type must not be null')
    if data.user_id is None:
        raise bad_request('User id must not be null')

    if data.user_id != user.id:
        logger.error('Unauthorized access to create loan for user id %s', data.user_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Unauthorized access')

    logger.info('Creating a new loan for user id %s', user.id)
    try:
        return loan_service.create_loan(
            db,
            amount=data.amount,
            term=data.term,
            type_id=data.type,
            user_id=data.user_id,
            status_id=LoanStatusId.PENDING,
        )
    except LoanValidationError as exc:
        raise bad_request(str(exc)) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc


def approve_or_reject_loan(
    loan_id: int,
    status_id: LoanStatusId,
    current_user: SessionUser | None,
    db: Session,
) -> LoanResponse:
    if current_user is None:
        logger.error('Not logged in')
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Not logged in')
    if not current_user.is_manager:
        logger.error('Unauthorized access, cannot approve or reject loan %s', loan_id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Unauthorized access')

    try:
        response = loan_service.approve_or_reject_loan(db, loan_id, status_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(db) from exc

    if response is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f'No loan found with id:{loan_id}')
    return response


@router.patch('/{loan_id}/approve', response_model=LoanResponse)
def approve_loan(
    loan_id: PathId,
    current_user: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return approve_or_reject_loan(loan_id, LoanStatusId.APPROVED, current_user, db)


@router.patch('/{loan_id}/reject', response_model=LoanResponse)
def reject_loan(
    loan_id: PathId,
    current_user: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return approve_or_reject_loan(loan_id, LoanStatusId.REJECTED, current_user, db)
