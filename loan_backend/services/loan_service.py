"""Business rules for the loan lifecycle.

Every operation receives the database session explicitly, and operations that
depend on who is asking receive the logged-in user as ``requester``. Missing
loans and loans the requester may not see are reported the same way so that
callers cannot probe for the existence of other users' loans.
"""

import logging
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy.orm import Session

from loan_backend.auth.principal import SessionUser
from loan_backend.models.loan import Loan, LoanStatus, LoanStatusId, LoanType
from loan_backend.models.user import User
from loan_backend.services.errors import LoanAccessDeniedError, LoanNotFoundError, LoanValidationError

logger = logging.getLogger(__name__)

DECISION_STATUSES = frozenset({LoanStatusId.APPROVED, LoanStatusId.REJECTED})


class LoanResponse(BaseModel):
    id: int
    amount: Decimal
    term: int
    loan_type: str
    status: str
    full_name: str
    user_id: int


def to_loan_response(loan: Loan) -> LoanResponse:
    return LoanResponse(
        id=loan.id,
        amount=loan.amount,
        term=loan.term,
        loan_type=loan.loan_type.type,
        status=loan.loan_status.status,
        full_name=loan.user.full_name,
        user_id=loan.user_id,
    )


def _get_reference(db: Session, model, reference_id: int | None, label: str):
    instance = db.get(model, reference_id) if reference_id is not None else None
    if instance is None:
        raise LoanValidationError(f"{label} not found with id: {reference_id}")
    return instance


def create_loan(
    db: Session,
    amount: Decimal,
    term: int,
    type_id: int,
    user_id: int,
    status_id: int = LoanStatusId.PENDING,
) -> LoanResponse:
    user = _get_reference(db, User, user_id, "User")
    loan_type = _get_reference(db, LoanType, type_id, "Loan type")
    loan_status = _get_reference(db, LoanStatus, status_id, "Loan status")

    loan = Loan(
        amount=amount,
        term=term,
        user=user,
        loan_type=loan_type,
        loan_status=loan_status,
    )
    db.add(loan)
    db.commit()
    db.refresh(loan)

    logger.info("Loan id %s created for user id %s", loan.id, user_id)
    return to_loan_response(loan)


def update_loan(
    db: Session,
    loan_id: int,
    amount: Decimal,
    term: int,
    type_id: int,
    status_id: int | None,
    requester: SessionUser,
) -> LoanResponse:
    """Overwrite amount, term, type and optionally status of a loan the requester owns.

    Raises LoanNotFoundError when the loan does not exist, LoanAccessDeniedError
    when the requester is not the owner or tries to change the status without
    the manager role, and LoanValidationError for unknown type or status ids.
    """
    loan = db.get(Loan, loan_id)
    if loan is None:
        raise LoanNotFoundError(loan_id)

    if loan.user_id != requester.id:
        logger.warning("User id %s attempted to update loan id %s owned by user id %s",
                       requester.id, loan_id, loan.user_id)
        raise LoanAccessDeniedError("Unauthorized access to update loan")

    loan_type = _get_reference(db, LoanType, type_id, "Loan type")
    loan_status = loan.loan_status
    if status_id is not None and status_id != loan.loan_status_id:
        if not requester.is_manager:
            logger.warning("User id %s attempted to change the status of loan id %s", requester.id, loan_id)
            raise LoanAccessDeniedError("Only managers can change the loan status")
        loan_status = _get_reference(db, LoanStatus, status_id, "Loan status")

    loan.amount = amount
    loan.term = term
    loan.loan_type = loan_type
    loan.loan_status = loan_status
    db.commit()

    updated_loan = db.get(Loan, loan_id, populate_existing=True)
    if updated_loan is None:
        raise LoanNotFoundError(loan_id)
    return to_loan_response(updated_loan)


def get_loan_by_id(db: Session, loan_id: int, requester: SessionUser) -> LoanResponse | None:
    loan = db.get(Loan, loan_id)
    if loan is None:
        return None
    if loan.user_id != requester.id and not requester.is_manager:
        logger.info("User id %s is not allowed to read loan id %s", requester.id, loan_id)
        return None
    return to_loan_response(loan)


def get_all_loans(db: Session) -> list[LoanResponse]:
    loans = db.query(Loan).order_by(Loan.id.asc()).all()
    return [to_loan_response(loan) for loan in loans]


def get_loans_by_user_id(db: Session, user_id: int) -> list[LoanResponse]:
    loans = db.query(Loan).filter(Loan.user_id == user_id).order_by(Loan.id.asc()).all()
    return [to_loan_response(loan) for loan in loans]


def delete_loan(db: Session, loan_id: int, requester: SessionUser) -> bool:
    loan = db.get(Loan, loan_id)
    if loan is None:
        logger.info("Loan id %s not found for deletion", loan_id)
        return False
    if loan.user_id != requester.id:
        logger.warning("User id %s attempted to delete loan id %s owned by user id %s",
                       requester.id, loan_id, loan.user_id)
        return False
    if loan.is_approved:
        logger.info("Loan id %s is approved and cannot be deleted", loan_id)
        return False

    db.delete(loan)
    db.commit()
    logger.info("Loan id %s deleted by user id %s", loan_id, requester.id)
    return True


def approve_or_reject_loan(db: Session, loan_id: int, status_id: int) -> LoanResponse | None:
    if status_id not in DECISION_STATUSES:
        raise LoanValidationError(f"Loan status {status_id} is not an approval decision")

    loan = db.get(Loan, loan_id)
    if loan is None:
        logger.info("Loan id %s not found for approval decision", loan_id)
        return None

    loan.loan_status = _get_reference(db, LoanStatus, status_id, "Loan status")
    db.commit()
    db.refresh(loan)

    logger.info("Loan id %s set to status %s", loan_id, loan.loan_status.status)
    return to_loan_response(loan)
