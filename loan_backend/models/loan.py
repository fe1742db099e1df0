"""Loan model definitions."""

import enum

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from loan_backend.database import Base


class LoanStatusId(enum.IntEnum):
    PENDING = 1
    APPROVED = 2
    REJECTED = 3


LOAN_STATUS_LABELS = {
    LoanStatusId.PENDING: "Pending",
    LoanStatusId.APPROVED: "Approved",
    LoanStatusId.REJECTED: "Rejected",
}

LOAN_TYPE_LABELS = {
    1: "Personal",
    2: "Auto",
    3: "Mortgage",
    4: "Education",
}


class LoanType(Base):
    """Reference data describing the kind of loan."""
    __tablename__ = "loan_types"

    id = Column(Integer, primary_key=True)
    type = Column(String, nullable=False)


class LoanStatus(Base):
    """Reference data for the loan lifecycle state."""
    __tablename__ = "loan_statuses"

    id = Column(Integer, primary_key=True)
    status = Column(String, nullable=False)


class Loan(Base):
    """A loan requested by a user."""
    __tablename__ = "loans"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    term = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    loan_type_id = Column(Integer, ForeignKey("loan_types.id"), nullable=False)
    loan_status_id = Column(Integer, ForeignKey("loan_statuses.id"), nullable=False)

    user = relationship("User", back_populates="loans")
    loan_type = relationship("LoanType")
    loan_status = relationship("LoanStatus")

    @property
    def is_approved(self) -> bool:
        return self.loan_status_id == LoanStatusId.APPROVED
