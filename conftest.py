import itertools
import os
from decimal import Decimal

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('BCRYPT_ROUNDS', '4')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from loan_backend.database import Base, seed_reference_data  # noqa: E402
from loan_backend.models.loan import Loan, LoanStatusId  # noqa: E402
from loan_backend.models.user import Role, User  # noqa: E402


@pytest.fixture
def loan_db():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    seed_reference_data(db)
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def create_user(loan_db):
    counter = itertools.count(1)

    def _create_user(
        first_name: str = 'Ada',
        last_name: str = 'Lovelace',
        role: Role = Role.USER,
        user_id: int | None = None,
    ) -> User:
        user = User(
            id=user_id,
            email=f'user{next(counter)}@example.com',
            hashed_password='',
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        loan_db.add(user)
        loan_db.commit()
        loan_db.refresh(user)
        return user

    return _create_user


@pytest.fixture
def create_loan(loan_db):
    def _create_loan(
        owner: User,
        amount: Decimal = Decimal('1000.00'),
        term: int = 12,
        type_id: int = 1,
        status_id: LoanStatusId = LoanStatusId.PENDING,
        loan_id: int | None = None,
    ) -> Loan:
        loan = Loan(
            id=loan_id,
            amount=amount,
            term=term,
            user_id=owner.id,
            loan_type_id=type_id,
            loan_status_id=int(status_id),
        )
        loan_db.add(loan)
        loan_db.commit()
        loan_db.refresh(loan)
        return loan

    return _create_loan
