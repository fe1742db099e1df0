import logging
from threading import Lock

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from loan_backend.core import config


logger = logging.getLogger(__name__)


def _connect_args(database_url: str) -> dict:
    # FastAPI runs sync endpoints in a threadpool
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(config.DATABASE_URL, connect_args=_connect_args(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_reference_data_lock = Lock()
_reference_data_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def seed_reference_data(db: Session) -> None:
    """Insert the loan types and loan statuses that are missing from the database."""
    from loan_backend.models.loan import LOAN_STATUS_LABELS, LOAN_TYPE_LABELS, LoanStatus, LoanType

    existing_statuses = {row.id for row in db.query(LoanStatus.id).all()}
    for status_id, label in LOAN_STATUS_LABELS.items():
        if status_id not in existing_statuses:
            db.add(LoanStatus(id=int(status_id), status=label))

    existing_types = {row.id for row in db.query(LoanType.id).all()}
    for type_id, label in LOAN_TYPE_LABELS.items():
        if type_id not in existing_types:
            db.add(LoanType(id=type_id, type=label))

    db.commit()


def ensure_reference_data(bind: Engine | None = None) -> None:
    global _reference_data_checked

    if _reference_data_checked:
        return

    with _reference_data_lock:
        if _reference_data_checked:
            return

        db = Session(bind=bind or engine)
        try:
            seed_reference_data(db)
        finally:
            db.close()

        logger.info("Loan reference data verified")
        _reference_data_checked = True
