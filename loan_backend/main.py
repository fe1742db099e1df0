import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from loan_backend.core import config
from loan_backend.database import Base, engine, ensure_reference_data
from loan_backend.models import loan, user
from loan_backend.routes import auth_routes, loan_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
)

logger = logging.getLogger(__name__)

config.validate_runtime_config()

app = FastAPI(
    title='Loan Management System API',
    version='1.0',
    description='REST API for managing loans and users',
    contact={'name': 'Mayhem Team', 'email': 'contact@mayhem.com'},
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine, tables=[
            user.User.__table__,
            loan.LoanType.__table__,
            loan.LoanStatus.__table__,
            loan.Loan.__table__,
        ])
        if config.SEED_REFERENCE_DATA:
            ensure_reference_data()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Loan Management API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(loan_routes.router, prefix='/api/loans')
