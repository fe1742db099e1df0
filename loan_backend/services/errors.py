class LoanServiceError(Exception):
    """Base class for loan business-rule failures."""


class LoanNotFoundError(LoanServiceError):
    def __init__(self, loan_id: int):
        super().__init__(f"No loan found with id:{loan_id}")
        self.loan_id = loan_id


class LoanAccessDeniedError(LoanServiceError):
    pass


class LoanValidationError(LoanServiceError, ValueError):
    pass


class AccountError(ValueError):
    """Registration or login input that cannot be accepted."""
