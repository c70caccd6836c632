"""Errors raised by the lending core."""


class LendingError(Exception):
    """Base class for lending and reconciliation errors."""


class MalformedDueDateError(LendingError, ValueError):
    """A loan due date is not a valid day/month/year string."""

    def __init__(self, value, loan_id=None):
        self.value = value
        self.loan_id = loan_id
        where = f" on loan {loan_id}" if loan_id else ""
        super().__init__(f"Malformed due date {value!r}{where}, expected dd/mm/yyyy")


class LoanRequestError(LendingError):
    pass


class DuplicatePhoneError(LendingError):
    pass


class LoanNotFoundError(LendingError):
    pass


class InvalidTransitionError(LendingError):
    pass


class RankUpgradeError(LendingError):
    pass
