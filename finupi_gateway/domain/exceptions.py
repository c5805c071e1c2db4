"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidRecordError(DomainException):
    """A single transaction record has an unparseable amount, timestamp or status"""

    pass


class InvalidInputError(DomainException):
    """The transactions argument itself is malformed (not a list of records)"""

    pass


class ScoringAPIError(DomainException):
    """Remote scoring API returned an error, is unavailable, or sent a malformed body"""

    pass


class LoanValidationError(DomainException):
    """Loan application falls outside the bounds unlocked by the score"""

    pass


class NotEligibleError(LoanValidationError):
    """Subject's score does not qualify for any loan"""

    pass
