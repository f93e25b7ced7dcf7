"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Callers (an API layer, a worker) catch them and map them to their own
responses. Storage failures surface as PersistenceError.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class ValidationError(DomainError):
    """Input violates a business validation rule."""


class DuplicateInterestError(DomainError):
    """Interest is already on the user's list."""

    def __init__(self, interest_id: str):
        self.interest_id = interest_id
        super().__init__("Interest already added.")


class InterestLimitExceededError(DomainError):
    """Interest list is already at capacity."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"You can only add up to {limit} interests.")


class AuthenticationError(DomainError):
    """Credentials did not match."""


class TokenIssuanceError(DomainError):
    """Signing an authentication token failed."""


class PersistenceError(DomainError):
    """Storage layer rejected or failed an operation."""


class DuplicateEmailError(PersistenceError):
    """Another user already owns this email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email already registered")
