from datetime import date
from typing import AsyncIterator, Protocol, Sequence

from domain.model.user import NearbyUser, User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Every write replaces the whole record in one atomic operation.
    """
    async def create(self, user: User) -> User:
        """Insert a new user. Raise DuplicateEmailError if the email is taken."""
        ...

    async def save(self, user: User) -> None:
        """Replace the stored record with `user`. Raise NotFoundError if it is gone."""
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Find a user by (normalized) email. Return User or None if not found."""
        ...

    async def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def find_by_birthdate_range(self, min_birthdate: date, max_birthdate: date) -> AsyncIterator[User]:
        """Yield users whose birthdate lies in the inclusive range."""
        ...

    async def geo_near(self, origin: Sequence[float], max_distance_m: float) -> list[NearbyUser]:
        """Return located users within `max_distance_m` metres, nearest first."""
        ...
