"""Read-only user searches: age range and proximity."""

from datetime import datetime, timezone
from logging import getLogger
from typing import AsyncIterator

from domain.model.age_range import birthdate_window
from domain.model.errors import ValidationError
from domain.model.geo import validate_coordinates
from domain.model.user import NearbyUser, User
from port.user_repository import UserRepository

logger = getLogger(__name__)


async def find_by_age_range(
    repo: UserRepository,
    min_age: int,
    max_age: int,
    now: datetime | None = None,
) -> AsyncIterator[User]:
    """Yield users whose birthdate falls in the window for [min_age, max_age].

    Lazy: nothing is queried until iteration starts, and every call runs
    the query again.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    min_birthdate, max_birthdate = birthdate_window(min_age, max_age, now)
    logger.debug(
        "Age range search",
        extra={"minBirthdate": min_birthdate.isoformat(), "maxBirthdate": max_birthdate.isoformat()},
    )

    async for user in repo.find_by_birthdate_range(min_birthdate, max_birthdate):
        yield user


async def find_by_distance(
    repo: UserRepository,
    origin,
    max_distance_km: float,
) -> list[NearbyUser]:
    """Users within `max_distance_km` of `origin` ([lon, lat]), nearest first.

    Each result carries its great-circle `distance` in metres.
    """
    if not validate_coordinates(origin):
        raise ValidationError(f"{origin!r} is not a valid longitude/latitude(/altitude) coordinates array")
    if max_distance_km < 0:
        raise ValidationError("max_distance_km must be non-negative")

    return await repo.geo_near(list(origin), max_distance_km * 1000)
