"""Profile updates that don't touch credentials or interests."""

from dataclasses import replace
from datetime import date, datetime, timezone
from logging import getLogger

from domain.model.geo import GeoPoint
from domain.model.user import User, check_invariants, clean_text
from port.user_repository import UserRepository

logger = getLogger(__name__)

_UNSET = object()


async def update_profile(
    repo: UserRepository,
    user: User,
    *,
    name: str | None = _UNSET,
    bio: str | None = _UNSET,
    birthdate: date | None = _UNSET,
    coordinates=_UNSET,
) -> User:
    """Apply the given fields and persist once.

    Omitted fields are left alone; passing None clears a field.

    Raises:
        ValidationError: coordinates are not a valid GeoJSON position
    """
    changes = {}
    if name is not _UNSET:
        changes['name'] = clean_text(name)
    if bio is not _UNSET:
        changes['bio'] = clean_text(bio)
    if birthdate is not _UNSET:
        changes['birthdate'] = birthdate
    if coordinates is not _UNSET:
        changes['location'] = GeoPoint.from_coordinates(coordinates) if coordinates is not None else None

    if not changes:
        return user

    updated = replace(user, **changes)
    check_invariants(updated)
    await repo.save(updated)

    for key, value in changes.items():
        setattr(user, key, value)
    logger.info("Profile updated", extra={"userId": user.id, "fields": sorted(changes)})
    return user


async def record_activity(repo: UserRepository, user: User, at: datetime | None = None) -> User:
    """Refresh `last_activity`."""
    at = at or datetime.now(timezone.utc)
    await repo.save(replace(user, last_activity=at))
    user.last_activity = at
    return user
