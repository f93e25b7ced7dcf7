from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from domain.model.errors import ValidationError
from domain.model.geo import GeoPoint

MAX_INTERESTS = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip()


@dataclass
class User:
    """Domain model representing a user account."""
    id: str
    email: str
    password_hash: str
    token: str | None = None
    name: str | None = None
    bio: str | None = None
    birthdate: date | None = None
    location: GeoPoint | None = None
    last_activity: datetime = field(default_factory=_utcnow)
    interests: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    is_admin: bool = False
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class NearbyUser:
    """Projection returned by a proximity search."""
    id: str
    email: str
    name: str | None
    birthdate: date | None
    distance: float


def check_invariants(user: User) -> None:
    """Raise ValidationError if the record must not be persisted as is."""
    if not user.email or user.email != normalize_email(user.email):
        raise ValidationError("Email must be non-empty, trimmed and lowercase")
    if not user.password_hash:
        raise ValidationError("Password hash is required")
    if user.location is not None:
        GeoPoint.from_coordinates(list(user.location.coordinates))
    if len(user.interests) > MAX_INTERESTS:
        raise ValidationError(f"At most {MAX_INTERESTS} interests are allowed")
    if len(set(user.interests)) != len(user.interests):
        raise ValidationError("Interests must be unique")
