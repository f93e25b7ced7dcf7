"""Pydantic models for the external (serialized) view of users.

Credentials never appear here: `password_hash` and `token` have no field,
so nothing built from these models can leak them whoever the caller is.
"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.model.user import NearbyUser, User


class Location(BaseModel):
    """GeoJSON point."""
    type: Literal["Point"] = "Point"
    coordinates: list[float] = Field(..., min_length=2, max_length=3, description="[lon, lat, alt?]")


class UserResponse(BaseModel):
    """Public user profile."""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="User ID (MongoDB _id)")
    email: str = Field(..., description="User email")
    name: Optional[str] = Field(None, description="Display name")
    bio: Optional[str] = None
    birthdate: Optional[date] = None
    location: Optional[Location] = None
    last_activity: datetime = Field(..., description="Last activity timestamp")
    interests: list[str] = Field(default_factory=list, description="Interest IDs")
    images: list[str] = Field(default_factory=list, description="Image IDs")
    is_admin: bool = False
    created_at: datetime = Field(..., description="Account creation timestamp")


class NearbyUserResponse(BaseModel):
    """Proximity search hit."""
    id: str
    email: str
    name: Optional[str] = None
    birthdate: Optional[date] = None
    distance: float = Field(..., description="Distance from the search origin in metres")


def to_response(user: User) -> UserResponse:
    """Convert domain User to the redacted UserResponse."""
    location = None
    if user.location is not None:
        location = Location(coordinates=list(user.location.coordinates))
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        bio=user.bio,
        birthdate=user.birthdate,
        location=location,
        last_activity=user.last_activity,
        interests=list(user.interests),
        images=list(user.images),
        is_admin=user.is_admin,
        created_at=user.created_at,
    )


def to_nearby_response(hit: NearbyUser) -> NearbyUserResponse:
    return NearbyUserResponse(
        id=hit.id,
        email=hit.email,
        name=hit.name,
        birthdate=hit.birthdate,
        distance=hit.distance,
    )
