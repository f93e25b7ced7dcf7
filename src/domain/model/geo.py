# domain/model/geo.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Real

from domain.model.errors import ValidationError

# Radius used by MongoDB for spherical geometry, in metres.
EARTH_RADIUS_M = 6378.1 * 1000


def is_longitude(value) -> bool:
    return _is_number(value) and -180 <= value <= 180


def is_latitude(value) -> bool:
    return _is_number(value) and -90 <= value <= 90


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and not math.isnan(value)


def validate_coordinates(value) -> bool:
    """Check a GeoJSON position: [longitude, latitude] or [longitude, latitude, altitude]."""
    if not isinstance(value, (list, tuple)):
        return False
    if not 2 <= len(value) <= 3:
        return False
    if len(value) == 3 and not _is_number(value[2]):
        return False
    return is_longitude(value[0]) and is_latitude(value[1])


@dataclass(frozen=True)
class GeoPoint:
    """GeoJSON Point stored on a user's location."""
    coordinates: tuple[float, ...]
    type: str = field(default='Point')

    @classmethod
    def from_coordinates(cls, value) -> GeoPoint:
        if not validate_coordinates(value):
            raise ValidationError(
                f"{value!r} is not a valid longitude/latitude(/altitude) coordinates array"
            )
        return cls(coordinates=tuple(value))

    @classmethod
    def from_document(cls, doc: dict) -> GeoPoint:
        return cls.from_coordinates(doc['coordinates'])

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    def to_document(self) -> dict:
        return {'type': self.type, 'coordinates': list(self.coordinates)}


def spherical_distance(origin, target) -> float:
    """Great-circle distance in metres between two [lon, lat, ...] positions."""
    lon1, lat1 = math.radians(origin[0]), math.radians(origin[1])
    lon2, lat2 = math.radians(target[0]), math.radians(target[1])

    a = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))
