"""In-memory implementation of UserRepository for testing."""

import copy
from datetime import date
from typing import AsyncIterator, Sequence

from domain.model.errors import DuplicateEmailError, NotFoundError
from domain.model.geo import spherical_distance
from domain.model.user import NearbyUser, User


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}
        self.writes = 0

    # ── write operations ─────────────────────────────────────

    async def create(self, user: User) -> User:
        if any(u.email == user.email for u in self.store.values()):
            raise DuplicateEmailError(user.email)

        self.store[user.id] = copy.deepcopy(user)
        self.writes += 1
        return user

    async def save(self, user: User) -> None:
        if user.id not in self.store:
            raise NotFoundError(f"User {user.id} not found")
        if any(u.email == user.email and u.id != user.id for u in self.store.values()):
            raise DuplicateEmailError(user.email)

        self.store[user.id] = copy.deepcopy(user)
        self.writes += 1

    # ── read operations ──────────────────────────────────────

    async def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return copy.deepcopy(user)
        return None

    async def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return copy.deepcopy(user) if user else None

    async def find_by_birthdate_range(
        self, min_birthdate: date, max_birthdate: date
    ) -> AsyncIterator[User]:
        for user in list(self.store.values()):
            if user.birthdate and min_birthdate <= user.birthdate <= max_birthdate:
                yield copy.deepcopy(user)

    async def geo_near(self, origin: Sequence[float], max_distance_m: float) -> list[NearbyUser]:
        results = []
        for user in self.store.values():
            if user.location is None:
                continue
            distance = spherical_distance(origin, user.location.coordinates)
            if distance <= max_distance_m:
                results.append(NearbyUser(
                    id=user.id,
                    email=user.email,
                    name=user.name,
                    birthdate=user.birthdate,
                    distance=distance,
                ))
        results.sort(key=lambda u: u.distance)
        return results
