"""MongoDB implementation of UserRepository."""

from datetime import date, datetime, time, timezone
from logging import getLogger
from typing import AsyncIterator, Sequence

from pymongo import ASCENDING, DESCENDING, GEOSPHERE
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateEmailError, NotFoundError, PersistenceError
from domain.model.geo import GeoPoint
from domain.model.user import NearbyUser, User

logger = getLogger(__name__)

NEARBY_PROJECTION = {'_id': 1, 'email': 1, 'name': 1, 'birthdate': 1, 'distance': 1}


def _date_to_bson(value: date | None) -> datetime | None:
    """BSON has no date type; store birthdates as UTC midnight."""
    if value is None:
        return None
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _bson_to_date(value: datetime | None) -> date | None:
    if value is None:
        return None
    return value.date()


class MongoUserRepository:
    def __init__(self, db: AsyncDatabase):
        self.collection = db[USERS_COLLECTION_NAME]

    # ── indexes ──────────────────────────────────────────────

    async def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            await create_index_safe(self.collection, [('email', ASCENDING)], 'idx_users_email', unique=True)
            await create_index_safe(self.collection, [('location', GEOSPHERE)], 'idx_users_location_2dsphere')
            await create_index_safe(self.collection, [('birthdate', ASCENDING)], 'idx_users_birthdate', sparse=True)
            await create_index_safe(self.collection, [('created_at', DESCENDING)], 'idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    # ── helpers ──────────────────────────────────────────────

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        location = doc.get('location')
        return User(
            id=doc['_id'],
            email=doc['email'],
            password_hash=doc['password_hash'],
            token=doc.get('token'),
            name=doc.get('name'),
            bio=doc.get('bio'),
            birthdate=_bson_to_date(doc.get('birthdate')),
            location=GeoPoint.from_document(location) if location else None,
            last_activity=doc['last_activity'],
            interests=[str(i) for i in doc.get('interests', [])],
            images=[str(i) for i in doc.get('images', [])],
            is_admin=doc.get('is_admin', False),
            created_at=doc['created_at'],
        )

    def _to_document(self, user: User) -> dict:
        doc = {
            '_id': user.id,
            'email': user.email,
            'password_hash': user.password_hash,
            'token': user.token,
            'name': user.name,
            'bio': user.bio,
            'last_activity': user.last_activity,
            'interests': list(user.interests),
            'images': list(user.images),
            'is_admin': user.is_admin,
            'created_at': user.created_at,
        }
        # Indexed optional fields are omitted, never stored as null.
        if user.birthdate is not None:
            doc['birthdate'] = _date_to_bson(user.birthdate)
        if user.location is not None:
            doc['location'] = user.location.to_document()
        return doc

    # ── write operations ─────────────────────────────────────

    async def create(self, user: User) -> User:
        """Insert a new user document."""
        try:
            await self.collection.insert_one(self._to_document(user))
        except DuplicateKeyError as e:
            logger.warning("User creation failed: email already exists", extra={"email": user.email})
            raise DuplicateEmailError(user.email) from e
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": user.email, "error": str(e)})
            raise PersistenceError("Failed to create user") from e

        logger.info("User created", extra={"userId": user.id, "email": user.email})
        return user

    async def save(self, user: User) -> None:
        """Replace the whole user document in one write."""
        try:
            result = await self.collection.replace_one({'_id': user.id}, self._to_document(user))
        except DuplicateKeyError as e:
            logger.warning("User save failed: email already exists", extra={"userId": user.id})
            raise DuplicateEmailError(user.email) from e
        except PyMongoError as e:
            logger.error("Failed to save user", extra={"userId": user.id, "error": str(e)})
            raise PersistenceError("Failed to save user") from e

        if result.matched_count == 0:
            raise NotFoundError(f"User {user.id} not found")
        logger.debug("User saved", extra={"userId": user.id})

    # ── read operations ──────────────────────────────────────

    async def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        try:
            doc = await self.collection.find_one({'email': email})
        except PyMongoError as e:
            logger.error("Failed to get user by email", extra={"email": email, "error": str(e)})
            raise PersistenceError("Failed to get user by email") from e
        return self._to_domain(doc) if doc else None

    async def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        try:
            doc = await self.collection.find_one({'_id': user_id})
        except PyMongoError as e:
            logger.error("Failed to get user by ID", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError("Failed to get user by ID") from e
        return self._to_domain(doc) if doc else None

    async def find_by_birthdate_range(
        self, min_birthdate: date, max_birthdate: date
    ) -> AsyncIterator[User]:
        """Yield users with min_birthdate <= birthdate <= max_birthdate."""
        query = {
            'birthdate': {
                '$gte': _date_to_bson(min_birthdate),
                '$lte': _date_to_bson(max_birthdate),
            }
        }
        try:
            async for doc in self.collection.find(query):
                yield self._to_domain(doc)
        except PyMongoError as e:
            logger.error("Failed to find users by birthdate", extra={"error": str(e)})
            raise PersistenceError("Failed to find users by birthdate") from e

    async def geo_near(self, origin: Sequence[float], max_distance_m: float) -> list[NearbyUser]:
        """Spherical proximity search on the 2dsphere-indexed location, nearest first."""
        pipeline = [
            {
                '$geoNear': {
                    'near': {'type': 'Point', 'coordinates': list(origin[:2])},
                    'key': 'location',
                    'distanceField': 'distance',
                    'maxDistance': max_distance_m,
                    'spherical': True,
                }
            },
            {'$project': NEARBY_PROJECTION},
        ]
        try:
            cursor = await self.collection.aggregate(pipeline)
            docs = await cursor.to_list()
        except PyMongoError as e:
            logger.error("Failed to run proximity search", extra={"error": str(e)})
            raise PersistenceError("Failed to run proximity search") from e

        return [
            NearbyUser(
                id=doc['_id'],
                email=doc['email'],
                name=doc.get('name'),
                birthdate=_bson_to_date(doc.get('birthdate')),
                distance=doc['distance'],
            )
            for doc in docs
        ]
