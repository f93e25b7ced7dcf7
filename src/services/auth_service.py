"""Auth service: credential hashing, token issuance and login.

Pure business logic with no HTTP dependencies.
Raises domain errors that callers map to their own responses.
Password hashing is an explicit step in every write path that sets a
password (register, change_password); plain saves never rehash.
"""

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from jose.exceptions import JOSEError

from domain.model.errors import AuthenticationError, DuplicateEmailError, TokenIssuanceError, ValidationError
from domain.model.geo import GeoPoint
from domain.model.user import User, check_invariants, clean_text, normalize_email
from port.user_repository import UserRepository
from utils import config

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(seconds=config.JWT_EXPIRATION_SECONDS)


# bcrypt only reads the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a plaintext password with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds if rounds is not None else config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plaintext password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash (not produced by hash_password)
        return False


def _validate_password(password: str) -> None:
    if not password:
        raise ValidationError("Password is required")


async def issue_token(
    repo: UserRepository,
    user: User,
    secret: str | None = None,
    ttl: timedelta = DEFAULT_TOKEN_TTL,
) -> str:
    """Sign a JWT for `user`, store it on the record and persist.

    Raises:
        TokenIssuanceError: no signing secret configured, or signing failed
    """
    secret = secret or config.JWT_SECRET_KEY
    if not secret:
        raise TokenIssuanceError("JWT_SECRET_KEY is not configured")

    now = datetime.now(timezone.utc)
    payload = {
        "sub": user.id,
        "iat": now,
        "exp": now + ttl,
    }
    try:
        token = jwt.encode(payload, secret, algorithm=config.JWT_ALGORITHM)
    except JOSEError as e:
        logger.error("Token signing failed", extra={"userId": user.id, "error": str(e)})
        raise TokenIssuanceError("Failed to sign token") from e

    await repo.save(replace(user, token=token))
    user.token = token
    logger.info("Token issued", extra={"userId": user.id})
    return token


def decode_token(token: str, secret: str | None = None) -> str | None:
    """Verify JWT token and extract user_id."""
    secret = secret or config.JWT_SECRET_KEY
    if not secret:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"JWT verification failed: {e}")
        return None
    return payload.get("sub")


async def register(
    repo: UserRepository,
    email: str,
    password: str,
    name: str | None = None,
    bio: str | None = None,
    birthdate: date | None = None,
    coordinates=None,
) -> User:
    """Register a new user.

    Returns the created User domain object.

    Raises:
        ValidationError: missing password, bad email or bad coordinates
        DuplicateEmailError: email already registered
    """
    email = normalize_email(email)
    _validate_password(password)
    location = GeoPoint.from_coordinates(coordinates) if coordinates is not None else None

    if await repo.get_by_email(email):
        raise DuplicateEmailError(email)

    user = User(
        id=uuid.uuid4().hex,
        email=email,
        password_hash=hash_password(password),
        name=clean_text(name),
        bio=clean_text(bio),
        birthdate=birthdate,
        location=location,
    )
    check_invariants(user)
    return await repo.create(user)


async def authenticate(repo: UserRepository, email: str, password: str) -> User:
    """Authenticate a user by email and password.

    Doesn't reveal whether the email exists.

    Raises:
        AuthenticationError: invalid credentials (deliberately vague)
    """
    user = await repo.get_by_email(normalize_email(email))
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return user


async def change_password(repo: UserRepository, user: User, new_password: str) -> User:
    """Hash `new_password` and persist it; the token is left untouched."""
    _validate_password(new_password)
    password_hash = hash_password(new_password)

    await repo.save(replace(user, password_hash=password_hash))
    user.password_hash = password_hash
    logger.info("Password changed", extra={"userId": user.id})
    return user
