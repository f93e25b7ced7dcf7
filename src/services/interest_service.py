"""Interest list mutations.

Each call reads the list from the record it is given, writes the whole
record once, and only then updates the caller's object. Two concurrent
mutations of the same user are last-writer-wins.
"""

from dataclasses import replace
from logging import getLogger

from domain.model.errors import DuplicateInterestError, InterestLimitExceededError
from domain.model.user import MAX_INTERESTS, User
from port.user_repository import UserRepository

logger = getLogger(__name__)


async def add_interest(repo: UserRepository, user: User, interest_id: str) -> User:
    """Append `interest_id` to the user's interests.

    Raises:
        DuplicateInterestError: already on the list
        InterestLimitExceededError: list already holds MAX_INTERESTS entries
    """
    interest_id = str(interest_id)
    if interest_id in user.interests:
        raise DuplicateInterestError(interest_id)
    if len(user.interests) >= MAX_INTERESTS:
        raise InterestLimitExceededError(MAX_INTERESTS)

    interests = [*user.interests, interest_id]
    await repo.save(replace(user, interests=interests))
    user.interests = interests
    logger.debug("Interest added", extra={"userId": user.id, "interestId": interest_id})
    return user


async def remove_interest(repo: UserRepository, user: User, interest_id: str) -> User:
    """Drop every entry equal to `interest_id`. Missing ids are not an error."""
    interest_id = str(interest_id)
    interests = [i for i in user.interests if str(i) != interest_id]

    await repo.save(replace(user, interests=interests))
    user.interests = interests
    logger.debug("Interest removed", extra={"userId": user.id, "interestId": interest_id})
    return user
