"""Unit tests for auth_service module."""

import unittest
from unittest.mock import AsyncMock, patch
from datetime import date, datetime, timedelta, timezone

import bcrypt
from jose import jwt

from services.auth_service import (
    authenticate,
    change_password,
    decode_token,
    hash_password,
    issue_token,
    register,
    verify_password,
)
from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import (
    AuthenticationError,
    DuplicateEmailError,
    PersistenceError,
    TokenIssuanceError,
    ValidationError,
)

SECRET = 'test-secret'


class TestPasswordHashing(unittest.TestCase):
    """Test hash_password and verify_password."""

    def test_round_trip(self):
        hashed = hash_password('abc123', rounds=4)
        self.assertTrue(verify_password('abc123', hashed))

    def test_wrong_password(self):
        hashed = hash_password('abc123', rounds=4)
        self.assertFalse(verify_password('abc124', hashed))

    def test_hash_is_not_plaintext_and_salted(self):
        first = hash_password('abc123', rounds=4)
        second = hash_password('abc123', rounds=4)
        self.assertNotEqual(first, 'abc123')
        self.assertNotEqual(first, second)

    def test_default_work_factor(self):
        with patch('utils.config.BCRYPT_ROUNDS', 10):
            hashed = hash_password('abc123')
        self.assertTrue(hashed.startswith('$2b$10$'))

    def test_malformed_hash_is_false(self):
        self.assertFalse(verify_password('abc123', 'not-a-bcrypt-hash'))

    def test_password_longer_than_72_bytes(self):
        password = 'x' * 80
        hashed = hash_password(password, rounds=4)
        self.assertTrue(verify_password(password, hashed))
        self.assertFalse(verify_password('y' * 80, hashed))

    def test_only_first_72_bytes_count(self):
        hashed = hash_password('x' * 72 + 'tail', rounds=4)
        self.assertTrue(verify_password('x' * 72, hashed))

    def test_multibyte_password_over_limit(self):
        password = 'é' * 40  # 80 bytes in UTF-8
        hashed = hash_password(password, rounds=4)
        self.assertTrue(verify_password(password, hashed))

    def test_explicit_rounds_not_replaced_by_default(self):
        with patch('services.auth_service.bcrypt.gensalt', wraps=bcrypt.gensalt) as spy:
            hash_password('abc123', rounds=4)
        spy.assert_called_once_with(rounds=4)

    def test_zero_rounds_passed_through(self):
        with patch('services.auth_service.bcrypt.gensalt', side_effect=ValueError('Invalid rounds')) as mock_gensalt:
            with self.assertRaises(ValueError):
                hash_password('abc123', rounds=0)
        mock_gensalt.assert_called_once_with(rounds=0)


@patch('utils.config.BCRYPT_ROUNDS', 4)
class TestRegister(unittest.IsolatedAsyncioTestCase):
    """Test register function."""

    def setUp(self):
        self.repo = FakeUserRepository()

    async def test_register_normalizes_and_hashes(self):
        user = await register(self.repo, '  Ada@Example.com ', 'abc123', name='  Ada ', bio=' hi ')

        self.assertEqual(user.email, 'ada@example.com')
        self.assertEqual(user.name, 'Ada')
        self.assertEqual(user.bio, 'hi')
        self.assertNotEqual(user.password_hash, 'abc123')
        self.assertTrue(verify_password('abc123', user.password_hash))
        self.assertIsNone(user.token)
        self.assertFalse(user.is_admin)
        self.assertIn(user.id, self.repo.store)

    async def test_register_with_location_and_birthdate(self):
        user = await register(
            self.repo, 'ada@example.com', 'abc123',
            birthdate=date(1995, 3, 1), coordinates=[2.35, 48.85],
        )
        self.assertEqual(user.location.coordinates, (2.35, 48.85))
        self.assertEqual(user.birthdate, date(1995, 3, 1))

    async def test_register_invalid_coordinates_writes_nothing(self):
        with self.assertRaises(ValidationError):
            await register(self.repo, 'ada@example.com', 'abc123', coordinates=[200, 10])
        self.assertEqual(self.repo.writes, 0)

    async def test_register_duplicate_email(self):
        await register(self.repo, 'ada@example.com', 'abc123')
        with self.assertRaises(DuplicateEmailError):
            await register(self.repo, 'ADA@example.com', 'other')
        self.assertEqual(len(self.repo.store), 1)

    async def test_register_empty_password(self):
        with self.assertRaises(ValidationError):
            await register(self.repo, 'ada@example.com', '')

    async def test_register_hashes_exactly_once(self):
        with patch('services.auth_service.hash_password', wraps=hash_password) as spy:
            await register(self.repo, 'ada@example.com', 'abc123')
        spy.assert_called_once_with('abc123')


@patch('utils.config.BCRYPT_ROUNDS', 4)
class TestAuthenticate(unittest.IsolatedAsyncioTestCase):
    """Test authenticate function."""

    async def asyncSetUp(self):
        self.repo = FakeUserRepository()
        self.user = await register(self.repo, 'ada@example.com', 'abc123')

    async def test_success(self):
        user = await authenticate(self.repo, ' ADA@example.com', 'abc123')
        self.assertEqual(user.id, self.user.id)

    async def test_wrong_password(self):
        with self.assertRaises(AuthenticationError):
            await authenticate(self.repo, 'ada@example.com', 'wrong')

    async def test_unknown_email_same_error(self):
        with self.assertRaises(AuthenticationError) as ctx:
            await authenticate(self.repo, 'nobody@example.com', 'abc123')
        self.assertEqual(str(ctx.exception), 'Invalid email or password')


@patch('utils.config.BCRYPT_ROUNDS', 4)
class TestIssueToken(unittest.IsolatedAsyncioTestCase):
    """Test issue_token and decode_token."""

    async def asyncSetUp(self):
        self.repo = FakeUserRepository()
        self.user = await register(self.repo, 'ada@example.com', 'abc123')

    async def test_token_persisted_on_record(self):
        token = await issue_token(self.repo, self.user, secret=SECRET)

        self.assertEqual(self.user.token, token)
        stored = await self.repo.get_by_id(self.user.id)
        self.assertEqual(stored.token, token)

    async def test_token_claims(self):
        before = datetime.now(timezone.utc)
        token = await issue_token(self.repo, self.user, secret=SECRET)

        claims = jwt.decode(token, SECRET, algorithms=['HS256'])
        self.assertEqual(claims['sub'], self.user.id)
        expires = datetime.fromtimestamp(claims['exp'], tz=timezone.utc)
        self.assertAlmostEqual(
            (expires - before).total_seconds(), timedelta(hours=1).total_seconds(), delta=5
        )

    async def test_reissue_overwrites(self):
        first = await issue_token(self.repo, self.user, secret=SECRET, ttl=timedelta(minutes=5))
        second = await issue_token(self.repo, self.user, secret=SECRET)
        self.assertNotEqual(first, second)
        stored = await self.repo.get_by_id(self.user.id)
        self.assertEqual(stored.token, second)

    async def test_issue_does_not_rehash(self):
        original_hash = self.user.password_hash
        await issue_token(self.repo, self.user, secret=SECRET)
        stored = await self.repo.get_by_id(self.user.id)
        self.assertEqual(stored.password_hash, original_hash)

    async def test_missing_secret(self):
        writes = self.repo.writes
        with patch('utils.config.JWT_SECRET_KEY', None):
            with self.assertRaises(TokenIssuanceError):
                await issue_token(self.repo, self.user)
        self.assertIsNone(self.user.token)
        self.assertEqual(self.repo.writes, writes)

    async def test_signing_failure_with_mismatched_algorithm(self):
        writes = self.repo.writes
        with patch('utils.config.JWT_ALGORITHM', 'RS256'):
            with self.assertRaises(TokenIssuanceError):
                await issue_token(self.repo, self.user, secret='not-a-pem-key')
        self.assertIsNone(self.user.token)
        self.assertEqual(self.repo.writes, writes)
        stored = await self.repo.get_by_id(self.user.id)
        self.assertIsNone(stored.token)

    async def test_signing_failure_with_unsupported_algorithm(self):
        writes = self.repo.writes
        with patch('utils.config.JWT_ALGORITHM', 'NOPE256'):
            with self.assertRaises(TokenIssuanceError):
                await issue_token(self.repo, self.user, secret=SECRET)
        self.assertIsNone(self.user.token)
        self.assertEqual(self.repo.writes, writes)

    async def test_secret_from_config(self):
        with patch('utils.config.JWT_SECRET_KEY', SECRET):
            token = await issue_token(self.repo, self.user)
            self.assertEqual(decode_token(token), self.user.id)

    async def test_failed_save_leaves_record_untouched(self):
        repo = AsyncMock()
        repo.save.side_effect = PersistenceError("boom")
        with self.assertRaises(PersistenceError):
            await issue_token(repo, self.user, secret=SECRET)
        self.assertIsNone(self.user.token)

    async def test_decode_rejects_wrong_secret(self):
        token = await issue_token(self.repo, self.user, secret=SECRET)
        self.assertIsNone(decode_token(token, secret='other-secret'))

    async def test_decode_rejects_expired(self):
        token = await issue_token(self.repo, self.user, secret=SECRET, ttl=timedelta(seconds=-10))
        self.assertIsNone(decode_token(token, secret=SECRET))


@patch('utils.config.BCRYPT_ROUNDS', 4)
class TestChangePassword(unittest.IsolatedAsyncioTestCase):
    """Test change_password function."""

    async def asyncSetUp(self):
        self.repo = FakeUserRepository()
        self.user = await register(self.repo, 'ada@example.com', 'abc123')

    async def test_new_password_hashed_and_persisted(self):
        await change_password(self.repo, self.user, 'n3w-pass')

        stored = await self.repo.get_by_id(self.user.id)
        self.assertTrue(verify_password('n3w-pass', stored.password_hash))
        self.assertFalse(verify_password('abc123', stored.password_hash))
        self.assertEqual(stored.password_hash, self.user.password_hash)

    async def test_empty_password_rejected(self):
        old_hash = self.user.password_hash
        with self.assertRaises(ValidationError):
            await change_password(self.repo, self.user, '')
        self.assertEqual(self.user.password_hash, old_hash)


@patch('utils.config.BCRYPT_ROUNDS', 4)
class TestEndToEnd(unittest.IsolatedAsyncioTestCase):
    """Register, issue a token and check credentials."""

    async def test_register_issue_verify(self):
        repo = FakeUserRepository()
        user = await register(repo, 'bob@example.com', 'abc123')
        token = await issue_token(repo, user, secret=SECRET)

        claims = jwt.decode(token, SECRET, algorithms=['HS256'])
        self.assertEqual(claims['sub'], user.id)
        self.assertAlmostEqual(claims['exp'] - claims['iat'], 3600, delta=1)

        stored = await repo.get_by_id(user.id)
        self.assertTrue(verify_password('abc123', stored.password_hash))
        self.assertFalse(verify_password('wrong', stored.password_hash))


if __name__ == '__main__':
    unittest.main()
