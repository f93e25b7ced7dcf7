"""Environment-backed settings.

Values are read once at import. `.env` in the working directory is loaded
first so local runs behave like deployed ones.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# MongoDB
MONGO_URL = os.getenv('MONGO_URL')
DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'geomatch')

# JWT
# Not required at import: token issuance raises TokenIssuanceError when unset.
# Generate a secure key with: openssl rand -hex 32
JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
JWT_EXPIRATION_SECONDS = int(os.getenv('JWT_EXPIRATION_SECONDS', '3600'))

# bcrypt work factor (2^10 iterations by default)
BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '10'))

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
