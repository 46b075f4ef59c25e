"""Test-wide environment: cheap bcrypt and a fixed signing key."""

import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-for-hs512")
