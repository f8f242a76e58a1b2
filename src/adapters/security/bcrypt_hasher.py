"""
bcrypt password hasher - Implements PasswordHasher protocol.

bcrypt.checkpw() is constant-time and dominates response time. When there
is no stored hash to compare against (unknown email), a pre-computed dummy
hash is checked instead so the response time does not reveal whether the
account exists.
"""

import bcrypt

# Hash of "dummy_password_for_timing_safety" with cost factor 10.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10))

# bcrypt only uses the first 72 bytes and recent releases reject longer input.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class BcryptPasswordHasher:
    """
    Implements PasswordHasher protocol via bcrypt.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, cost: int = 12) -> None:
        self._cost = cost

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self._cost)).decode()

    def verify(self, password: str, password_hash: str | None) -> bool:
        if password_hash is None:
            bcrypt.checkpw(_encode(password), _DUMMY_BCRYPT_HASH)
            return False
        return bcrypt.checkpw(_encode(password), password_hash.encode())
