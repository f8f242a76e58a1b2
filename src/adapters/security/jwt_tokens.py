"""
JWT token issuer - Implements TokenIssuer protocol with PyJWT.

Tokens are signed with the configured secret and carry the account id
in the "sub" claim.
"""

from datetime import datetime, timedelta, timezone

import jwt

from src.domain.exceptions import Unauthenticated


class JwtTokenIssuer:
    """
    Implements TokenIssuer protocol via signed JWTs.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expiry_days: int = 7) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expiry = timedelta(days=expiry_days)

    def issue(self, account_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": account_id,
            "iat": now,
            "exp": now + self._expiry,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def resolve(self, token: str) -> str:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError:
            raise Unauthenticated("Invalid or expired token") from None
        return payload["sub"]
