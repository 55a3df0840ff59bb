"""
Numeris - Access tokens (JWT, HS256)

parse() reports the first violated property in this order: signature,
expiry, not-before, anything else.
"""

import logging
from datetime import timedelta
from typing import Any, Dict

import jwt

from config import now_utc
from errors import (
    InvalidSignatureError,
    InvalidTokenError,
    TokenExpiredError,
    TokenNotYetValidError,
)

logger = logging.getLogger("tokens")

ALGORITHM = "HS256"


class TokenService:
    def __init__(self, secret: str, ttl_hours: int = 48, issuer: str = "numeris"):
        self.secret = secret
        self.ttl = timedelta(hours=ttl_hours)
        self.issuer = issuer

    def issue(self, subject: str, email: str) -> str:
        if not self.secret:
            raise InvalidTokenError("token signing key is not configured")
        now = now_utc()
        payload = {
            "sub": subject,
            "email": email,
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "nbf": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        logger.info(f"Creating new access token for {subject}")
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def parse(self, token: str) -> Dict[str, Any]:
        """Validate `token` and return {"id", "email", "exp"}."""
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                options={
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                    "require": ["sub", "exp"],
                },
            )
        except jwt.InvalidSignatureError:
            logger.warning("invalid token signature")
            raise InvalidSignatureError("invalid token signature")
        except jwt.InvalidTokenError as e:
            logger.warning(f"invalid token: {e}")
            raise InvalidTokenError("invalid token")

        now = now_utc().timestamp()
        exp = claims.get("exp")
        nbf = claims.get("nbf")
        if not isinstance(exp, (int, float)) or (nbf is not None and not isinstance(nbf, (int, float))):
            raise InvalidTokenError("invalid token claims")
        if exp <= now:
            logger.warning(f"token has expired for {claims.get('sub')}")
            raise TokenExpiredError("token has expired")
        if nbf is not None and nbf > now:
            raise TokenNotYetValidError("token is not valid yet")

        return {"id": claims["sub"], "email": claims.get("email", ""), "exp": exp}
