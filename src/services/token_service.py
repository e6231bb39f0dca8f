"""Bearer token codec: HMAC-SHA256 signed claims.

Issued tokens use the JWS compact layout::

    BASE64URL(header) "." BASE64URL(payload) "." BASE64URL(HMAC-SHA256(secret, signing_input))

where ``signing_input`` is the first two segments joined by ``"."``, the header is
``{"alg":"HS256","typ":"JWT"}`` and the payload is the UTF-8 JSON of the claims
with sorted keys and no whitespace. ``sub`` holds the subject (the user's email);
``iat`` and ``exp`` are integer epoch seconds.

Decoding checks the signature only. Expiry is reported by ``is_valid`` as
``False`` so that an expired but genuine token is never treated as malformed.
"""

import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jws
from jose.exceptions import JOSEError

from domain.model.errors import InvalidTokenError
from utils.config import Settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def canonical_payload(claims: dict[str, Any]) -> bytes:
    """Serialize claims with sorted keys and no whitespace."""
    return json.dumps(claims, sort_keys=True, separators=(",", ":")).encode("utf-8")


class TokenCodec:
    """Issue and verify signed bearer tokens."""

    def __init__(
        self,
        secret: str,
        expires_in: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._lifetime = int(expires_in.total_seconds())
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(settings.jwt_secret_key, timedelta(seconds=settings.jwt_expiration_seconds))

    def issue(self, subject: str, extra_claims: dict[str, Any] | None = None) -> str:
        """Sign a token for ``subject``. Extra claims never override sub/iat/exp."""
        issued_at = int(self._clock().timestamp())
        claims = dict(extra_claims or {})
        claims.update(sub=subject, iat=issued_at, exp=issued_at + self._lifetime)
        return jws.sign(
            canonical_payload(claims),
            self._secret,
            headers={"typ": "JWT"},
            algorithm=ALGORITHM,
        )

    def subject(self, token: str) -> str:
        return self._claims(token)["sub"]

    def expiry(self, token: str) -> datetime:
        return datetime.fromtimestamp(self._claims(token)["exp"], tz=timezone.utc)

    def is_valid(self, token: str, expected_subject: str) -> bool:
        """True if the token names ``expected_subject`` and has not expired yet.

        Raises:
            InvalidTokenError: token is malformed or its signature does not verify
        """
        claims = self._claims(token)
        expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        return claims["sub"] == expected_subject and expires_at > self._clock()

    def _claims(self, token: str) -> dict[str, Any]:
        try:
            payload = jws.verify(token, self._secret, algorithms=[ALGORITHM])
            claims = json.loads(payload)
        except (JOSEError, ValueError) as e:
            logger.debug("Token verification failed", extra={"error": str(e)})
            raise InvalidTokenError("Invalid token") from e

        if not isinstance(claims, dict):
            raise InvalidTokenError("Token payload is not a claim set")

        sub, exp = claims.get("sub"), claims.get("exp")
        if not isinstance(sub, str) or not isinstance(exp, int) or isinstance(exp, bool):
            raise InvalidTokenError("Token is missing required claims")
        return claims
