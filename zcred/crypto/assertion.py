"""JWT assertion creation and verification using RS256."""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

import jwt

from zcred.core.errors import InvalidLifetimeError
from zcred.crypto.keys import load_rsa_private_key
from zcred.crypto.types import AssertionClaims, DecodedAssertion

ALGORITHM = "RS256"
MIN_LIFETIME = timedelta(seconds=1)
MAX_LIFETIME = timedelta(hours=1)
DEFAULT_LIFETIME = MAX_LIFETIME

logger = logging.getLogger(__name__)


def validate_lifetime(lifetime: timedelta | None) -> timedelta:
    """Return the effective lifetime, rejecting values outside [1s, 1h]."""
    if lifetime is None:
        return DEFAULT_LIFETIME
    if lifetime < MIN_LIFETIME or lifetime > MAX_LIFETIME:
        raise InvalidLifetimeError("lifetime", lifetime)
    return lifetime


class AssertionSigner:
    """Creates RS256-signed JWT assertions for one machine identity.

    The subject is used as both ``iss`` and ``sub``; ``key_id`` goes into the
    JWS header as ``kid`` so the verifier can select the public key.
    """

    def __init__(self, subject: str, key_id: str, private_key_pem: str) -> None:
        self._subject = subject
        self._key_id = key_id
        self._private_key_pem = private_key_pem

    def build_claims(
        self, audience: str, lifetime: timedelta | None = None
    ) -> AssertionClaims:
        """Build the claim set for an assertion issued now."""
        effective = validate_lifetime(lifetime)
        issued_at = int(datetime.now(UTC).timestamp())
        return AssertionClaims(
            iss=self._subject,
            sub=self._subject,
            iat=issued_at,
            exp=issued_at + int(effective.total_seconds()),
            aud=audience,
        )

    def sign(self, audience: str, lifetime: timedelta | None = None) -> str:
        """Create a signed compact JWS for ``audience``.

        Raises:
            InvalidLifetimeError: If ``lifetime`` is below 1 second or above 1 hour.
            KeyReadError: If the private key cannot be read as an RSA key.
        """
        claims = self.build_claims(audience, lifetime)
        private_key = load_rsa_private_key(self._private_key_pem)
        token = jwt.encode(
            claims.model_dump(),
            private_key,
            algorithm=ALGORITHM,
            headers={"kid": self._key_id},
        )
        logger.debug(
            "Signed assertion for sub=%s aud=%s exp=%d",
            claims.sub,
            claims.aud,
            claims.exp,
        )
        return token

    async def asign(self, audience: str, lifetime: timedelta | None = None) -> str:
        """Async variant of :meth:`sign`, run on a worker thread."""
        return await asyncio.to_thread(self.sign, audience, lifetime)


def decode_assertion(
    token: str, public_key_pem: str, audience: str
) -> DecodedAssertion:
    """Verify and decode an RS256 assertion issued for ``audience``."""
    raw = jwt.decode(
        token,
        public_key_pem,
        algorithms=[ALGORITHM],
        audience=audience,
        options={"require": ["iss", "sub", "iat", "exp", "aud"]},
    )
    return DecodedAssertion.model_validate(raw)
