"""Type definitions for signing keys and JWT assertions."""

from pydantic import BaseModel, ConfigDict


class SigningKeyData(BaseModel):
    """An RSA keypair together with its key id."""

    kid: str
    private_key_pem: str
    public_key_pem: str


class AssertionClaims(BaseModel):
    """Claim set of a signed assertion."""

    model_config = ConfigDict(frozen=True)

    iss: str
    sub: str
    iat: int
    exp: int
    aud: str


class DecodedAssertion(AssertionClaims):
    """Verified assertion claims, keeping any extra claims."""

    model_config = ConfigDict(extra="allow", frozen=True)
