"""RSA private key loading, public key derivation and keypair generation."""

import uuid_utils
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from zcred.core.errors import KeyReadError
from zcred.crypto.types import SigningKeyData

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537


def load_rsa_private_key(private_key_pem: str) -> RSAPrivateKey:
    """Parse a PKCS#1 or PKCS#8 PEM RSA private key.

    Raises:
        KeyReadError: If the text is not PEM, is encrypted, or holds a non-RSA key.
    """
    try:
        loaded = serialization.load_pem_private_key(
            private_key_pem.encode("utf-8"), password=None
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyReadError("RSA keypair could not be read.") from exc
    if not isinstance(loaded, RSAPrivateKey):
        raise KeyReadError("RSA keypair could not be read.")
    return loaded


def public_key_pem(private_key_pem: str) -> str:
    """Derive the SubjectPublicKeyInfo PEM for a private key PEM."""
    private_key = load_rsa_private_key(private_key_pem)
    return (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


def generate_rsa_keypair(
    private_format: serialization.PrivateFormat = serialization.PrivateFormat.PKCS8,
) -> SigningKeyData:
    """Generate a new RSA-2048 keypair in the layout credential files use."""
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=private_format,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    kid = str(uuid_utils.uuid7())
    return SigningKeyData(
        kid=kid,
        private_key_pem=private_pem,
        public_key_pem=public_key_pem(private_pem),
    )
