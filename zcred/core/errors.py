"""Exceptions raised while loading credentials, signing and exchanging tokens."""

from datetime import timedelta
from pathlib import Path


class CredentialsError(Exception):
    """Base class for every error raised by zcred."""


class CredentialNotFoundError(CredentialsError, FileNotFoundError):
    """The credential file does not exist at the resolved path."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"File not found: {path}.")
        self.path = path
        self.filename = str(path)


class MalformedDataError(CredentialsError, ValueError):
    """The credential document deserialized to nothing."""


class CredentialParseError(CredentialsError, ValueError):
    """The credential JSON is invalid or does not fit the record shape."""


class InvalidLifetimeError(CredentialsError, ValueError):
    """A requested assertion lifetime is outside of [1 second, 1 hour]."""

    def __init__(self, param_name: str, value: timedelta) -> None:
        super().__init__(
            f"The {param_name} is below 1 second or above 1 hour "
            f"(parameter '{param_name}', got {value!r})."
        )
        self.param_name = param_name
        self.value = value


class KeyReadError(CredentialsError):
    """The credential key is not a readable RSA private key."""


class AuthenticationFailedError(CredentialsError):
    """The remote server answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Authentication failed with HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class MalformedResponseError(CredentialsError):
    """The remote server answered successfully but without the expected fields."""
