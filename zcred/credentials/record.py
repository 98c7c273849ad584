"""Credential records and their JSON loading contract.

Every entry point (file path, stream, string) ends in :func:`parse_json_bytes`,
so the three ways of loading a record behave identically. Async variants run
the blocking loader on a worker thread.
"""

import asyncio
import codecs
import inspect
import logging
import os
from abc import abstractmethod
from datetime import timedelta
from pathlib import Path
from typing import IO, Any, ClassVar, Self, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import from_json

from zcred.core.errors import (
    CredentialNotFoundError,
    CredentialParseError,
    MalformedDataError,
)
from zcred.crypto.assertion import AssertionSigner
from zcred.crypto.keys import load_rsa_private_key

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound="CredentialRecord")


def resolve_path(path: str | os.PathLike[str]) -> Path:
    """Resolve ``path`` against the working directory into a normalised absolute path."""
    return Path(os.path.abspath(Path.cwd() / path))


def parse_json_bytes(model: type[RecordT], data: bytes | str) -> RecordT:
    """Parse a credential document into ``model``.

    A leading byte order mark is skipped.

    Raises:
        TypeError: If ``model`` is an abstract record class.
        MalformedDataError: If the document is empty or ``null``.
        CredentialParseError: If the JSON is invalid or does not fit ``model``.
        KeyReadError: If the embedded key is not an RSA private key.
    """
    if inspect.isabstract(model):
        raise TypeError(
            f"{model.__name__} is abstract; load Application or ServiceAccount instead."
        )
    if isinstance(data, bytes):
        data = data.removeprefix(codecs.BOM_UTF8)
    else:
        data = data.removeprefix("\ufeff")
    if not data.strip():
        raise MalformedDataError(
            f"The json document for {model.__name__} is empty."
        )
    try:
        raw = from_json(data)
    except ValueError as exc:
        raise CredentialParseError(f"Invalid json for {model.__name__}: {exc}") from exc
    if raw is None:
        raise MalformedDataError(
            "The json document yielded a 'null' result for deserialization."
        )
    if not isinstance(raw, dict):
        raise CredentialParseError(
            f"Expected a json object for {model.__name__}, got {type(raw).__name__}."
        )
    try:
        record = model.model_validate(raw)
    except ValidationError as exc:
        # input values would echo the private key
        problems = "; ".join(
            f"{'.'.join(map(str, err['loc']))}: {err['msg']}"
            for err in exc.errors(include_input=False, include_url=False)
        )
        raise CredentialParseError(
            f"The json document is not a valid {model.__name__}: {problems}"
        ) from None
    load_rsa_private_key(record.key)
    return record


class CredentialRecord(BaseModel):
    """Identity and key material of a machine user, immutable once loaded."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_min_length=1,
    )

    TYPE: ClassVar[str]

    key_id: str
    key: str = Field(repr=False)

    @model_validator(mode="before")
    @classmethod
    def _match_field_names(cls, data: Any) -> Any:
        """Map json keys onto field aliases without regard to case."""
        if not isinstance(data, dict):
            return data
        names: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            names[name.lower()] = name
            if field.alias:
                names[field.alias.lower()] = field.alias
        return {names.get(str(k).lower(), k): v for k, v in data.items()}

    @property
    @abstractmethod
    def subject_id(self) -> str:
        """Identifier used as ``iss`` and ``sub`` of signed assertions."""

    @classmethod
    def load_from_json_stream(cls, stream: IO[bytes] | IO[str]) -> Self:
        """Load a record from a readable stream (file, BytesIO, StringIO, ...)."""
        logger.debug("Loading %s from stream", cls.__name__)
        return parse_json_bytes(cls, stream.read())

    @classmethod
    def load_from_json_string(cls, json: str) -> Self:
        """Load a record from a string that contains json."""
        logger.debug("Loading %s from string", cls.__name__)
        return parse_json_bytes(cls, json.encode("utf-8"))

    @classmethod
    def load_from_json_file(cls, path: str | os.PathLike[str]) -> Self:
        """Load a record from a (relative or absolute) file path.

        Raises:
            CredentialNotFoundError: If no file exists at the resolved path.
        """
        resolved = resolve_path(path)
        if not resolved.is_file():
            raise CredentialNotFoundError(resolved)
        logger.debug("Loading %s from %s", cls.__name__, resolved)
        with resolved.open("rb") as stream:
            return cls.load_from_json_stream(stream)

    @classmethod
    async def aload_from_json_stream(cls, stream: IO[bytes] | IO[str]) -> Self:
        return await asyncio.to_thread(cls.load_from_json_stream, stream)

    @classmethod
    async def aload_from_json_string(cls, json: str) -> Self:
        return await asyncio.to_thread(cls.load_from_json_string, json)

    @classmethod
    async def aload_from_json_file(cls, path: str | os.PathLike[str]) -> Self:
        return await asyncio.to_thread(cls.load_from_json_file, path)

    def signer(self) -> AssertionSigner:
        """Build an assertion signer bound to this record."""
        return AssertionSigner(self.subject_id, self.key_id, self.key)

    def get_signed_jwt(self, audience: str, lifetime: timedelta | None = None) -> str:
        """Create a signed JWT for ``audience``. Lifetime: min 1 second, max and default 1 hour."""
        return self.signer().sign(audience, lifetime)

    async def aget_signed_jwt(
        self, audience: str, lifetime: timedelta | None = None
    ) -> str:
        return await self.signer().asign(audience, lifetime)
