"""
Stored value variants.

A value is tagged when it is written: strings are kept verbatim
(RawValue), everything else is JSON-encoded (JsonValue). Values loaded
from a persisted blob carry no tag (EncodedValue) and are decoded by
trying JSON first and falling back to the raw string.

All three persist as the same thing: one string in the blob.
"""

import json
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

from chanstore.core.errors import SerializationError


class _Absent:
    """Sentinel returned by get() for a path that holds nothing."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


def _reject_constant(name: str):
    # NaN and Infinity are accepted by json.loads but are not JSON
    raise ValueError(f"{name} is not valid JSON")


@dataclass(frozen=True)
class RawValue:
    """A string stored verbatim."""
    text: str

    @property
    def serialized(self) -> str:
        return self.text

    def decode(self) -> str:
        return self.text


@dataclass(frozen=True)
class JsonValue:
    """A non-string value, kept alongside its JSON encoding."""
    serialized: str

    def decode(self) -> Any:
        return json.loads(self.serialized)


@dataclass(frozen=True)
class EncodedValue:
    """A string read back from the blob; its original type is unknown."""
    serialized: str

    def decode(self) -> Any:
        try:
            return json.loads(self.serialized, parse_constant=_reject_constant)
        except ValueError:
            return self.serialized


StoredValue = Union[RawValue, JsonValue, EncodedValue]


def encode_value(path: str, value: Any) -> StoredValue:
    """
    Tag and serialize a value for storage.

    Raises:
        SerializationError: if value cannot be JSON-encoded
    """
    if isinstance(value, str):
        return RawValue(value)

    try:
        serialized = json.dumps(value, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError(path, str(exc)) from exc
    return JsonValue(serialized)


class Entry(BaseModel):
    """A (path, value) pair accepted by KeyedStore.set()."""

    model_config = ConfigDict(frozen=True)

    path: str
    value: Any
