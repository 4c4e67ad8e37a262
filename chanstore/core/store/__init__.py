"""Keyed store: hierarchical paths over one durable blob"""
from chanstore.core.store.values import (
    ABSENT,
    Entry,
    RawValue,
    JsonValue,
    EncodedValue,
    encode_value,
)
from chanstore.core.store.path_index import PathIndex
from chanstore.core.store.keyed_store import KeyedStore, init, parse_blob

__all__ = [
    "ABSENT",
    "Entry",
    "RawValue",
    "JsonValue",
    "EncodedValue",
    "encode_value",
    "PathIndex",
    "KeyedStore",
    "init",
    "parse_blob",
]
