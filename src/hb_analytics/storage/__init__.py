"""Persistent key/value storage."""

from .kv_store import KeyValueStore, MemoryStore, JsonFileStore

__all__ = ["KeyValueStore", "MemoryStore", "JsonFileStore"]
