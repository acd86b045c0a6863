from .backends import JsonFileBackend, MemoryBackend, SessionBackend, SessionStorageError
from .store import SessionKind, SessionStore

__all__ = [
    "JsonFileBackend",
    "MemoryBackend",
    "SessionBackend",
    "SessionKind",
    "SessionStorageError",
    "SessionStore",
]
