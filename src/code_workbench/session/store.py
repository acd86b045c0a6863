from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, TypeVar

from ..languages import DEFAULT_REGISTRY, LanguageRegistry
from .backends import MemoryBackend, SessionBackend, SessionStorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionKind(str, Enum):
    """Which editor buffer a session entry holds.

    Example:
        ```python
        kind = SessionKind("code")
        ```
    """

    CODE = "code"
    INPUT = "input"


def _escape_component(value: str) -> str:
    """Percent-escape the key separator so composite keys cannot collide.

    Example:
        ```python
        _escape_component("two_sum")  # "two%5Fsum"
        ```
    """
    return value.replace("%", "%25").replace("_", "%5F")


def _coerce_kind(kind: SessionKind | str) -> SessionKind:
    """Normalize a kind argument, rejecting unknown kinds.

    Example:
        ```python
        _coerce_kind("input")  # SessionKind.INPUT
        ```
    """
    try:
        return SessionKind(kind)
    except ValueError:
        raise ValueError(f"Unknown session kind: {kind!r}") from None


class SessionStore:
    """Persist per-(subject, language) code and stdin buffers.

    A failed write stops further writes but keeps reading saved sessions;
    a failed read switches the store to its in-memory mirror entirely.
    Either way the failure is logged once.

    Example:
        ```python
        store = SessionStore(JsonFileBackend("/tmp/sessions.json"), namespace="question")
        ```
    """

    def __init__(
        self,
        backend: SessionBackend | None = None,
        *,
        namespace: str = "question",
        registry: LanguageRegistry = DEFAULT_REGISTRY,
    ) -> None:
        """Bind the store to a backend, key namespace and language registry.

        Example:
            ```python
            store = SessionStore(MemoryBackend())
            ```
        """
        if not namespace:
            raise ValueError("SessionStore requires a non-empty namespace")
        self._backend: SessionBackend = backend if backend is not None else MemoryBackend()
        self._mirror = MemoryBackend()
        # Keys removed in this process; the backend may still hold them.
        self._dropped: set[str] = set()
        self._namespace = namespace
        self._registry = registry
        self._writable = True
        self._readable = True

    @property
    def persistent(self) -> bool:
        """Return False once edits are no longer written to the backend.

        Example:
            ```python
            if not store.persistent: ...
            ```
        """
        return self._writable

    @property
    def namespace(self) -> str:
        """Return the key namespace.

        Example:
            ```python
            prefix = store.namespace
            ```
        """
        return self._namespace

    def key_for(self, subject_id: str, language_name: str, kind: SessionKind | str) -> str:
        """Build the composite storage key for one buffer.

        Example:
            ```python
            store.key_for("42", "Python", "code")  # "question_42_Python_code"
            ```
        """
        resolved = _coerce_kind(kind)
        return "_".join(
            (
                self._namespace,
                _escape_component(str(subject_id)),
                _escape_component(language_name),
                resolved.value,
            )
        )

    def load(self, subject_id: str, language_name: str, kind: SessionKind | str) -> str | None:
        """Return the stored buffer, or None when nothing was saved.

        Example:
            ```python
            code = store.load("42", "Python", SessionKind.CODE)
            ```
        """
        key = self.key_for(subject_id, language_name, kind)
        if self._writable and self._readable:
            return self._guarded(
                lambda: self._backend.get(key), fallback=lambda: self._mirror.get(key), reading=True
            )
        if key in self._dropped:
            return None
        value = self._mirror.get(key)
        if value is not None or not self._readable:
            return value
        return self._guarded(lambda: self._backend.get(key), fallback=lambda: None, reading=True)

    def save(
        self, subject_id: str, language_name: str, kind: SessionKind | str, value: str
    ) -> None:
        """Overwrite a buffer; untouched boilerplate code is never stored.

        Example:
            ```python
            store.save("42", "Python", "code", "print(7)")
            ```
        """
        resolved = _coerce_kind(kind)
        if resolved is SessionKind.CODE and self._is_default_template(language_name, value):
            return
        key = self.key_for(subject_id, language_name, resolved)
        self._mirror.set(key, value)
        self._dropped.discard(key)
        if self._writable:
            self._guarded(lambda: self._backend.set(key, value), fallback=lambda: None, reading=False)

    def clear(self, subject_id: str, language_name: str) -> None:
        """Remove both the code and input buffers for one pair.

        Example:
            ```python
            store.clear("42", "Python")
            ```
        """
        for kind in SessionKind:
            self._remove(self.key_for(subject_id, language_name, kind))

    def _remove(self, key: str) -> None:
        """Delete a key from the mirror and the backend.

        Example:
            ```python
            store._remove("question_42_Python_code")
            ```
        """
        self._mirror.delete(key)
        self._dropped.add(key)
        if self._writable:
            self._guarded(lambda: self._backend.delete(key), fallback=lambda: None, reading=False)

    def _is_default_template(self, language_name: str, value: str) -> bool:
        """Return whether `value` is the language's shipped template.

        Example:
            ```python
            store._is_default_template("Python", lang.default_code_template)
            ```
        """
        language = self._registry.find_by_exact_name(language_name)
        return language is not None and value == language.default_code_template

    def _guarded(self, action: Callable[[], T], *, fallback: Callable[[], T], reading: bool) -> T:
        """Run a backend call, turning storage failures into a degraded mode.

        A failed write disables writes only; a failed read disables both.

        Example:
            ```python
            value = store._guarded(lambda: backend.get(key), fallback=lambda: None, reading=True)
            ```
        """
        try:
            return action()
        except (SessionStorageError, OSError) as exc:
            if self._writable:
                logger.warning("Session storage unavailable, keeping sessions in memory: %s", exc)
            self._writable = False
            if reading:
                self._readable = False
            return fallback()
