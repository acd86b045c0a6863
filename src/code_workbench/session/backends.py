from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol


class SessionStorageError(Exception):
    """Raised by a backend when its durable storage cannot be used.

    Example:
        ```python
        raise SessionStorageError("quota exceeded")
        ```
    """


class SessionBackend(Protocol):
    def get(self, key: str) -> str | None:
        """Return the stored value for `key`, or None.

        Example:
            ```python
            value = backend.get("question_1_Python_code")
            ```
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, overwriting.

        Example:
            ```python
            backend.set("question_1_Python_code", "print(1)")
            ```
        """
        ...

    def delete(self, key: str) -> None:
        """Remove `key` if present.

        Example:
            ```python
            backend.delete("question_1_Python_code")
            ```
        """
        ...


class MemoryBackend:
    """Process-local key/value backend with no durability.

    Example:
        ```python
        backend = MemoryBackend()
        ```
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Initialize with an optional copy of existing entries.

        Example:
            ```python
            backend = MemoryBackend({"k": "v"})
            ```
        """
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        """Return the stored value for `key`, or None.

        Example:
            ```python
            value = backend.get("k")
            ```
        """
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`.

        Example:
            ```python
            backend.set("k", "v")
            ```
        """
        self._data[key] = value

    def delete(self, key: str) -> None:
        """Remove `key` if present.

        Example:
            ```python
            backend.delete("k")
            ```
        """
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of every stored entry.

        Example:
            ```python
            entries = backend.snapshot()
            ```
        """
        return dict(self._data)


class JsonFileBackend:
    """Durable backend keeping every entry in one JSON object on disk.

    Example:
        ```python
        backend = JsonFileBackend("/tmp/sessions.json", max_bytes=5_000_000)
        ```
    """

    def __init__(self, path: str | Path, *, max_bytes: int | None = None) -> None:
        """Bind the backend to a file path and optional size quota.

        Example:
            ```python
            backend = JsonFileBackend(Path("~/.code_workbench/sessions.json").expanduser())
            ```
        """
        self._path = Path(path).expanduser()
        self._max_bytes = max_bytes

    @property
    def path(self) -> Path:
        """Return the backing file path.

        Example:
            ```python
            path = backend.path
            ```
        """
        return self._path

    def get(self, key: str) -> str | None:
        """Return the stored value for `key`, or None.

        Example:
            ```python
            value = backend.get("question_1_Python_code")
            ```
        """
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store `value` under `key` and rewrite the file.

        Example:
            ```python
            backend.set("question_1_Python_code", "print(1)")
            ```
        """
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        """Remove `key` and rewrite the file when it was present.

        Example:
            ```python
            backend.delete("question_1_Python_code")
            ```
        """
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self) -> list[str]:
        """Return every stored key, sorted.

        Example:
            ```python
            keys = backend.keys()
            ```
        """
        return sorted(self._read())

    def _read(self) -> dict[str, str]:
        """Load the JSON object from disk; a missing file is empty.

        Example:
            ```python
            data = backend._read()
            ```
        """
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SessionStorageError(f"Cannot read session file {self._path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise SessionStorageError(f"Session file {self._path} must hold a JSON object")
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        """Atomically replace the JSON file, enforcing the size quota.

        Example:
            ```python
            backend._write({"k": "v"})
            ```
        """
        encoded = json.dumps(data, ensure_ascii=False, sort_keys=True)
        if self._max_bytes is not None and len(encoded.encode("utf-8")) > self._max_bytes:
            raise SessionStorageError(
                f"quota exceeded: session data would exceed {self._max_bytes} bytes"
            )
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=".sessions_", suffix=".json", dir=str(self._path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(encoded)
                os.replace(tmp_name, self._path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise SessionStorageError(f"Cannot write session file {self._path}: {exc}") from exc
