from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .languages import DEFAULT_REGISTRY

TOKEN_ENV_VAR = "CODE_WORKBENCH_API_TOKEN"
WIRE_FORMATS = ("gateway", "piston")

DEFAULT_BASE_URL = "http://localhost:8080/api"
DEFAULT_EXECUTE_PATH = "/compiler/execute"
DEFAULT_WIRE_FORMAT = "gateway"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_NAMESPACE = "question"
DEFAULT_STORAGE_PATH = "~/.code_workbench/sessions.json"
DEFAULT_LANGUAGE = "Python"


def _read_config_toml(path: Path) -> dict[str, Any]:
    """Read a workbench TOML file and return its settings table.

    Example:
        ```python
        raw = _read_config_toml(Path("/tmp/workbench.toml"))
        ```
    """
    if not path.exists():
        raise ValueError(f"Config file not found: {path}")
    raw = tomllib.loads(path.read_text(encoding="utf-8"))
    table = raw.get("workbench", raw)
    if not isinstance(table, dict):
        raise ValueError("Workbench config must be a TOML table")
    return table


def _optional_str(value: Any, field_name: str) -> str | None:
    """Validate an optional string setting.

    Example:
        ```python
        token = _optional_str("abc", "api_token")
        ```
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{field_name}' must be a string")
    return value


@dataclass(slots=True)
class WorkbenchConfig:
    """Settings for the execution gateway, session storage and defaults.

    Example:
        ```python
        config = WorkbenchConfig(base_url="https://judge.example.com/api", wire_format="gateway")
        ```
    """

    base_url: str = DEFAULT_BASE_URL
    execute_path: str = DEFAULT_EXECUTE_PATH
    wire_format: str = DEFAULT_WIRE_FORMAT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    api_token: str | None = None
    namespace: str = DEFAULT_NAMESPACE
    storage_path: str = DEFAULT_STORAGE_PATH
    storage_max_bytes: int | None = None
    default_language: str = DEFAULT_LANGUAGE
    config_path: str | None = None

    def __post_init__(self) -> None:
        """Validate settings after dataclass initialization.

        Example:
            ```python
            WorkbenchConfig(wire_format="piston")
            ```
        """
        if self.wire_format not in WIRE_FORMATS:
            raise ValueError("wire_format must be 'gateway' or 'piston'")
        if not self.base_url.strip():
            raise ValueError("base_url must not be empty")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if not self.namespace.strip():
            raise ValueError("namespace must not be empty")
        if self.storage_max_bytes is not None and self.storage_max_bytes <= 0:
            raise ValueError("storage_max_bytes must be positive when set")
        if DEFAULT_REGISTRY.find_by_exact_name(self.default_language) is None:
            raise ValueError(f"Unknown default_language: {self.default_language}")

    @property
    def execute_url(self) -> str:
        """Return the full URL submissions are posted to.

        Example:
            ```python
            url = WorkbenchConfig().execute_url
            ```
        """
        return self.base_url.rstrip("/") + "/" + self.execute_path.lstrip("/")

    @property
    def resolved_storage_path(self) -> Path:
        """Return the session file path with `~` expanded.

        Example:
            ```python
            path = WorkbenchConfig().resolved_storage_path
            ```
        """
        return Path(self.storage_path).expanduser()

    def resolved_api_token(self) -> str | None:
        """Return the configured token, falling back to the environment.

        Example:
            ```python
            token = WorkbenchConfig().resolved_api_token()
            ```
        """
        return self.api_token or os.environ.get(TOKEN_ENV_VAR) or None

    @classmethod
    def from_file(cls, config_path: str) -> "WorkbenchConfig":
        """Create a config instance from a TOML file.

        Example:
            ```python
            config = WorkbenchConfig.from_file("/tmp/workbench.toml")
            ```
        """
        raw = _read_config_toml(Path(config_path))
        max_bytes = raw.get("storage_max_bytes")
        return cls(
            base_url=str(raw.get("base_url", DEFAULT_BASE_URL)),
            execute_path=str(raw.get("execute_path", DEFAULT_EXECUTE_PATH)),
            wire_format=str(raw.get("wire_format", DEFAULT_WIRE_FORMAT)),
            timeout_seconds=float(raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
            api_token=_optional_str(raw.get("api_token"), "api_token"),
            namespace=str(raw.get("namespace", DEFAULT_NAMESPACE)),
            storage_path=str(raw.get("storage_path", DEFAULT_STORAGE_PATH)),
            storage_max_bytes=int(max_bytes) if max_bytes is not None else None,
            default_language=str(raw.get("default_language", DEFAULT_LANGUAGE)),
            config_path=config_path,
        )
