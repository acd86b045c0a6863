from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..languages import LanguageDescriptor


@dataclass(frozen=True, slots=True)
class ExecutionRequest:
    """One submission to the remote sandbox, built fresh per run.

    Example:
        ```python
        req = ExecutionRequest("python", "3.10.0", "print(7)", "")
        ```
    """

    language_executor_id: str
    executor_version: str
    source_code: str
    stdin: str = ""

    @classmethod
    def for_language(
        cls, language: LanguageDescriptor, source_code: str, stdin: str = ""
    ) -> "ExecutionRequest":
        """Build a request using the registry's executor pair for `language`.

        Example:
            ```python
            req = ExecutionRequest.for_language(default_language(), "print(1)")
            ```
        """
        return cls(
            language_executor_id=language.executor_id,
            executor_version=language.executor_version,
            source_code=source_code,
            stdin=stdin,
        )


@dataclass(frozen=True, slots=True)
class ExecutionResponse:
    """Parsed JSON envelope returned by the sandbox gateway.

    Example:
        ```python
        resp = ExecutionResponse(body={"success": True, "data": {"run": {"stdout": "7", "code": 0}}})
        ```
    """

    body: Any
    status_code: int = 200
