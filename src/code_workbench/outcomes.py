from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Panel(str, Enum):
    """Workbench panel the front end expands for an outcome.

    Example:
        ```python
        panel = Panel.OUTPUT
        ```
    """

    INPUT = "input"
    OUTPUT = "output"


@dataclass(frozen=True, slots=True)
class InputRequired:
    """Pre-flight stop: the code reads stdin but no input was given.

    Example:
        ```python
        outcome = InputRequired(language_name="Python")
        ```
    """

    language_name: str
    ok = False
    panel = Panel.INPUT


@dataclass(frozen=True, slots=True)
class CompileFailure:
    """The sandbox compile stage exited non-zero.

    Example:
        ```python
        outcome = CompileFailure(stderr="error: expected ';'", stdout="", exit_code=1)
        ```
    """

    stderr: str
    stdout: str
    exit_code: int | None
    ok = False
    panel = Panel.OUTPUT


@dataclass(frozen=True, slots=True)
class RuntimeFailure:
    """The program wrote to stderr or exited non-zero.

    Example:
        ```python
        outcome = RuntimeFailure(stderr="Traceback ...", stdout="", exit_code=1)
        ```
    """

    stderr: str
    stdout: str
    exit_code: int | None
    hint: str | None = None
    ok = False
    panel = Panel.OUTPUT


@dataclass(frozen=True, slots=True)
class Success:
    """The program exited cleanly and printed output.

    Example:
        ```python
        outcome = Success(stdout="7\\n")
        ```
    """

    stdout: str
    ok = True
    panel = Panel.OUTPUT


@dataclass(frozen=True, slots=True)
class EmptySuccess:
    """The program exited cleanly without printing anything.

    Example:
        ```python
        outcome = EmptySuccess()
        ```
    """

    ok = True
    panel = Panel.OUTPUT


@dataclass(frozen=True, slots=True)
class BackendFailure:
    """The execution gateway rejected the job before running it.

    Example:
        ```python
        outcome = BackendFailure(message="Unsupported runtime")
        ```
    """

    message: str
    ok = False
    panel = Panel.OUTPUT


@dataclass(frozen=True, slots=True)
class TransportError:
    """The request never produced a usable HTTP response body.

    Example:
        ```python
        outcome = TransportError(message="Connection refused")
        ```
    """

    message: str
    ok = False
    panel = Panel.OUTPUT


@dataclass(frozen=True, slots=True)
class MalformedResponse:
    """The response body did not have the expected shape.

    Example:
        ```python
        outcome = MalformedResponse(reason="Could not find execution results")
        ```
    """

    reason: str
    ok = False
    panel = Panel.OUTPUT


ExecutionOutcome = (
    InputRequired
    | CompileFailure
    | RuntimeFailure
    | Success
    | EmptySuccess
    | BackendFailure
    | TransportError
    | MalformedResponse
)
