from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .outcomes import (
    BackendFailure,
    CompileFailure,
    EmptySuccess,
    ExecutionOutcome,
    InputRequired,
    MalformedResponse,
    RuntimeFailure,
    Success,
    TransportError,
)

logger = logging.getLogger(__name__)

INVALID_RESPONSE = "Invalid response from server"
MISSING_RESULTS = "Could not find execution results"

COMPILE_HINTS = (
    "💡 Common fixes:\n"
    "- Check syntax errors\n"
    "- Verify class name matches filename\n"
    "- Check for missing semicolons or brackets\n"
)
SUCCESS_MARKER = "✅ Program completed successfully!"
EMPTY_OUTPUT_MARKER = "✅ Program completed with no output"

# First matching substring wins.
RUNTIME_HINTS: tuple[tuple[str, str], ...] = (
    (
        "NoSuchElementException",
        "This error usually means your program expected more input than provided.",
    ),
    (
        "InputMismatchException",
        "Input type mismatch. Check if you're providing the correct data type.",
    ),
)


@dataclass(frozen=True, slots=True)
class ClassifiedResult:
    """An outcome together with the transcript shown in the output panel.

    Example:
        ```python
        result = ClassifiedResult(Success(stdout="7\\n"), "7\\n\\n✅ Program completed successfully!")
        ```
    """

    outcome: ExecutionOutcome
    transcript: str


def _text(stage: Mapping[str, Any], field: str) -> str:
    """Read a stage field as text; missing or null becomes empty.

    Example:
        ```python
        _text({"stdout": None}, "stdout")  # ""
        ```
    """
    value = stage.get(field)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _exit_code(stage: Mapping[str, Any]) -> int | None:
    """Return the stage exit code, or None when absent or not an integer.

    Example:
        ```python
        _exit_code({"code": 0})  # 0
        ```
    """
    code = stage.get("code")
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    return code


def runtime_hint(stderr: str) -> str | None:
    """Return a targeted remediation hint for well-known stderr text.

    Example:
        ```python
        runtime_hint("java.util.NoSuchElementException")
        ```
    """
    for needle, hint in RUNTIME_HINTS:
        if needle in stderr:
            return hint
    return None


def unwrap_payload(data: Mapping[str, Any]) -> Any:
    """Step one level into a double-wrapped gateway payload.

    The gateway sometimes nests the result as `data.data`; the inner level
    is used only when the outer one carries no `run` stage.

    Example:
        ```python
        inner = unwrap_payload({"data": {"run": {"stdout": "1", "code": 0}}})
        ```
    """
    if data.get("data") and not data.get("run"):
        return data["data"]
    return data


def classify(body: Any) -> ClassifiedResult:
    """Turn a raw sandbox response body into one outcome and a transcript.

    Example:
        ```python
        result = classify({"success": True, "data": {"run": {"stdout": "7\\n", "code": 0}}})
        ```
    """
    if not isinstance(body, Mapping) or not body.get("success") or not body.get("data"):
        return _malformed(INVALID_RESPONSE)
    data = body["data"]
    if not isinstance(data, Mapping):
        return _malformed(INVALID_RESPONSE)

    result = unwrap_payload(data)
    if not isinstance(result, Mapping):
        return _malformed(INVALID_RESPONSE)

    if result.get("successful") is False and result.get("errorMessage"):
        message = str(result["errorMessage"])
        return ClassifiedResult(BackendFailure(message), f"❌ Backend Error: {message}")

    transcript = ""
    compile_stage = result.get("compile")
    if isinstance(compile_stage, Mapping):
        compile_stderr = _text(compile_stage, "stderr")
        compile_stdout = _text(compile_stage, "stdout")
        if compile_stderr:
            transcript += f"❌ Compilation Error:\n{compile_stderr}\n\n"
        if compile_stdout:
            transcript += f"📋 Compilation Output:\n{compile_stdout}\n\n"
        compile_code = _exit_code(compile_stage)
        if compile_code != 0:
            transcript += f"❌ Compilation failed with exit code: {compile_code}\n\n"
            transcript += COMPILE_HINTS
            outcome = CompileFailure(compile_stderr, compile_stdout, compile_code)
            return ClassifiedResult(outcome, transcript)

    run_stage = result.get("run")
    if not isinstance(run_stage, Mapping):
        logger.warning("Execution response has no run stage: keys=%s", sorted(result))
        return ClassifiedResult(MalformedResponse(MISSING_RESULTS), transcript + f"❌ {MISSING_RESULTS}")

    stdout = _text(run_stage, "stdout")
    stderr = _text(run_stage, "stderr")
    code = _exit_code(run_stage)

    if stderr:
        hint = runtime_hint(stderr)
        transcript += f"🚨 Runtime Error:\n{stderr}\n"
        if hint:
            transcript += f"\n💡 Hint: {hint}\n"
        transcript += stdout
        return ClassifiedResult(RuntimeFailure(stderr, stdout, code, hint), transcript)

    if stdout and code == 0:
        return ClassifiedResult(Success(stdout), transcript + f"{stdout}\n{SUCCESS_MARKER}")

    if code != 0:
        signal = run_stage.get("signal")
        reason = f"⚠️ Program exited with code: {code}"
        if signal:
            reason += f" (signal {signal})"
        return ClassifiedResult(RuntimeFailure("", stdout, code), transcript + f"{stdout}\n{reason}")

    return ClassifiedResult(EmptySuccess(), transcript or EMPTY_OUTPUT_MARKER)


def _malformed(reason: str) -> ClassifiedResult:
    """Build the result for an unexpected payload shape.

    Example:
        ```python
        result = _malformed("Invalid response from server")
        ```
    """
    logger.warning("Malformed execution response: %s", reason)
    return ClassifiedResult(MalformedResponse(reason), f"❌ {reason}")


def describe_input_required(outcome: InputRequired) -> str:
    """Render the corrective message for a blocked submission.

    Example:
        ```python
        text = describe_input_required(InputRequired("Java"))
        ```
    """
    return (
        "❌ Input Required!\n\n"
        f"Your {outcome.language_name} code appears to require input. "
        "Please provide input in the Input section.\n\n"
        "Example input format:\n"
        "- Each input on a new line\n"
        "- For numbers: 123\n"
        "- For text: Hello World"
    )


def describe_transport_error(outcome: TransportError) -> str:
    """Render a transport failure verbatim for the output panel.

    Example:
        ```python
        text = describe_transport_error(TransportError("Connection refused"))
        ```
    """
    return f"❌ Execution Error: {outcome.message}"
