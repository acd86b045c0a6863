import pytest

from code_workbench.classifier import classify, runtime_hint, unwrap_payload
from code_workbench.outcomes import (
    BackendFailure,
    CompileFailure,
    EmptySuccess,
    MalformedResponse,
    Panel,
    RuntimeFailure,
    Success,
)


def _envelope(payload: dict) -> dict:
    return {"success": True, "data": payload}


def test_success_with_stdout() -> None:
    result = classify(_envelope({"run": {"stdout": "7\n", "stderr": "", "code": 0}}))
    assert result.outcome == Success(stdout="7\n")
    assert "7" in result.transcript
    assert "Program completed successfully" in result.transcript
    assert result.outcome.panel is Panel.OUTPUT


def test_compile_failure_dominates_run_stage() -> None:
    body = _envelope(
        {
            "compile": {"stdout": "", "stderr": "Main.java:3: error: ';' expected", "code": 1},
            "run": {"stdout": "should not be shown", "stderr": "", "code": 0},
        }
    )
    result = classify(body)
    assert isinstance(result.outcome, CompileFailure)
    assert result.outcome.exit_code == 1
    assert "Compilation Error" in result.transcript
    assert "Compilation failed with exit code: 1" in result.transcript
    assert "Verify class name matches filename" in result.transcript
    assert "should not be shown" not in result.transcript


def test_compile_warnings_stay_ahead_of_run_output() -> None:
    body = _envelope(
        {
            "compile": {"stdout": "", "stderr": "warning: unused variable", "code": 0},
            "run": {"stdout": "ok\n", "stderr": "", "code": 0},
        }
    )
    result = classify(body)
    assert isinstance(result.outcome, Success)
    assert result.transcript.index("warning: unused variable") < result.transcript.index("ok")


def test_runtime_failure_with_input_shortage_hint() -> None:
    body = _envelope(
        {"run": {"stderr": "Exception in thread \"main\" java.util.NoSuchElementException"}}
    )
    result = classify(body)
    assert isinstance(result.outcome, RuntimeFailure)
    assert result.outcome.exit_code is None
    assert "expected more input than provided" in result.transcript
    assert result.outcome.hint is not None


def test_runtime_failure_with_type_mismatch_hint() -> None:
    body = _envelope(
        {"run": {"stdout": "partial", "stderr": "java.util.InputMismatchException", "code": 1}}
    )
    result = classify(body)
    assert isinstance(result.outcome, RuntimeFailure)
    assert "Input type mismatch" in result.transcript
    assert result.transcript.endswith("partial")


def test_non_zero_exit_without_stderr() -> None:
    result = classify(_envelope({"run": {"stdout": "", "stderr": "", "code": 137, "signal": "SIGKILL"}}))
    assert result.outcome == RuntimeFailure(stderr="", stdout="", exit_code=137)
    assert "Program exited with code: 137 (signal SIGKILL)" in result.transcript


def test_empty_success() -> None:
    result = classify(_envelope({"run": {"stdout": "", "stderr": "", "code": 0}}))
    assert result.outcome == EmptySuccess()
    assert result.transcript == "✅ Program completed with no output"


def test_backend_failure_short_circuits_stages() -> None:
    body = _envelope(
        {
            "successful": False,
            "errorMessage": "runtime unavailable",
            "compile": {"stderr": "boom", "code": 1},
        }
    )
    result = classify(body)
    assert result.outcome == BackendFailure(message="runtime unavailable")
    assert result.transcript == "❌ Backend Error: runtime unavailable"


def test_double_wrapped_payload_is_unwrapped_once() -> None:
    body = _envelope({"data": {"run": {"stdout": "42\n", "stderr": "", "code": 0}}})
    result = classify(body)
    assert result.outcome == Success(stdout="42\n")


def test_unwrap_keeps_outer_level_when_run_present() -> None:
    outer = {"run": {"stdout": "outer", "code": 0}, "data": {"run": {"stdout": "inner", "code": 0}}}
    assert unwrap_payload(outer) is outer


@pytest.mark.parametrize(
    "body",
    [
        None,
        "not a dict",
        {"success": False, "data": {"run": {"stdout": "1", "code": 0}}},
        {"success": True},
        {"success": True, "data": {}},
        {"success": True, "data": ["run"]},
    ],
)
def test_invalid_envelopes_are_malformed(body: object) -> None:
    result = classify(body)
    assert result.outcome == MalformedResponse(reason="Invalid response from server")


def test_missing_run_stage_is_malformed() -> None:
    result = classify(_envelope({"language": "python", "version": "3.10.0"}))
    assert result.outcome == MalformedResponse(reason="Could not find execution results")
    assert "Could not find execution results" in result.transcript


def test_runtime_hint_lookup() -> None:
    assert runtime_hint("ZeroDivisionError: division by zero") is None
    assert runtime_hint("java.util.NoSuchElementException") is not None
