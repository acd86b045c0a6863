import threading
from pathlib import Path

import pytest

from code_workbench.execution import ExecutionRequest, ExecutionResponse
from code_workbench.languages import find_by_exact_name, find_by_fuzzy_name
from code_workbench.outcomes import (
    CompileFailure,
    InputRequired,
    MalformedResponse,
    Panel,
    Success,
    TransportError,
)
from code_workbench.session import JsonFileBackend, MemoryBackend, SessionStore
from code_workbench.subjects import CodeSnippet, QuestionDetail
from code_workbench.workbench import Workbench, WorkbenchBusyError, WorkbenchState


def _ok(stdout: str) -> ExecutionResponse:
    return ExecutionResponse(body={"success": True, "data": {"run": {"stdout": stdout, "stderr": "", "code": 0}}})


class _FakeClient:
    def __init__(self, response: object | None = None) -> None:
        self.response = response if response is not None else _ok("hello\n")
        self.requests: list[ExecutionRequest] = []

    def execute(self, request: ExecutionRequest) -> object:
        self.requests.append(request)
        return self.response


class _RaisingClient:
    def execute(self, request: ExecutionRequest) -> object:
        raise ConnectionResetError("peer went away")


def _bench(client: object | None = None, **kwargs: object) -> Workbench:
    store = kwargs.pop("store", None) or SessionStore(MemoryBackend())
    return Workbench("42", client=client or _FakeClient(), store=store, **kwargs)  # type: ignore[arg-type]


def test_starts_with_default_language_and_template() -> None:
    bench = _bench()
    python = find_by_exact_name("Python")
    assert bench.language == python
    assert bench.code == python.default_code_template  # type: ignore[union-attr]
    assert bench.input == ""
    assert bench.state is WorkbenchState.IDLE
    assert bench.last_outcome is None


def test_empty_subject_id_is_rejected() -> None:
    with pytest.raises(ValueError, match="subject_id"):
        Workbench("  ", client=_FakeClient(), store=SessionStore(MemoryBackend()))  # type: ignore[arg-type]


def test_run_submits_registry_pair_and_trimmed_input() -> None:
    client = _FakeClient()
    bench = _bench(client)
    bench.set_code("x = input()\nprint(x)")
    bench.set_input("  5\n")

    outcome = bench.run()

    assert outcome == Success(stdout="hello\n")
    assert bench.state is WorkbenchState.RESOLVED
    assert bench.open_panels == frozenset({Panel.OUTPUT})
    assert "Program completed successfully" in bench.transcript
    assert client.requests == [ExecutionRequest("python", "3.10.0", "x = input()\nprint(x)", "5")]


def test_missing_input_short_circuits_without_submission() -> None:
    client = _FakeClient()
    bench = _bench(client, language=find_by_exact_name("Java"))
    bench.set_code("Scanner sc = new Scanner(System.in); int n = sc.nextInt();")
    bench.set_input("   \n")

    outcome = bench.run()

    assert outcome == InputRequired(language_name="Java")
    assert client.requests == []
    assert bench.open_panels == frozenset({Panel.INPUT})
    assert "Input Required" in bench.transcript


def test_transport_error_is_resolved_not_raised() -> None:
    bench = _bench(_FakeClient(TransportError(message="Connection refused")))
    outcome = bench.run()
    assert outcome == TransportError(message="Connection refused")
    assert "Execution Error: Connection refused" in bench.transcript
    assert bench.state is WorkbenchState.RESOLVED


def test_client_exception_becomes_transport_error() -> None:
    bench = _bench(_RaisingClient())
    outcome = bench.run()
    assert outcome == TransportError(message="peer went away")


def test_malformed_body_is_resolved() -> None:
    bench = _bench(_FakeClient(ExecutionResponse(body={"success": False})))
    assert isinstance(bench.run(), MalformedResponse)


def test_compile_failure_outcome_is_not_ok() -> None:
    body = {"success": True, "data": {"compile": {"stderr": "error", "code": 1}, "run": {}}}
    bench = _bench(_FakeClient(ExecutionResponse(body=body)), language=find_by_exact_name("C++"))
    outcome = bench.run()
    assert isinstance(outcome, CompileFailure)
    assert outcome.ok is False


def test_edit_after_run_returns_to_idle_and_keeps_transcript() -> None:
    bench = _bench()
    bench.run()
    transcript = bench.transcript

    bench.set_code("print('changed')")

    assert bench.state is WorkbenchState.IDLE
    assert bench.transcript == transcript


def test_second_run_while_submitting_is_rejected() -> None:
    entered = threading.Event()
    release = threading.Event()
    errors: list[Exception] = []

    class _SlowClient:
        def execute(self, request: ExecutionRequest) -> ExecutionResponse:
            entered.set()
            release.wait(timeout=5)
            return _ok("done\n")

    bench = _bench(_SlowClient())
    worker = threading.Thread(target=bench.run)
    worker.start()
    assert entered.wait(timeout=5)
    assert bench.state is WorkbenchState.SUBMITTING

    try:
        bench.run()
    except WorkbenchBusyError as exc:
        errors.append(exc)
    with pytest.raises(WorkbenchBusyError):
        bench.reset()
    with pytest.raises(WorkbenchBusyError):
        bench.select_language(find_by_fuzzy_name("go"))

    release.set()
    worker.join(timeout=5)

    assert len(errors) == 1
    assert bench.last_outcome == Success(stdout="done\n")


def test_language_switch_keeps_buffers_per_language() -> None:
    store = SessionStore(MemoryBackend())
    bench = _bench(store=store)
    bench.set_code("print('python edit')")
    bench.set_input("1")

    bench.select_language(find_by_fuzzy_name("cpp"))
    cpp = find_by_exact_name("C++")
    assert bench.language == cpp
    assert bench.code == cpp.default_code_template  # type: ignore[union-attr]
    assert bench.input == ""
    assert bench.last_outcome is None

    bench.set_code("int main() { return 1; }")
    bench.select_language(find_by_fuzzy_name("python"))

    assert bench.code == "print('python edit')"
    assert bench.input == "1"
    assert store.load("42", "C++", "code") == "int main() { return 1; }"


def test_reopening_restores_saved_session() -> None:
    store = SessionStore(MemoryBackend())
    _bench(store=store).set_code("print('draft')")

    reopened = _bench(store=store)
    assert reopened.code == "print('draft')"


def test_question_snippet_seeds_editor() -> None:
    question = QuestionDetail(id="42", code_snippets=(CodeSnippet("python", "def solve():\n    pass\n"),))
    bench = _bench(subject=question)
    assert bench.code == "def solve():\n    pass\n"

    bench.select_language(find_by_fuzzy_name("java"))
    assert bench.code == find_by_exact_name("Java").default_code_template  # type: ignore[union-attr]


def test_mismatched_subject_is_rejected() -> None:
    with pytest.raises(ValueError, match="subject.id"):
        _bench(subject=QuestionDetail(id="7"))


def test_reset_restores_template_and_clears_store() -> None:
    store = SessionStore(MemoryBackend())
    bench = _bench(store=store)
    bench.set_code("print('edited')")
    bench.set_input("3")
    bench.run()

    bench.reset()

    assert bench.code == bench.language.default_code_template
    assert bench.input == ""
    assert bench.last_outcome is None
    assert bench.transcript == ""
    assert bench.open_panels == frozenset()
    assert store.load("42", "Python", "code") is None
    assert store.load("42", "Python", "input") is None


def test_language_switch_is_refused_during_stdin_check(monkeypatch: pytest.MonkeyPatch) -> None:
    bench = _bench()
    refused: list[Exception] = []

    def _checking_requires_stdin(source: str) -> bool:
        try:
            bench.select_language(find_by_fuzzy_name("rust"))
        except WorkbenchBusyError as exc:
            refused.append(exc)
        return False

    monkeypatch.setattr("code_workbench.workbench.requires_stdin", _checking_requires_stdin)
    bench.run()

    assert len(refused) == 1
    assert bench.language.display_name == "Python"
    bench.select_language(find_by_fuzzy_name("rust"))
    assert bench.language.display_name == "Rust"


def test_saved_sessions_survive_failed_write(tmp_path: Path) -> None:
    path = tmp_path / "sessions.json"
    SessionStore(JsonFileBackend(path)).save("42", "Java", "code", "class Main { /* saved java */ }")

    store = SessionStore(JsonFileBackend(path, max_bytes=120))
    bench = _bench(store=store)
    bench.set_code("print('a much longer program')" * 10)
    assert store.persistent is False

    bench.select_language(find_by_fuzzy_name("java"))
    assert bench.code == "class Main { /* saved java */ }"

    bench.select_language(find_by_fuzzy_name("python"))
    assert bench.code == "print('a much longer program')" * 10
