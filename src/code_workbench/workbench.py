from __future__ import annotations

import logging
import threading
from enum import Enum

from .classifier import (
    ClassifiedResult,
    classify,
    describe_input_required,
    describe_transport_error,
)
from .detection import requires_stdin
from .execution.client import ExecutionClient
from .execution.types import ExecutionRequest
from .languages import DEFAULT_REGISTRY, LanguageDescriptor, LanguageRegistry
from .outcomes import (
    ExecutionOutcome,
    InputRequired,
    MalformedResponse,
    Panel,
    TransportError,
)
from .session.store import SessionKind, SessionStore
from .subjects import QuestionDetail, initial_code_for

logger = logging.getLogger(__name__)


class WorkbenchState(str, Enum):
    """Lifecycle of one workbench submission.

    Example:
        ```python
        state = WorkbenchState.IDLE
        ```
    """

    IDLE = "idle"
    SUBMITTING = "submitting"
    RESOLVED = "resolved"


class WorkbenchBusyError(RuntimeError):
    """Raised when `run()` is called while a submission is in flight.

    Example:
        ```python
        raise WorkbenchBusyError("A submission is already running")
        ```
    """


class Workbench:
    """Editing and execution controller for one subject.

    Owns the selected language, code, stdin and last outcome; the session
    store is only the durable copy of code and stdin.

    Example:
        ```python
        bench = Workbench("42", client=HttpExecutionClient(url), store=SessionStore())
        ```
    """

    def __init__(
        self,
        subject_id: str,
        *,
        client: ExecutionClient,
        store: SessionStore,
        registry: LanguageRegistry = DEFAULT_REGISTRY,
        subject: QuestionDetail | None = None,
        language: LanguageDescriptor | None = None,
    ) -> None:
        """Load the initial language's buffers from the store.

        Example:
            ```python
            bench = Workbench("42", client=client, store=store, language=find_by_exact_name("Java"))
            ```
        """
        if not str(subject_id).strip():
            raise ValueError("Workbench requires a non-empty 'subject_id'")
        if subject is not None and str(subject.id) != str(subject_id):
            raise ValueError("subject.id does not match subject_id")
        self._subject_id = str(subject_id)
        self._client = client
        self._store = store
        self._registry = registry
        self._subject = subject
        self._run_lock = threading.Lock()
        self._state = WorkbenchState.IDLE
        self._last_result: ClassifiedResult | None = None
        self._open_panels: set[Panel] = set()
        self._language = language or registry.default_language()
        self._code, self._input = self._load_buffers(self._language)

    @property
    def subject_id(self) -> str:
        """Return the subject this workbench edits.

        Example:
            ```python
            bench.subject_id
            ```
        """
        return self._subject_id

    @property
    def language(self) -> LanguageDescriptor:
        """Return the selected language.

        Example:
            ```python
            bench.language.display_name
            ```
        """
        return self._language

    @property
    def code(self) -> str:
        """Return the current editor contents.

        Example:
            ```python
            source = bench.code
            ```
        """
        return self._code

    @property
    def input(self) -> str:
        """Return the current stdin text.

        Example:
            ```python
            stdin = bench.input
            ```
        """
        return self._input

    @property
    def state(self) -> WorkbenchState:
        """Return the submission lifecycle state.

        Example:
            ```python
            bench.state is WorkbenchState.RESOLVED
            ```
        """
        return self._state

    @property
    def last_outcome(self) -> ExecutionOutcome | None:
        """Return the outcome of the latest run, if still displayed.

        Example:
            ```python
            outcome = bench.last_outcome
            ```
        """
        return self._last_result.outcome if self._last_result else None

    @property
    def transcript(self) -> str:
        """Return the output panel text for the latest run.

        Example:
            ```python
            print(bench.transcript)
            ```
        """
        return self._last_result.transcript if self._last_result else ""

    @property
    def open_panels(self) -> frozenset[Panel]:
        """Return which of the input/output panels are expanded.

        Example:
            ```python
            Panel.OUTPUT in bench.open_panels
            ```
        """
        return frozenset(self._open_panels)

    def show_panel(self, panel: Panel) -> None:
        """Expand one panel and collapse the other.

        Example:
            ```python
            bench.show_panel(Panel.INPUT)
            ```
        """
        self._open_panels = {panel}

    def hide_panels(self) -> None:
        """Collapse both panels.

        Example:
            ```python
            bench.hide_panels()
            ```
        """
        self._open_panels = set()

    def set_code(self, code: str) -> None:
        """Replace the editor contents and persist them.

        Example:
            ```python
            bench.set_code("print(input())")
            ```
        """
        self._code = code
        self._store.save(self._subject_id, self._language.display_name, SessionKind.CODE, code)
        self._settle()

    def set_input(self, text: str) -> None:
        """Replace the stdin text and persist it.

        Example:
            ```python
            bench.set_input("5\\n7\\n")
            ```
        """
        self._input = text
        self._store.save(self._subject_id, self._language.display_name, SessionKind.INPUT, text)
        self._settle()

    def select_language(self, language: LanguageDescriptor) -> None:
        """Switch languages, saving the outgoing buffers first.

        Example:
            ```python
            bench.select_language(find_by_fuzzy_name("cpp"))
            ```
        """
        self._ensure_not_submitting("select a language")
        self._persist_current()
        self._language = language
        self._code, self._input = self._load_buffers(language)
        self._last_result = None
        self._state = WorkbenchState.IDLE
        logger.debug("Workbench %s switched to %s", self._subject_id, language.display_name)

    def run(self) -> ExecutionOutcome:
        """Submit the current code and resolve exactly one outcome.

        Example:
            ```python
            outcome = bench.run()
            ```
        """
        if not self._run_lock.acquire(blocking=False):
            raise WorkbenchBusyError("A submission is already running")
        try:
            self.show_panel(Panel.OUTPUT)
            if requires_stdin(self._code) and not self._input.strip():
                outcome = InputRequired(self._language.display_name)
                self._resolve(ClassifiedResult(outcome, describe_input_required(outcome)))
                self.show_panel(Panel.INPUT)
                return outcome

            self._state = WorkbenchState.SUBMITTING
            request = ExecutionRequest.for_language(self._language, self._code, self._input.strip())
            result = self._submit(request)
            self._resolve(result)
            return result.outcome
        finally:
            if self._state is WorkbenchState.SUBMITTING:
                self._state = WorkbenchState.IDLE
            self._run_lock.release()

    def reset(self) -> None:
        """Restore the template, clear stdin and forget the saved session.

        Example:
            ```python
            bench.reset()
            ```
        """
        self._ensure_not_submitting("reset")
        self._code = self._language.default_code_template
        self._input = ""
        self._last_result = None
        self._state = WorkbenchState.IDLE
        self.hide_panels()
        self._store.clear(self._subject_id, self._language.display_name)

    def _submit(self, request: ExecutionRequest) -> ClassifiedResult:
        """Call the execution client and classify whatever comes back.

        Example:
            ```python
            result = bench._submit(ExecutionRequest.for_language(lang, "print(1)"))
            ```
        """
        try:
            response = self._client.execute(request)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Execution client raised instead of returning an error")
            response = TransportError(message=str(exc) or type(exc).__name__)
        if isinstance(response, TransportError):
            return ClassifiedResult(response, describe_transport_error(response))
        try:
            return classify(response.body)
        except Exception:  # noqa: BLE001
            logger.exception("Classifier failed on execution response")
            outcome = MalformedResponse("Unreadable execution results")
            return ClassifiedResult(outcome, f"❌ {outcome.reason}")

    def _resolve(self, result: ClassifiedResult) -> None:
        """Record a classified result and enter the resolved state.

        Example:
            ```python
            bench._resolve(classify(body))
            ```
        """
        self._last_result = result
        self._state = WorkbenchState.RESOLVED
        logger.info(
            "Workbench %s resolved %s run as %s",
            self._subject_id,
            self._language.display_name,
            type(result.outcome).__name__,
        )

    def _settle(self) -> None:
        """Move back to idle after an edit; the transcript stays visible.

        Example:
            ```python
            bench._settle()
            ```
        """
        if self._state is WorkbenchState.RESOLVED:
            self._state = WorkbenchState.IDLE

    def _persist_current(self) -> None:
        """Save the current buffers under the current language.

        Example:
            ```python
            bench._persist_current()
            ```
        """
        name = self._language.display_name
        self._store.save(self._subject_id, name, SessionKind.CODE, self._code)
        self._store.save(self._subject_id, name, SessionKind.INPUT, self._input)

    def _load_buffers(self, language: LanguageDescriptor) -> tuple[str, str]:
        """Load code and stdin for `language`, seeding code when nothing is saved.

        Example:
            ```python
            code, stdin = bench._load_buffers(default_language())
            ```
        """
        name = language.display_name
        code = self._store.load(self._subject_id, name, SessionKind.CODE)
        stdin = self._store.load(self._subject_id, name, SessionKind.INPUT)
        return code or initial_code_for(self._subject, language), stdin or ""

    def _ensure_not_submitting(self, action: str) -> None:
        """Refuse state changes while a submission is in flight.

        Example:
            ```python
            bench._ensure_not_submitting("reset")
            ```
        """
        if self._run_lock.locked():
            raise WorkbenchBusyError(f"Cannot {action} while a submission is running")
