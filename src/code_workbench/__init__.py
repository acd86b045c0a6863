from .classifier import ClassifiedResult, classify
from .config import WorkbenchConfig
from .detection import requires_stdin
from .execution import ExecutionRequest, HttpExecutionClient
from .languages import (
    SUPPORTED_LANGUAGES,
    LanguageDescriptor,
    LanguageRegistry,
    default_language,
    find_by_exact_name,
    find_by_fuzzy_name,
)
from .session import JsonFileBackend, MemoryBackend, SessionKind, SessionStore
from .subjects import CodeSnippet, QuestionDetail
from .workbench import Workbench, WorkbenchBusyError, WorkbenchState

__all__ = [
    "SUPPORTED_LANGUAGES",
    "ClassifiedResult",
    "CodeSnippet",
    "ExecutionRequest",
    "HttpExecutionClient",
    "JsonFileBackend",
    "LanguageDescriptor",
    "LanguageRegistry",
    "MemoryBackend",
    "QuestionDetail",
    "SessionKind",
    "SessionStore",
    "Workbench",
    "WorkbenchBusyError",
    "WorkbenchConfig",
    "WorkbenchState",
    "classify",
    "default_language",
    "find_by_exact_name",
    "find_by_fuzzy_name",
    "requires_stdin",
]
