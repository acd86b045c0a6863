from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .languages import LanguageDescriptor


@dataclass(frozen=True, slots=True)
class CodeSnippet:
    """Starter code a question ships for one language.

    Example:
        ```python
        snippet = CodeSnippet(language="python", code="def solve(): ...")
        ```
    """

    language: str
    code: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class QuestionDetail:
    """The slice of a question the workbench needs to seed its editor.

    Example:
        ```python
        question = QuestionDetail(id="42", code_snippets=(CodeSnippet("Python", "print(1)"),))
        ```
    """

    id: str
    code_snippets: tuple[CodeSnippet, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "QuestionDetail":
        """Build from the platform's question-detail JSON.

        Example:
            ```python
            question = QuestionDetail.from_api({"id": "42", "codeSnippets": [{"language": "java", "code": "..."}]})
            ```
        """
        if "id" not in payload:
            raise ValueError("Question payload is missing 'id'")
        snippets = []
        for raw in payload.get("codeSnippets") or []:
            if not isinstance(raw, Mapping):
                raise ValueError("'codeSnippets' must contain objects")
            snippets.append(
                CodeSnippet(
                    language=str(raw.get("language", "")),
                    code=str(raw.get("code", "")),
                    description=raw.get("description"),
                )
            )
        return cls(id=str(payload["id"]), code_snippets=tuple(snippets))


def initial_code_for(subject: QuestionDetail | None, language: LanguageDescriptor) -> str:
    """Return the question's snippet for `language`, else the default template.

    Example:
        ```python
        code = initial_code_for(question, default_language())
        ```
    """
    if subject is not None:
        wanted = language.display_name.lower()
        for snippet in subject.code_snippets:
            if snippet.language.lower() == wanted and snippet.code:
                return snippet.code
    return language.default_code_template
