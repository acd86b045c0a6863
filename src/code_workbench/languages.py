from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Sequence


@dataclass(frozen=True, slots=True)
class LanguageDescriptor:
    """Execution and display metadata for one supported language.

    Example:
        ```python
        lang = LanguageDescriptor("Python", "python", "3.10.0", "python", "py", "print(1)")
        ```
    """

    display_name: str
    executor_id: str
    executor_version: str
    syntax_id: str
    file_extension: str
    default_code_template: str


_PYTHON_TEMPLATE = """\
# Python Code Example
def main():
    print("Welcome to Python!")

    # Simple calculation
    result = 5 + 3
    print(f"5 + 3 = {result}")


if __name__ == "__main__":
    main()
"""

_JAVA_TEMPLATE = """\
// Java Code Example
public class Main {
    public static void main(String[] args) {
        System.out.println("Welcome to Java!");

        // Simple calculation
        int result = 5 + 3;
        System.out.println("5 + 3 = " + result);
    }
}
"""

_CPP_TEMPLATE = """\
// C++ Code Example
#include <iostream>
using namespace std;

int main() {
    cout << "Welcome to C++!" << endl;

    // Simple calculation
    int result = 5 + 3;
    cout << "5 + 3 = " << result << endl;

    return 0;
}
"""

_JAVASCRIPT_TEMPLATE = """\
// JavaScript Code Example (Node.js)
console.log("Welcome to JavaScript!");

// Simple calculation
const result = 5 + 3;
console.log(`5 + 3 = ${result}`);
"""

_C_TEMPLATE = """\
// C Code Example
#include <stdio.h>

int main() {
    printf("Welcome to C!\\n");

    // Simple calculation
    int result = 5 + 3;
    printf("5 + 3 = %d\\n", result);

    return 0;
}
"""

_GO_TEMPLATE = """\
// Go Code Example
package main

import "fmt"

func main() {
    fmt.Println("Welcome to Go!")

    // Simple calculation
    result := 5 + 3
    fmt.Printf("5 + 3 = %d\\n", result)
}
"""

_RUST_TEMPLATE = """\
// Rust Code Example
fn main() {
    println!("Welcome to Rust!");

    // Simple calculation
    let result = 5 + 3;
    println!("5 + 3 = {}", result);
}
"""

_TYPESCRIPT_TEMPLATE = """\
// TypeScript Code Example
console.log("Welcome to TypeScript!");

// Simple calculation with types
const num1: number = 5;
const num2: number = 3;
const result: number = num1 + num2;
console.log(`${num1} + ${num2} = ${result}`);
"""

SUPPORTED_LANGUAGES: tuple[LanguageDescriptor, ...] = (
    LanguageDescriptor("Python", "python", "3.10.0", "python", "py", _PYTHON_TEMPLATE),
    LanguageDescriptor("Java", "java", "15.0.2", "java", "java", _JAVA_TEMPLATE),
    LanguageDescriptor("C++", "cpp", "10.2.0", "cpp", "cpp", _CPP_TEMPLATE),
    LanguageDescriptor(
        "JavaScript", "javascript", "18.15.0", "javascript", "js", _JAVASCRIPT_TEMPLATE
    ),
    LanguageDescriptor("C", "c", "10.2.0", "c", "c", _C_TEMPLATE),
    LanguageDescriptor("Go", "go", "1.16.2", "go", "go", _GO_TEMPLATE),
    LanguageDescriptor("Rust", "rust", "1.68.2", "rust", "rs", _RUST_TEMPLATE),
    LanguageDescriptor(
        "TypeScript", "typescript", "5.0.3", "typescript", "ts", _TYPESCRIPT_TEMPLATE
    ),
)

# Targets that are not registered (C#) resolve to nothing and fall through.
LANGUAGE_ALIASES: dict[str, str] = {
    "js": "JavaScript",
    "ts": "TypeScript",
    "py": "Python",
    "cpp": "C++",
    "c++": "C++",
    "csharp": "C#",
    "cs": "C#",
    "go": "Go",
    "golang": "Go",
    "rs": "Rust",
    "java": "Java",
}

Matcher = Callable[[str, Sequence[LanguageDescriptor]], LanguageDescriptor | None]


def match_exact(query: str, languages: Sequence[LanguageDescriptor]) -> LanguageDescriptor | None:
    """Match a normalized query against display names, ignoring case.

    Example:
        ```python
        lang = match_exact("python", SUPPORTED_LANGUAGES)
        ```
    """
    for lang in languages:
        if lang.display_name.lower() == query:
            return lang
    return None


def match_substring(
    query: str, languages: Sequence[LanguageDescriptor]
) -> LanguageDescriptor | None:
    """Match when the query contains a display name or vice versa.

    The longest matching display name wins, and one-letter names (``C``)
    never match by substring so ``cpp`` is left for the alias table.

    Example:
        ```python
        lang = match_substring("golang", SUPPORTED_LANGUAGES)
        ```
    """
    best: LanguageDescriptor | None = None
    for lang in languages:
        name = lang.display_name.lower()
        if len(name) < 2 or len(query) < 2:
            continue
        if name in query or query in name:
            if best is None or len(name) > len(best.display_name):
                best = lang
    return best


def match_alias(query: str, languages: Sequence[LanguageDescriptor]) -> LanguageDescriptor | None:
    """Resolve a query through the fixed alias table.

    Example:
        ```python
        lang = match_alias("js", SUPPORTED_LANGUAGES)
        ```
    """
    target = LANGUAGE_ALIASES.get(query)
    if target is None:
        return None
    for lang in languages:
        if lang.display_name == target:
            return lang
    return None


FUZZY_MATCHERS: tuple[Matcher, ...] = (match_exact, match_substring, match_alias)


class LanguageRegistry:
    """Ordered catalog of supported languages with lookup strategies.

    Example:
        ```python
        registry = LanguageRegistry(SUPPORTED_LANGUAGES, default_name="Java")
        ```
    """

    def __init__(
        self,
        languages: Sequence[LanguageDescriptor] = SUPPORTED_LANGUAGES,
        *,
        default_name: str | None = None,
    ) -> None:
        """Validate the catalog and resolve the configured default.

        Example:
            ```python
            registry = LanguageRegistry()
            ```
        """
        if not languages:
            raise ValueError("LanguageRegistry requires at least one language")
        names = [lang.display_name for lang in languages]
        if len(set(names)) != len(names):
            raise ValueError("Language display names must be unique")
        self._languages = tuple(languages)
        self._default = self._languages[0]
        if default_name is not None:
            configured = self.find_by_exact_name(default_name)
            if configured is None:
                raise ValueError(f"Unknown default language: {default_name}")
            self._default = configured

    def __iter__(self) -> Iterator[LanguageDescriptor]:
        """Iterate descriptors in registry order.

        Example:
            ```python
            names = [lang.display_name for lang in registry]
            ```
        """
        return iter(self._languages)

    def __len__(self) -> int:
        """Return the number of registered languages.

        Example:
            ```python
            count = len(registry)
            ```
        """
        return len(self._languages)

    def names(self) -> list[str]:
        """Return display names in registry order.

        Example:
            ```python
            registry.names()[0]  # "Python"
            ```
        """
        return [lang.display_name for lang in self._languages]

    def default_language(self) -> LanguageDescriptor:
        """Return the configured default language.

        Example:
            ```python
            lang = registry.default_language()
            ```
        """
        return self._default

    def find_by_exact_name(self, name: str) -> LanguageDescriptor | None:
        """Return the descriptor whose display name equals `name` exactly.

        Example:
            ```python
            lang = registry.find_by_exact_name("C++")
            ```
        """
        for lang in self._languages:
            if lang.display_name == name:
                return lang
        return None

    def find_by_fuzzy_name(self, name: str | None) -> LanguageDescriptor:
        """Resolve a loosely spelled language name, never failing.

        Example:
            ```python
            lang = registry.find_by_fuzzy_name("Golang")
            ```
        """
        query = (name or "").strip().lower()
        if query:
            for matcher in FUZZY_MATCHERS:
                found = matcher(query, self._languages)
                if found is not None:
                    return found
        return self._default

    def find_by_extension(self, extension: str) -> LanguageDescriptor | None:
        """Return the descriptor for a file extension such as `.rs` or `rs`.

        Example:
            ```python
            lang = registry.find_by_extension(".py")
            ```
        """
        cleaned = extension.strip().lower().lstrip(".")
        for lang in self._languages:
            if lang.file_extension == cleaned:
                return lang
        return None


DEFAULT_REGISTRY = LanguageRegistry()


def find_by_exact_name(name: str) -> LanguageDescriptor | None:
    """Look up a language by exact display name in the default registry.

    Example:
        ```python
        lang = find_by_exact_name("Python")
        ```
    """
    return DEFAULT_REGISTRY.find_by_exact_name(name)


def find_by_fuzzy_name(name: str | None) -> LanguageDescriptor:
    """Resolve a loosely spelled language name in the default registry.

    Example:
        ```python
        lang = find_by_fuzzy_name("js")
        ```
    """
    return DEFAULT_REGISTRY.find_by_fuzzy_name(name)


def default_language() -> LanguageDescriptor:
    """Return the first registered language.

    Example:
        ```python
        lang = default_language()
        ```
    """
    return DEFAULT_REGISTRY.default_language()
