from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class InputProbe:
    """Named regular expression that signals a stdin read.

    Example:
        ```python
        probe = InputProbe("python-input", re.compile(r"input\\s*\\(", re.IGNORECASE))
        ```
    """

    name: str
    pattern: re.Pattern[str]

    def matches(self, source: str) -> bool:
        """Return whether the probe pattern occurs anywhere in `source`.

        Example:
            ```python
            probe.matches("x = input()")
            ```
        """
        return self.pattern.search(source) is not None


def _probe(name: str, expression: str) -> InputProbe:
    """Compile a case-insensitive probe.

    Example:
        ```python
        probe = _probe("cpp-cin", r"cin\\s*>>")
        ```
    """
    return InputProbe(name, re.compile(expression, re.IGNORECASE))


INPUT_PROBES: tuple[InputProbe, ...] = (
    _probe("java-scanner", r"Scanner.*nextInt|Scanner.*nextLine|Scanner.*next\(\)|System\.in"),
    _probe("python-input", r"input\s*\("),
    _probe("cpp-cin", r"cin\s*>>"),
    _probe("node-stdin", r"readline|process\.stdin"),
)


def matching_probes(source: str, probes: tuple[InputProbe, ...] = INPUT_PROBES) -> list[str]:
    """Return the names of every probe that matches `source`.

    Example:
        ```python
        matching_probes("cin >> n;")  # ["cpp-cin"]
        ```
    """
    return [probe.name for probe in probes if probe.matches(source)]


def requires_stdin(source: str, probes: tuple[InputProbe, ...] = INPUT_PROBES) -> bool:
    """Guess whether `source` reads standard input.

    False negatives are acceptable; a positive only blocks submission
    until the user provides input.

    Example:
        ```python
        requires_stdin('name = input("name? ")')  # True
        ```
    """
    return any(probe.matches(source) for probe in probes)
