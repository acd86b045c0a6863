import pytest

from code_workbench.detection import requires_stdin
from code_workbench.languages import (
    LANGUAGE_ALIASES,
    SUPPORTED_LANGUAGES,
    LanguageRegistry,
    default_language,
    find_by_exact_name,
    find_by_fuzzy_name,
    match_substring,
)


def test_registry_order_and_default() -> None:
    registry = LanguageRegistry()
    assert registry.names() == [
        "Python",
        "Java",
        "C++",
        "JavaScript",
        "C",
        "Go",
        "Rust",
        "TypeScript",
    ]
    assert default_language().display_name == "Python"


def test_executor_pairs_come_from_registry() -> None:
    pairs = {lang.display_name: (lang.executor_id, lang.executor_version) for lang in SUPPORTED_LANGUAGES}
    assert pairs["C++"] == ("cpp", "10.2.0")
    assert pairs["Java"] == ("java", "15.0.2")
    assert pairs["TypeScript"] == ("typescript", "5.0.3")


def test_exact_lookup_is_case_sensitive() -> None:
    assert find_by_exact_name("Python") is not None
    assert find_by_exact_name("python") is None


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("js", "JavaScript"),
        ("ts", "TypeScript"),
        ("py", "Python"),
        ("cpp", "C++"),
        ("c++", "C++"),
        ("C++", "C++"),
        ("go", "Go"),
        ("Golang", "Go"),
        ("rs", "Rust"),
        ("java", "Java"),
        ("  JavaScript  ", "JavaScript"),
        ("c", "C"),
    ],
)
def test_fuzzy_lookup_resolves_aliases(query: str, expected: str) -> None:
    assert find_by_fuzzy_name(query).display_name == expected


def test_every_registered_alias_resolves_to_its_target() -> None:
    registered = {lang.display_name for lang in SUPPORTED_LANGUAGES}
    for alias, target in LANGUAGE_ALIASES.items():
        if target in registered:
            assert find_by_fuzzy_name(alias).display_name == target, alias


@pytest.mark.parametrize("query", ["totally-unknown", "", None, "cs", "csharp"])
def test_fuzzy_lookup_falls_back_to_default(query: str | None) -> None:
    assert find_by_fuzzy_name(query) == default_language()


def test_substring_prefers_longest_name() -> None:
    lang = match_substring("javascript es2020", SUPPORTED_LANGUAGES)
    assert lang is not None
    assert lang.display_name == "JavaScript"


def test_configured_default_is_used_for_fallback() -> None:
    registry = LanguageRegistry(default_name="Rust")
    assert registry.default_language().display_name == "Rust"
    assert registry.find_by_fuzzy_name("brainfuck").display_name == "Rust"


def test_unknown_default_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown default language"):
        LanguageRegistry(default_name="COBOL")


def test_find_by_extension_accepts_leading_dot() -> None:
    registry = LanguageRegistry()
    assert registry.find_by_extension(".rs").display_name == "Rust"  # type: ignore[union-attr]
    assert registry.find_by_extension("PY").display_name == "Python"  # type: ignore[union-attr]
    assert registry.find_by_extension(".kt") is None


def test_default_templates_do_not_need_stdin() -> None:
    for lang in SUPPORTED_LANGUAGES:
        assert not requires_stdin(lang.default_code_template), lang.display_name
