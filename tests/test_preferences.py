import pytest

from code_workbench.preferences import EditorPreferences
from code_workbench.session import MemoryBackend, SessionStorageError


class _ReadOnlyBackend(MemoryBackend):
    def set(self, key: str, value: str) -> None:
        raise SessionStorageError("quota exceeded")


def test_font_size_steps_are_clamped() -> None:
    prefs = EditorPreferences(font_size=22)
    assert prefs.increase_font_size() == 24
    assert prefs.increase_font_size() == 24

    prefs = EditorPreferences(font_size=14)
    assert prefs.decrease_font_size() == 12
    assert prefs.decrease_font_size() == 12


def test_unknown_theme_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown editor theme"):
        EditorPreferences().set_theme("solarized")
    with pytest.raises(ValueError, match="font_size"):
        EditorPreferences(font_size=40)


def test_save_and_load_round_trip() -> None:
    backend = MemoryBackend()
    prefs = EditorPreferences()
    prefs.set_theme("monokai")
    prefs.increase_font_size()

    assert prefs.save(backend) is True
    assert backend.snapshot() == {
        "question_compiler_fontSize": "16",
        "question_compiler_editorTheme": "monokai",
    }
    assert EditorPreferences.load(backend) == EditorPreferences(font_size=16, theme="monokai")


def test_load_ignores_invalid_saved_values() -> None:
    backend = MemoryBackend()
    backend.set("question_compiler_fontSize", "99")
    backend.set("question_compiler_editorTheme", "neon")
    assert EditorPreferences.load(backend) == EditorPreferences()


def test_save_reports_storage_failure() -> None:
    assert EditorPreferences().save(_ReadOnlyBackend()) is False
