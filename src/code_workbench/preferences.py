from __future__ import annotations

import logging
from dataclasses import dataclass

from .session.backends import SessionBackend, SessionStorageError

logger = logging.getLogger(__name__)

EDITOR_THEMES = ("light", "vs-dark", "monokai", "dracula", "cobalt", "one-dark", "eclipse")
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 24
FONT_SIZE_STEP = 2
DEFAULT_FONT_SIZE = 14
DEFAULT_THEME = "vs-dark"


@dataclass(slots=True)
class EditorPreferences:
    """Editor font size and color theme shared by every workbench.

    Example:
        ```python
        prefs = EditorPreferences(font_size=16, theme="monokai")
        ```
    """

    font_size: int = DEFAULT_FONT_SIZE
    theme: str = DEFAULT_THEME

    def __post_init__(self) -> None:
        """Validate theme and font size.

        Example:
            ```python
            EditorPreferences(theme="dracula")
            ```
        """
        if self.theme not in EDITOR_THEMES:
            raise ValueError(f"Unknown editor theme: {self.theme}")
        if not MIN_FONT_SIZE <= self.font_size <= MAX_FONT_SIZE:
            raise ValueError(f"font_size must be between {MIN_FONT_SIZE} and {MAX_FONT_SIZE}")

    def increase_font_size(self) -> int:
        """Grow the font by one step, capped at the maximum.

        Example:
            ```python
            prefs.increase_font_size()
            ```
        """
        self.font_size = min(self.font_size + FONT_SIZE_STEP, MAX_FONT_SIZE)
        return self.font_size

    def decrease_font_size(self) -> int:
        """Shrink the font by one step, floored at the minimum.

        Example:
            ```python
            prefs.decrease_font_size()
            ```
        """
        self.font_size = max(self.font_size - FONT_SIZE_STEP, MIN_FONT_SIZE)
        return self.font_size

    def set_theme(self, theme: str) -> None:
        """Switch to one of the known editor themes.

        Example:
            ```python
            prefs.set_theme("one-dark")
            ```
        """
        if theme not in EDITOR_THEMES:
            raise ValueError(f"Unknown editor theme: {theme}")
        self.theme = theme

    @staticmethod
    def _keys(namespace: str) -> tuple[str, str]:
        """Return the font size and theme storage keys.

        Example:
            ```python
            font_key, theme_key = EditorPreferences._keys("question")
            ```
        """
        return f"{namespace}_compiler_fontSize", f"{namespace}_compiler_editorTheme"

    @classmethod
    def load(cls, backend: SessionBackend, namespace: str = "question") -> "EditorPreferences":
        """Read saved preferences, ignoring values that do not validate.

        Example:
            ```python
            prefs = EditorPreferences.load(JsonFileBackend("/tmp/sessions.json"))
            ```
        """
        font_key, theme_key = cls._keys(namespace)
        prefs = cls()
        try:
            raw_font = backend.get(font_key)
            raw_theme = backend.get(theme_key)
        except (SessionStorageError, OSError) as exc:
            logger.warning("Could not read editor preferences: %s", exc)
            return prefs
        if raw_font is not None and raw_font.strip().isdigit():
            size = int(raw_font)
            if MIN_FONT_SIZE <= size <= MAX_FONT_SIZE:
                prefs.font_size = size
        if raw_theme in EDITOR_THEMES:
            prefs.theme = raw_theme
        return prefs

    def save(self, backend: SessionBackend, namespace: str = "question") -> bool:
        """Persist preferences; returns False when storage is unavailable.

        Example:
            ```python
            prefs.save(JsonFileBackend("/tmp/sessions.json"))
            ```
        """
        font_key, theme_key = self._keys(namespace)
        try:
            backend.set(font_key, str(self.font_size))
            backend.set(theme_key, self.theme)
        except (SessionStorageError, OSError) as exc:
            logger.warning("Could not save editor preferences: %s", exc)
            return False
        return True
