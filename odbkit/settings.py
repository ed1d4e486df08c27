"""Application settings stored in an INI file."""

from __future__ import annotations

import configparser
import os
from typing import Any

_DEFAULT_SECTION = "General"


class Settings:
    """Section/key settings persisted to an INI file on every change."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self._filename = os.fspath(filename)
        self._config = configparser.ConfigParser(interpolation=None)
        self._config.optionxform = str  # keep keys case-sensitive
        self._config.read(self._filename, encoding="utf-8")

    @staticmethod
    def _section_name(section: str) -> str:
        return section or _DEFAULT_SECTION

    def get(self, section: str, key: str) -> str | None:
        """Return the stored value, or None when it is not set."""
        return self._config.get(self._section_name(section), key, fallback=None)

    def set(self, section: str, key: str, value: Any) -> None:
        """Store *value* under *section*/*key* and write the file."""
        name = self._section_name(section)
        if not self._config.has_section(name):
            self._config.add_section(name)
        if isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)
        self._config.set(name, key, text)
        with open(self._filename, "w", encoding="utf-8") as fh:
            self._config.write(fh)


_instance: Settings | None = None


def load(filename: str | os.PathLike[str]) -> Settings:
    """Load settings from *filename* and make them the shared instance."""
    global _instance
    _instance = Settings(filename)
    return _instance


def instance() -> Settings | None:
    """Return the shared settings instance, or None before load()."""
    return _instance