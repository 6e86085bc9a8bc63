"""Exceptions raised by the translation client and the key file reader."""

from __future__ import annotations


class I18nError(Exception):
    pass


class ConfigurationError(I18nError):
    """Translation was requested without credentials."""


class TranslationError(I18nError):
    def __init__(self, language: str, message: str) -> None:
        super().__init__(f"{language}: {message}")
        self.language = language
        self.message = message


class KeyFileError(I18nError):
    def __init__(self, path: str, message: str, line: int | None = None) -> None:
        where = f"{path}:{line}" if line is not None else path
        super().__init__(f"{where}: {message}")
        self.path = path
        self.line = line
