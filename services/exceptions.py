"""Exception taxonomy for document translation"""

from typing import Dict, Iterable, Optional


class DocumentTranslationError(Exception):
    """Base class for all errors raised by the translation engine."""


class ConfigurationError(DocumentTranslationError):
    """Missing credentials, unreadable config files or unknown client names."""


class UnsupportedLanguageError(DocumentTranslationError):
    """Source or target language not supported by the translation service."""

    def __init__(self, language: str, role: str):
        self.language = language
        self.role = role
        super().__init__(f"Unsupported {role} language: {language}")


class TranslationError(DocumentTranslationError):
    """A provider or network failure while translating a piece of text."""


class StructureConflict(DocumentTranslationError):
    """A path requires a Node where a leaf is already stored."""

    def __init__(self, path: Iterable[str], conflict_at: str):
        self.path = tuple(path)
        self.conflict_at = conflict_at
        super().__init__(
            f"Cannot descend into '{conflict_at}' for path {'.'.join(self.path)}: "
            f"a leaf is already stored there"
        )


class DepthExceeded(DocumentTranslationError):
    """Document nesting is deeper than the configured limit."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Document nesting exceeds maximum depth of {max_depth}")


class AggregateTranslationError(DocumentTranslationError):
    """Every requested target language failed; no output was produced."""

    def __init__(self, failures: Optional[Dict[str, Exception]] = None):
        self.failures = dict(failures or {})
        self.failure_count = len(self.failures)
        super().__init__(
            f"All translations failed ({self.failure_count} of {self.failure_count}). "
            f"No output was produced for any language."
        )
