"""
Translation Service Interface

Abstract collaborator that translates a single piece of text and reports the
languages it supports. Supported language sets belong to each instance so
several services (or test doubles) can coexist.
"""

import logging
from abc import ABC, abstractmethod
from typing import FrozenSet, Iterable

from services.exceptions import UnsupportedLanguageError

logger = logging.getLogger(__name__)


class TranslationService(ABC):
    """Abstract base class for translation providers"""

    @abstractmethod
    def translate(self, text: str, source_language: str, target_language: str) -> str:
        """
        Translate text from source_language into target_language.

        Raises:
            TranslationError: On any provider or network failure
        """
        pass

    @abstractmethod
    def get_supported_source_languages(self) -> FrozenSet[str]:
        """Return the language codes accepted as source languages"""
        pass

    @abstractmethod
    def get_supported_target_languages(self) -> FrozenSet[str]:
        """Return the language codes accepted as target languages"""
        pass

    def get_service_name(self) -> str:
        """Short provider name used in logs and API responses"""
        return type(self).__name__


class StaticLanguagesMixin:
    """Serve supported language sets from instance attributes."""

    source_languages: FrozenSet[str] = frozenset()
    target_languages: FrozenSet[str] = frozenset()

    def get_supported_source_languages(self) -> FrozenSet[str]:
        return frozenset(self.source_languages)

    def get_supported_target_languages(self) -> FrozenSet[str]:
        return frozenset(self.target_languages)


def validate_languages(
    service: TranslationService,
    source_language: str,
    target_languages: Iterable[str]
) -> None:
    """
    Check the source and every target language against the service.

    Raises:
        UnsupportedLanguageError: For the first unsupported language found
    """
    if source_language not in service.get_supported_source_languages():
        logger.error(f"Unsupported source language: {source_language}")
        raise UnsupportedLanguageError(source_language, "source")

    supported_targets = service.get_supported_target_languages()
    for target_language in target_languages:
        if target_language not in supported_targets:
            logger.error(f"Unsupported target language: {target_language}")
            raise UnsupportedLanguageError(target_language, "target")
