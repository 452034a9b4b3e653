"""Plain-text translation into several languages"""

import logging
from typing import Iterable, List

from services.translation_service import TranslationService, validate_languages

logger = logging.getLogger(__name__)


def translate_text_to_languages(
    text: str,
    source_language: str,
    target_languages: Iterable[str],
    service: TranslationService
) -> List[str]:
    """
    Translate one text into each target language, in request order.

    Unlike document translation this is sequential and fails fast: the first
    TranslationError propagates to the caller.
    """
    targets = list(target_languages)
    validate_languages(service, source_language, targets)

    translations = []
    for target_language in targets:
        logger.info(f"Translating text from {source_language} to {target_language}")
        translations.append(service.translate(text, source_language, target_language))
    return translations


def format_csv_line(translations: Iterable[str]) -> str:
    """Render translations as a semicolon separated line of quoted values"""
    return ";".join(f'"{translation}"' for translation in translations)
