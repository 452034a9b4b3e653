"""
DeepL Translation Service
Translates text through the DeepL REST API (https://www.deepl.com/docs-api)
"""

import os
import logging
from typing import Optional

import requests
from dotenv import load_dotenv

from services.exceptions import TranslationError
from services.translation_service import StaticLanguagesMixin, TranslationService

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

DEEPL_API_URL = "https://api-free.deepl.com/v2/translate"

DEEPL_SOURCE_LANGUAGES = frozenset({
    "AR", "BG", "CS", "DA", "DE", "EL", "EN", "ES", "ET", "FI",
    "FR", "HU", "ID", "IT", "JA", "KO", "LT", "LV", "NB", "NL",
    "PL", "PT", "RO", "RU", "SK", "SL", "SV", "TR", "UK", "ZH",
})

DEEPL_TARGET_LANGUAGES = DEEPL_SOURCE_LANGUAGES | frozenset({
    "EN-GB", "EN-US", "PT-BR", "PT-PT", "ZH-HANS", "ZH-HANT",
})


class DeeplTranslationService(StaticLanguagesMixin, TranslationService):
    """DeepL API translation provider"""

    source_languages = DEEPL_SOURCE_LANGUAGES
    target_languages = DEEPL_TARGET_LANGUAGES

    def __init__(
        self,
        auth_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        self.auth_key = auth_key or os.getenv("DEEPL_AUTH_KEY")
        self.api_url = api_url or os.getenv("DEEPL_API_URL", DEEPL_API_URL)
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_service_name(self) -> str:
        return "deepl"

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        """Translate one string with a single DeepL request"""
        if text is None:
            raise TranslationError("Text cannot be null")
        if not text.strip():
            # Nothing to translate
            return text
        if not self.auth_key or not self.auth_key.strip():
            raise TranslationError("Authentication key is required")

        data = {
            "auth_key": self.auth_key,
            "text": text,
            "source_lang": source_language,
            "target_lang": target_language,
        }

        try:
            response = self.session.post(
                self.api_url,
                data=data,
                headers={"Accept": "application/json"},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Exception during translation: {e}", exc_info=True)
            raise TranslationError(f"Translation API call failed: {e}") from e

        if response.status_code != 200:
            message = _error_message(response)
            logger.error(f"DeepL API returned error code {response.status_code}: {message}")
            raise TranslationError(f"DeepL HTTP {response.status_code}: {message}")

        try:
            translations = response.json().get("translations") or []
        except ValueError as e:
            raise TranslationError(f"DeepL returned invalid JSON: {e}") from e

        if not translations:
            raise TranslationError("DeepL: empty translations")

        translated = translations[0].get("text")
        if not isinstance(translated, str):
            raise TranslationError("DeepL: translation without text")
        return translated


def _error_message(response: requests.Response) -> str:
    """Extract the provider's error message, falling back to the raw body"""
    try:
        payload = response.json()
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
    except ValueError:
        logger.debug("Could not parse error response as JSON")
    return response.text[:200]
