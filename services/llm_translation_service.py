"""
LLM Translation Service
Translates document values using LLM providers (OpenAI, Mistral, Ollama)
"""

import logging
import threading
from typing import Optional

from dotenv import load_dotenv
from services.exceptions import TranslationError
from services.llm_models.translation_models import LeafTranslation
from services.llm_provider_factory import LLMProvider, LLMProviderFactory, get_llm_client
from services.translation_service import StaticLanguagesMixin, TranslationService

# Configure logging
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

# Common language codes supported by most LLMs
LLM_LANGUAGES = frozenset({
    "EN", "DE", "FR", "ES", "IT", "NL", "PL", "PT", "RU", "ZH", "JA", "KO",
    "AR", "BG", "CS", "DA", "EL", "ET", "FI", "HU", "ID", "LT", "LV",
    "NO", "RO", "SK", "SL", "SV", "TR", "UK", "VI", "HE", "HI", "TH",
    "CA", "HR", "IS", "MS", "FA", "SR", "BS", "MK", "GA", "SQ", "NB", "PT-BR",
})

SYSTEM_PROMPT = """You are a professional translator working on software localization files.

Translate the user's text from {source_language} to {target_language}.

IMPORTANT RULES:
1. Return ONLY the translation, no explanations, notes or quotes
2. Keep placeholders such as {{name}}, %s, %d, {{0}} and HTML tags exactly as they are
3. Preserve leading/trailing whitespace and line breaks
4. If the text is already in {target_language} or cannot be translated (e.g. a brand name), return it unchanged

Respond with a JSON object:
{{
  "translation": "translated text"
}}"""


class LLMTranslationService(StaticLanguagesMixin, TranslationService):
    """Translation provider backed by a chat-completion LLM"""

    source_languages = LLM_LANGUAGES
    target_languages = LLM_LANGUAGES

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        model: Optional[str] = None,
        provider_name: Optional[str] = None,
        timeout: float = 30.0
    ):
        self._provider = provider
        self.provider_name = provider_name
        self.model = model or LLMProviderFactory.get_default_model(provider_name)
        self.timeout = timeout
        self._provider_lock = threading.Lock()

    @property
    def provider(self) -> LLMProvider:
        # Created lazily so a misconfigured provider fails inside a job
        with self._provider_lock:
            if self._provider is None:
                try:
                    self._provider = get_llm_client(self.provider_name)
                except ValueError as e:
                    logger.error(f"Failed to initialize LLM provider: {str(e)}")
                    raise TranslationError(f"LLM provider configuration error: {str(e)}") from e
        return self._provider

    def get_service_name(self) -> str:
        return "llm"

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        """
        Translate text with a single structured LLM call.

        Returns:
            The translated text; blank input is returned unchanged

        Raises:
            TranslationError: If the provider call or response parsing fails
        """
        if text is None:
            raise TranslationError("Text cannot be null")
        if not text.strip():
            logger.warning("Empty text provided for translation")
            return text

        messages = [
            {
                "role": "system",
                "content": SYSTEM_PROMPT.format(
                    source_language=source_language,
                    target_language=target_language
                )
            },
            {"role": "user", "content": text}
        ]

        provider = self.provider
        try:
            logger.debug(f"Translating text from {source_language} to {target_language}")
            response = provider.create_structured_completion(
                messages=messages,
                response_model=LeafTranslation,
                model=self.model,
                temperature=0.2,
                timeout=self.timeout
            )
        except Exception as e:
            logger.error(f"Translation failed: {str(e)}", exc_info=True)
            raise TranslationError(f"LLM translation failed: {str(e)}") from e

        logger.debug(
            f"Translation successful. Model: {response['model']}, "
            f"tokens: {response['usage'].get('total_tokens', 0)}"
        )
        return response["parsed_object"].translation
