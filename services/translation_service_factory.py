"""
Translation Service Factory
Selects the translation backend ("deepl" or "llm") from configuration
"""

import os
import logging
from typing import Optional

from services.deepl_translation_service import DeeplTranslationService
from services.llm_translation_service import LLMTranslationService
from services.translation_service import TranslationService

logger = logging.getLogger(__name__)

DEEPL_CLIENT = "deepl"
LLM_CLIENT = "llm"

# Default client type to use if not specified
DEFAULT_CLIENT = DEEPL_CLIENT


def create_translation_service(
    client_name: Optional[str] = None,
    auth_key: Optional[str] = None,
    **options
) -> TranslationService:
    """
    Create the configured translation service.

    Args:
        client_name: "deepl" or "llm". If None, reads TRANSLATION_CLIENT
            (default: "deepl"). Unknown names fall back to the default client.
        auth_key: DeepL authentication key (ignored by the LLM client)
        **options: Extra keyword arguments for the service constructor
            (api_url/timeout for DeepL, provider_name/model/timeout for LLM)
    """
    if client_name is None:
        client_name = os.getenv("TRANSLATION_CLIENT", DEFAULT_CLIENT)
    client_name = client_name.lower()

    if client_name not in (DEEPL_CLIENT, LLM_CLIENT):
        logger.warning(f"Unknown client type: {client_name}. Using default client: {DEFAULT_CLIENT}")
        client_name = DEFAULT_CLIENT

    logger.info(f"Using translation client: {client_name}")

    if client_name == LLM_CLIENT:
        return LLMTranslationService(**options)
    return DeeplTranslationService(auth_key=auth_key, **options)
