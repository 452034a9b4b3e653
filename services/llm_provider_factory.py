"""
LLM Provider Factory
Provides a unified interface for the LLM backends used for translation
(OpenAI, Mistral and local Ollama servers via their OpenAI-compatible API).
The backend is selected through the LLM_PROVIDER environment variable.
"""

import os
import logging
from typing import Dict, List, Optional, Any, Type
from abc import ABC, abstractmethod
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

OLLAMA_DEFAULT_BASE_URL = "http://localhost:11434/v1"


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    @abstractmethod
    def create_chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1000,
        response_format: Optional[Dict] = None,
        timeout: float = 30.0,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Create a chat completion using the provider's API.

        Returns a normalized response dictionary with:
        - content: str (the response text)
        - model: str (model used)
        - usage: dict (token usage stats)
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return provider name ('openai', 'mistral', 'ollama')"""
        pass

    def create_structured_completion(
        self,
        messages: List[Dict[str, str]],
        response_model: Type[BaseModel],
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Create a structured completion parsed into response_model.

        The base implementation uses JSON mode with manual validation.
        Providers whose SDK enforces the schema natively override this and
        fall back to json_mode_completion() when the native call fails.

        Returns:
            Dict containing:
            - parsed_object: Pydantic model instance
            - raw_content: Original response text
            - model: Model name used
            - usage: Token usage dict

        Raises:
            RuntimeError: If the response is not valid JSON for response_model
        """
        return self.json_mode_completion(
            messages=messages,
            response_model=response_model,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            **kwargs
        )

    def json_mode_completion(
        self,
        messages: List[Dict[str, str]],
        response_model: Type[BaseModel],
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        **kwargs
    ) -> Dict[str, Any]:
        """Chat completion in JSON mode, validated with response_model.model_validate_json"""
        response = self.create_chat_completion(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
            timeout=timeout,
            **kwargs
        )

        content = response["content"]
        try:
            parsed_object = response_model.model_validate_json(content or "")
        except ValidationError as validation_err:
            logger.error(f"LLM response did not match {response_model.__name__}: {validation_err}")
            raise RuntimeError(f"Failed to parse LLM response as {response_model.__name__}: {validation_err}")

        return {
            "parsed_object": parsed_object,
            "raw_content": content,
            "model": response["model"],
            "usage": response["usage"],
        }

    def _structured_result(self, response) -> Dict[str, Any]:
        """Normalize a native .parse() response"""
        parsed_object = response.choices[0].message.parsed
        if parsed_object is None:
            raise RuntimeError("Structured completion returned no parsed object")
        return {
            "parsed_object": parsed_object,
            "raw_content": response.choices[0].message.content,
            "model": response.model,
            "usage": _usage(response),
        }

    def _fallback(self, error: Exception, **params) -> Dict[str, Any]:
        logger.warning(f"Structured output failed, falling back to manual JSON parsing: {error}")
        try:
            result = self.json_mode_completion(**params)
        except Exception as fallback_err:
            logger.error(f"Fallback completion failed: {fallback_err}")
            raise RuntimeError(f"Structured completion failed and fallback also failed: {fallback_err}")
        logger.info(f"Fallback parsing successful: {result['model']}")
        return result


class OpenAIProvider(LLMProvider):
    """OpenAI API provider implementation (also used for Ollama's compatible endpoint)"""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        """Initialize OpenAI client with API key and optional base URL"""
        from openai import OpenAI

        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY not found in environment variables")

        self.client = OpenAI(api_key=self.api_key, base_url=base_url)
        logger.info(f"Initialized {self.get_provider_name()} provider")

    def create_chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1000,
        response_format: Optional[Dict] = None,
        timeout: float = 30.0,
        **kwargs
    ) -> Dict[str, Any]:
        """Create chat completion using the OpenAI client"""
        api_params = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": timeout,
            **kwargs
        }
        if response_format:
            api_params["response_format"] = response_format

        response = self.client.chat.completions.create(**api_params)

        return {
            "content": response.choices[0].message.content,
            "model": response.model,
            "usage": _usage(response),
        }

    def get_provider_name(self) -> str:
        return "openai"

    def create_structured_completion(
        self,
        messages: List[Dict[str, str]],
        response_model: Type[BaseModel],
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        **kwargs
    ) -> Dict[str, Any]:
        """Structured completion via beta.chat.completions.parse(), JSON mode as fallback"""
        params = dict(
            messages=messages,
            response_model=response_model,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            **kwargs
        )
        try:
            logger.debug(f"Attempting structured completion with OpenAI model {model}")
            response = self.client.beta.chat.completions.parse(
                model=model,
                messages=messages,
                response_format=response_model,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout,
                **kwargs
            )
            return self._structured_result(response)
        except Exception as e:
            return self._fallback(e, **params)


class OllamaProvider(OpenAIProvider):
    """Local Ollama server reached through its OpenAI-compatible endpoint"""

    def __init__(self, base_url: Optional[str] = None):
        # Ollama ignores the key but the OpenAI client requires one
        super().__init__(
            api_key="ollama",
            base_url=base_url or os.getenv("OLLAMA_BASE_URL", OLLAMA_DEFAULT_BASE_URL)
        )

    def get_provider_name(self) -> str:
        return "ollama"

    def create_structured_completion(self, *args, **kwargs) -> Dict[str, Any]:
        # The compatible endpoint has no .parse() support; use JSON mode directly
        return self.json_mode_completion(*args, **kwargs)


class MistralProvider(LLMProvider):
    """Mistral AI provider implementation"""

    def __init__(self, api_key: Optional[str] = None):
        """Initialize Mistral provider with API key"""
        from mistralai import Mistral

        self.api_key = api_key or os.getenv("MISTRAL_API_KEY")
        if not self.api_key:
            raise ValueError("MISTRAL_API_KEY not found in environment variables")

        self.client = Mistral(api_key=self.api_key)
        logger.info("Initialized Mistral provider")

    def create_chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1000,
        response_format: Optional[Dict] = None,
        timeout: float = 30.0,
        **kwargs
    ) -> Dict[str, Any]:
        """Create chat completion using Mistral API"""
        api_params = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout_ms": int(timeout * 1000),
            **kwargs
        }
        if response_format:
            api_params["response_format"] = response_format

        # Mistral SDK uses chat.complete()
        response = self.client.chat.complete(**api_params)

        return {
            "content": response.choices[0].message.content,
            "model": response.model,
            "usage": _usage(response),
        }

    def get_provider_name(self) -> str:
        return "mistral"

    def create_structured_completion(
        self,
        messages: List[Dict[str, str]],
        response_model: Type[BaseModel],
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        **kwargs
    ) -> Dict[str, Any]:
        """Structured completion via Mistral's chat.parse(), JSON mode as fallback"""
        params = dict(
            messages=messages,
            response_model=response_model,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
            **kwargs
        )
        try:
            logger.debug(f"Attempting structured completion with Mistral model {model}")
            response = self.client.chat.parse(
                model=model,
                messages=messages,
                response_format=response_model,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout_ms=int(timeout * 1000),
                **kwargs
            )
            return self._structured_result(response)
        except Exception as e:
            return self._fallback(e, **params)


def _usage(response) -> Dict[str, int]:
    return {
        "prompt_tokens": response.usage.prompt_tokens,
        "completion_tokens": response.usage.completion_tokens,
        "total_tokens": response.usage.total_tokens,
    }


class LLMProviderFactory:
    """Factory class for creating LLM provider instances"""

    # Default models per provider
    DEFAULT_MODELS = {
        "openai": "gpt-4o-mini",
        "mistral": "mistral-small-latest",
        "ollama": "llama3.1",
    }

    @staticmethod
    def _resolve_name(provider_name: Optional[str]) -> str:
        if provider_name is None:
            return os.getenv("LLM_PROVIDER", "openai").lower()
        return provider_name.lower()

    @staticmethod
    def create_provider(provider_name: Optional[str] = None) -> LLMProvider:
        """
        Create an LLM provider instance based on configuration.

        Args:
            provider_name: Provider to use ("openai", "mistral", "ollama").
                         If None, reads from LLM_PROVIDER env var (default: "openai")

        Raises:
            ValueError: If provider is not supported or API key is missing
        """
        provider_name = LLMProviderFactory._resolve_name(provider_name)
        logger.info(f"Creating LLM provider: {provider_name}")

        if provider_name == "openai":
            return OpenAIProvider()
        elif provider_name == "mistral":
            return MistralProvider()
        elif provider_name == "ollama":
            return OllamaProvider()
        else:
            raise ValueError(
                f"Unsupported LLM provider: {provider_name}. "
                f"Supported providers: openai, mistral, ollama"
            )

    @staticmethod
    def get_default_model(provider_name: Optional[str] = None) -> str:
        """Get the default model for a provider (LLM_MODEL overrides it)"""
        override = os.getenv("LLM_MODEL")
        if override:
            return override
        provider_name = LLMProviderFactory._resolve_name(provider_name)
        return LLMProviderFactory.DEFAULT_MODELS.get(provider_name, "gpt-4o-mini")


def get_llm_client(provider_name: Optional[str] = None) -> LLMProvider:
    """Convenience wrapper around LLMProviderFactory.create_provider()"""
    return LLMProviderFactory.create_provider(provider_name)
