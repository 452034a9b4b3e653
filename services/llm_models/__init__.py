"""
LLM Pydantic Models

Structured output models for LLM operations.
"""

from .translation_models import LeafTranslation

__all__ = [
    'LeafTranslation'
]
