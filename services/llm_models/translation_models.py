"""
Translation Pydantic Models

Structured output model for LLM translation of a single document value.
"""

from pydantic import BaseModel, Field


class LeafTranslation(BaseModel):
    """Translation of one string value.

    Example structure:
    {
        "translation": "Guten Morgen"
    }
    """
    translation: str = Field(description="The translated text, without quotes or commentary")
