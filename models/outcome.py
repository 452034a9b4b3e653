"""
Translation Outcome Models

Per-language results reported by the fan-out. Each requested target
language ends in exactly one Success or Failure.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from models.document import Node


class JobState(str, Enum):
    """Lifecycle of a single translation job."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Success:
    document: Node

    @property
    def succeeded(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: Exception

    @property
    def succeeded(self) -> bool:
        return False


TranslationOutcome = Union[Success, Failure]


@dataclass
class TranslationJob:
    """One (document, source language, target language) unit of work.

    The source document is shared read-only between jobs; every job builds
    its own output document.
    """

    document: Node
    source_language: str
    target_language: str
    state: JobState = field(default=JobState.PENDING)
