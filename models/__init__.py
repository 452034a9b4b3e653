"""
Document and outcome models for the translation engine.
"""

from .document import (
    Document,
    KeyPath,
    Leaf,
    LeafEntry,
    Node,
    OpaqueLeaf,
    StringLeaf,
    to_leaf,
)
from .outcome import Failure, JobState, Success, TranslationJob, TranslationOutcome

__all__ = [
    'Document',
    'KeyPath',
    'Leaf',
    'LeafEntry',
    'Node',
    'OpaqueLeaf',
    'StringLeaf',
    'to_leaf',
    'Failure',
    'JobState',
    'Success',
    'TranslationJob',
    'TranslationOutcome',
]
