"""
Leaf Transformer

Produces a translated copy of a document for one language pair by walking
its string leaves, translating each value and rebuilding a fresh document.
"""

import logging
from typing import Callable, Iterator, Tuple, Any

from models.document import KeyPath, Node, StringLeaf
from services.document_tree import DEFAULT_MAX_DEPTH, build, iter_leaves, walk
from services.exceptions import TranslationError

logger = logging.getLogger(__name__)

LeafTranslator = Callable[[str], str]


def transform(
    document: Node,
    translate_leaf: LeafTranslator,
    preserve_opaque: bool = True,
    max_depth: int = DEFAULT_MAX_DEPTH
) -> Node:
    """
    Translate every string leaf of a document into a new document.

    The first failing leaf aborts the whole transform: the exception
    propagates and no partial document is returned.

    Args:
        document: Source document (read only)
        translate_leaf: Function mapping a source string to its translation
        preserve_opaque: Keep numbers, booleans, null, arrays and empty
            objects at their original paths. When False they are dropped
            and only translated strings remain.
        max_depth: Nesting limit passed to walk/build

    Returns:
        A newly built Node with the same string-leaf paths as the source

    Raises:
        TranslationError: If translate_leaf fails or returns a non-string
        DepthExceeded: If the document is nested too deeply
    """
    return build(_translated_entries(document, translate_leaf, preserve_opaque, max_depth), max_depth)


def _translated_entries(
    document: Node,
    translate_leaf: LeafTranslator,
    preserve_opaque: bool,
    max_depth: int
) -> Iterator[Tuple[KeyPath, Any]]:
    if not preserve_opaque:
        for path, value in walk(document, max_depth):
            yield path, _translate(translate_leaf, path, value)
        return

    for path, leaf in iter_leaves(document, max_depth, include_empty_nodes=True):
        if isinstance(leaf, StringLeaf):
            yield path, _translate(translate_leaf, path, leaf.value)
        else:
            yield path, leaf


def _translate(translate_leaf: LeafTranslator, path: KeyPath, value: str) -> str:
    translated = translate_leaf(value)
    if not isinstance(translated, str):
        logger.error(f"Translator returned {type(translated).__name__} for {'.'.join(path)}")
        raise TranslationError(
            f"Translation of '{'.'.join(path)}' returned {type(translated).__name__}, expected str"
        )
    return translated
