"""
Document Tree Service

Walks a document into (path, value) leaf entries and rebuilds a document
from such entries. Both directions use an explicit stack bounded by
max_depth, so pathological nesting fails with DepthExceeded instead of
hitting the interpreter's recursion limit.
"""

import logging
from typing import Any, Iterable, Iterator, Tuple

from models.document import KeyPath, LeafEntry, Node, OpaqueLeaf, StringLeaf, to_leaf
from services.exceptions import DepthExceeded, StructureConflict

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


def iter_leaves(
    document: Node,
    max_depth: int = DEFAULT_MAX_DEPTH,
    include_empty_nodes: bool = False
) -> Iterator[Tuple[KeyPath, Any]]:
    """
    Yield (path, leaf) for every leaf of the document in iteration order.

    Args:
        document: Root Node to traverse
        max_depth: Maximum number of nested Nodes, the root counting as one
        include_empty_nodes: Also yield (path, Node()) for empty objects so
            they survive a rebuild

    Yields:
        (KeyPath, StringLeaf | OpaqueLeaf | Node) tuples

    Raises:
        DepthExceeded: If the document nests deeper than max_depth
    """
    if not isinstance(document, Node):
        raise TypeError(f"Document root must be a Node, got {type(document).__name__}")
    if max_depth < 1:
        raise ValueError("max_depth must be at least 1")

    stack = [((), iter(document.items()))]
    while stack:
        path, children = stack[-1]
        item = next(children, None)
        if item is None:
            stack.pop()
            continue

        key, child = item
        child_path = path + (key,)
        if isinstance(child, Node):
            if len(stack) >= max_depth:
                logger.warning(f"Depth limit {max_depth} reached at {'.'.join(child_path)}")
                raise DepthExceeded(max_depth)
            if include_empty_nodes and len(child) == 0:
                yield child_path, Node()
            stack.append((child_path, iter(child.items())))
        else:
            yield child_path, child


def walk(document: Node, max_depth: int = DEFAULT_MAX_DEPTH) -> Iterator[LeafEntry]:
    """
    Emit a LeafEntry for every string leaf of the document.

    Opaque leaves (numbers, booleans, null, arrays) produce no entries.
    The returned iterator is single-use; call walk() again to restart.
    """
    for path, leaf in iter_leaves(document, max_depth):
        if isinstance(leaf, StringLeaf):
            yield LeafEntry(path, leaf.value)


def build(
    entries: Iterable[Tuple[KeyPath, Any]],
    max_depth: int = DEFAULT_MAX_DEPTH
) -> Node:
    """
    Reconstruct a document from (path, value) entries.

    Intermediate Nodes are created lazily. Raw values are wrapped with
    to_leaf(); StringLeaf, OpaqueLeaf and empty Node values are stored as given.

    Raises:
        ValueError: If an entry has an empty path
        DepthExceeded: If a path is longer than max_depth
        StructureConflict: If a path descends through an existing leaf, or a
            leaf would replace an existing non-empty Node
    """
    root = Node()
    for path, value in entries:
        path = tuple(path)
        if not path:
            raise ValueError("KeyPath must contain at least one key")
        if len(path) > max_depth:
            raise DepthExceeded(max_depth)

        current = root
        for key in path[:-1]:
            child = current.get(key)
            if child is None:
                child = Node()
                current[key] = child
            elif not isinstance(child, Node):
                raise StructureConflict(path, key)
            current = child

        last_key = path[-1]
        existing = current.get(last_key)
        if isinstance(existing, Node) and len(existing) > 0:
            raise StructureConflict(path, last_key)

        current[last_key] = value if isinstance(value, Node) else to_leaf(value)

    return root


def count_string_leaves(document: Node, max_depth: int = DEFAULT_MAX_DEPTH) -> int:
    """Number of StringLeaf values in the document."""
    return sum(1 for _ in walk(document, max_depth))


def count_opaque_leaves(document: Node, max_depth: int = DEFAULT_MAX_DEPTH) -> int:
    """Number of OpaqueLeaf values in the document."""
    return sum(1 for _, leaf in iter_leaves(document, max_depth) if isinstance(leaf, OpaqueLeaf))
