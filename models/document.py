"""
Document Models

Tagged tree used by the translation engine. A parsed JSON object becomes a
Node whose children are StringLeaf (translatable), OpaqueLeaf (numbers,
booleans, null, arrays) or nested Node values.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, NamedTuple, Optional, Tuple, Union

KeyPath = Tuple[str, ...]


@dataclass(frozen=True)
class StringLeaf:
    """A string value that will be sent to the translation service."""
    value: str


@dataclass(frozen=True)
class OpaqueLeaf:
    """Any non-string scalar or list. Never translated."""
    value: Any


class Node:
    """Ordered mapping from unique string keys to child documents.

    Insertion order is preserved so walking the same document twice always
    yields the same leaf order.
    """

    __slots__ = ("_children",)

    def __init__(self, children: Optional[Dict[str, "Document"]] = None):
        self._children: Dict[str, Document] = {}
        for key, child in (children or {}).items():
            self[key] = child

    def __getitem__(self, key: str) -> "Document":
        return self._children[key]

    def __setitem__(self, key: str, child: "Document") -> None:
        if not isinstance(key, str):
            raise TypeError(f"Document keys must be strings, got {type(key).__name__}")
        if not isinstance(child, (Node, StringLeaf, OpaqueLeaf)):
            raise TypeError(f"Unsupported document value: {type(child).__name__}")
        self._children[key] = child

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._children == other._children

    def __repr__(self):
        return f"<Node {self._children!r}>"

    def get(self, key: str, default=None):
        return self._children.get(key, default)

    def items(self):
        return self._children.items()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        """
        Build a tagged tree from a parsed JSON object.

        dict values become nested Nodes, str values become StringLeaf and
        everything else (numbers, booleans, None, lists) becomes OpaqueLeaf.
        Uses an explicit stack so deeply nested input cannot exhaust the
        interpreter's recursion limit.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Document root must be an object, got {type(data).__name__}")

        root = cls()
        stack = [(data, root)]
        while stack:
            source, target = stack.pop()
            for key, value in source.items():
                if isinstance(value, dict):
                    child = cls()
                    target[key] = child
                    stack.append((value, child))
                else:
                    target[key] = to_leaf(value)
        return root

    def to_dict(self) -> Dict[str, Any]:
        """Render the tree back into plain dicts and values."""
        result: Dict[str, Any] = {}
        stack = [(self, result)]
        while stack:
            node, target = stack.pop()
            for key, child in node.items():
                if isinstance(child, Node):
                    target[key] = {}
                    stack.append((child, target[key]))
                else:
                    target[key] = child.value
        return result


Leaf = Union[StringLeaf, OpaqueLeaf]
Document = Union[Node, StringLeaf, OpaqueLeaf]


class LeafEntry(NamedTuple):
    """A (path, value) pair for one string leaf."""
    path: KeyPath
    value: str


def to_leaf(value: Any) -> Leaf:
    """Wrap a raw value in the matching leaf type (leaves pass through)."""
    if isinstance(value, (StringLeaf, OpaqueLeaf)):
        return value
    if isinstance(value, str):
        return StringLeaf(value)
    return OpaqueLeaf(value)
