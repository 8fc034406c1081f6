"""
Node: Base type for everything that lives in a stack graph.

Nodes are frozen dataclasses. A node refers to other nodes by holding
them directly; the graph walks those references to check ordering and
to serialize the node with names in place of nested objects.
"""

from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Any, ClassVar


class Node:
    """
    Base class for graph nodes.

    Subclasses are frozen dataclasses with a ``name`` field and set
    ``node_type`` to a short, stable identifier used in serialized output.
    """

    node_type: ClassVar[str] = "node"
    name: str

    def references(self) -> list['Node']:
        """Nodes this node points at, in field order, without duplicates."""
        found: list[Node] = []
        for f in fields(self):
            _collect_nodes(getattr(self, f.name), found)
        return found

    def to_dict(self) -> dict[str, Any]:
        """Serialize this node, replacing referenced nodes by their names."""
        data: dict[str, Any] = {"type": self.node_type}
        for f in fields(self):
            data[f.name] = to_plain(getattr(self, f.name))
        return data


@dataclass(frozen=True)
class Artifact:
    """A named hand-off between pipeline actions."""

    name: str

    def __str__(self):
        return self.name


def _collect_nodes(value: Any, found: list[Node]) -> None:
    if isinstance(value, Node):
        if value not in found:
            found.append(value)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _collect_nodes(item, found)
    elif isinstance(value, dict):
        for item in value.values():
            _collect_nodes(item, found)
    elif is_dataclass(value) and not isinstance(value, type):
        for f in fields(value):
            _collect_nodes(getattr(value, f.name), found)


def to_plain(value: Any) -> Any:
    if isinstance(value, (Node, Artifact)):
        return value.name
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    return value
