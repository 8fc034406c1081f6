"""
StackGraph: the immutable product of an assembly.

A graph holds its nodes in insertion order. GraphBuilder only accepts a
node once every node it references is already present, so that order is
always a valid creation order for the orchestrator.
"""

from dataclasses import dataclass
from typing import Any, TypeVar

from shipyard.core.network import NetworkRef
from shipyard.core.node import Node
from shipyard.errors import GraphValidationError

N = TypeVar("N", bound=Node)


@dataclass(frozen=True)
class StackOutput:
    """
    A named value surfaced after reconciliation.

    The value itself is assigned by the orchestrator; the graph only
    records which attribute of which node it reflects.
    """

    name: str
    source: str
    """Name of the node the value comes from"""

    attribute: str
    """Attribute of the provisioned resource (e.g. 'id', 'public_ip')"""

    description: str = ""


@dataclass(frozen=True)
class StackGraph:
    """
    A fully linked resource graph for one stack.

    Two graphs built from identical configuration compare equal.
    """

    name: str
    network: NetworkRef
    nodes: tuple[Node, ...]
    outputs: tuple[StackOutput, ...] = ()

    def get(self, name: str) -> Node | None:
        """Get node by name."""
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    def list_nodes(self) -> list[str]:
        """List all node names in creation order."""
        return [node.name for node in self.nodes]

    def nodes_of_type(self, node_class: type[N]) -> list[N]:
        return [node for node in self.nodes if isinstance(node, node_class)]

    def get_dependencies(self, name: str) -> list[str]:
        """Names of the nodes ``name`` references."""
        node = self.get(name)
        if node is None:
            raise KeyError(name)
        return [ref.name for ref in node.references()]

    def get_dependents(self, name: str) -> list[str]:
        """Names of the nodes that reference ``name``."""
        return [
            node.name for node in self.nodes
            if any(ref.name == name for ref in node.references())
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "network": self.network.to_dict(),
            "nodes": [node.to_dict() for node in self.nodes],
            "outputs": [
                {
                    "name": output.name,
                    "source": output.source,
                    "attribute": output.attribute,
                    "description": output.description,
                }
                for output in self.outputs
            ],
        }


class GraphBuilder:
    """
    Collects nodes for a StackGraph.

    Example:
        builder = GraphBuilder("Ec2Stack", network)
        sg = builder.add(SecurityGroup("sg"))
        builder.output("securityGroupId", sg, "id")
        graph = builder.build()
    """

    def __init__(self, name: str, network: NetworkRef):
        self.name = name
        self.network = network
        self._nodes: dict[str, Node] = {}
        self._outputs: dict[str, StackOutput] = {}

    def add(self, node: N) -> N:
        """
        Add a node to the graph.

        Raises:
            GraphValidationError: If the name is taken or a referenced node
                has not been added yet
        """
        if node.name in self._nodes:
            raise GraphValidationError(
                f"Stack '{self.name}' already has a node named '{node.name}'"
            )
        for ref in node.references():
            if self._nodes.get(ref.name) != ref:
                raise GraphValidationError(
                    f"Node '{node.name}' references '{ref.name}', "
                    f"which is not in stack '{self.name}'"
                )
        self._nodes[node.name] = node
        return node

    def output(
        self,
        name: str,
        source: Node,
        attribute: str,
        description: str = ""
    ) -> StackOutput:
        """Declare a stack output reflecting ``source.attribute``."""
        if self._nodes.get(source.name) != source:
            raise GraphValidationError(
                f"Output '{name}' refers to '{source.name}', which is not in stack '{self.name}'"
            )
        if name in self._outputs:
            raise GraphValidationError(f"Duplicate output '{name}'")
        output = StackOutput(name=name, source=source.name, attribute=attribute, description=description)
        self._outputs[name] = output
        return output

    def build(self) -> StackGraph:
        return StackGraph(
            name=self.name,
            network=self.network,
            nodes=tuple(self._nodes.values()),
            outputs=tuple(self._outputs.values()),
        )
