"""
Compiler: turns a stack graph into orchestrator resources.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TypedDict

import pulumi

from shipyard.core.graph import StackGraph


class StackMetadata(TypedDict, total=False):
    """Metadata about stack compilation."""
    node_count: int
    resource_count: int
    vpc_id: str
    region: str


@dataclass
class CompiledStack:
    """
    A compiled stack with Pulumi resources.

    Contains actual Pulumi resource objects that have been registered
    with the Pulumi runtime, plus the stack outputs they expose.
    """

    stack_name: str
    resources: dict[str, pulumi.Resource]
    outputs: dict[str, pulumi.Output] = field(default_factory=dict)
    metadata: StackMetadata = field(default_factory=dict)

    def get_resource(self, name: str) -> pulumi.Resource | None:
        """Get a specific Pulumi resource by name."""
        return self.resources.get(name)

    def list_resources(self) -> list[str]:
        """List all resource names."""
        return list(self.resources.keys())

    def get_resources_by_type(self) -> dict[str, list[str]]:
        """Group resource names by Pulumi resource class."""
        by_type: dict[str, list[str]] = {}
        for name, resource in self.resources.items():
            by_type.setdefault(type(resource).__name__, []).append(name)
        return by_type

    def export_outputs(self) -> dict[str, Any]:
        """Register every stack output with the Pulumi engine."""
        for name, value in self.outputs.items():
            pulumi.export(name, value)
        return dict(self.outputs)


class Compiler(ABC):
    """
    Abstract compiler interface.

    Compilers take a validated StackGraph and register the corresponding
    resources with an orchestrator.
    """

    @abstractmethod
    def compile(self, graph: StackGraph) -> CompiledStack:
        """
        Compile a stack graph to infrastructure resources.

        Args:
            graph: The graph to compile

        Returns:
            CompiledStack with registered resources

        Raises:
            CompilationError: If compilation fails
        """
        pass


class CompilationError(Exception):
    """Raised when stack compilation fails."""
    pass
