"""
Shipyard: declarative AWS stacks for a CI/CD pipeline and a single instance.

Shipyard builds an immutable graph of cloud resources from validated
configuration, then compiles that graph to Pulumi resources.

Core concepts:
- Node: A named, immutable resource declaration (bucket, role, fleet, ...)
- StackGraph: Nodes in dependency order plus the stack outputs
- Assembly: Builds a StackGraph from configuration and the target network
- Compiler: Registers a StackGraph's resources with Pulumi

Example:
    from shipyard import InstanceAssembly, InstanceConfig
    from shipyard.providers import AWSNetworkLookup

    assembly = InstanceAssembly(InstanceConfig(), AWSNetworkLookup())
    graph = assembly.build()

    for node in graph.nodes:
        print(node.name, node.node_type)

    # Inside a Pulumi program
    from shipyard.compilation import PulumiCompiler
    PulumiCompiler().compile(graph).export_outputs()
"""

from shipyard.errors import (
    ConfigurationMissing,
    ExternalLookupFailure,
    GraphValidationError,
    ShipyardError,
)
from shipyard.core.graph import GraphBuilder, StackGraph, StackOutput
from shipyard.config import (
    InstanceConfig,
    PipelineConfig,
    ShipyardConfig,
    load_config,
)
from shipyard.assemblies import (
    Assembly,
    InstanceAssembly,
    PipelineAssembly,
    create_assemblies,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationMissing",
    "ExternalLookupFailure",
    "GraphValidationError",
    "ShipyardError",
    "GraphBuilder",
    "StackGraph",
    "StackOutput",
    "InstanceConfig",
    "PipelineConfig",
    "ShipyardConfig",
    "load_config",
    "Assembly",
    "InstanceAssembly",
    "PipelineAssembly",
    "create_assemblies",
]
