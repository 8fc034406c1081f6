"""
Core graph model: the nodes assemblies produce and compilers consume.
"""

from shipyard.core.node import Node, Artifact
from shipyard.core.network import (
    ANY_IPV4,
    IngressRule,
    NetworkRef,
    Protocol,
    SecurityGroup,
    SubnetType,
)
from shipyard.core.storage import ArtifactStore
from shipyard.core.bootstrap import BootstrapScript
from shipyard.core.compute import (
    AmazonLinuxGeneration,
    ComputeFleet,
    Instance,
    LaunchTemplate,
    MachineImage,
    Role,
)
from shipyard.core.delivery import BuildProject, DeploymentConfig, DeploymentGroup
from shipyard.core.balancing import Listener, LoadBalancer, TargetGroup
from shipyard.core.pipeline import (
    Action,
    ActionKind,
    BuildAction,
    DeployAction,
    Pipeline,
    PipelineStage,
    SourceFetchAction,
)
from shipyard.core.graph import GraphBuilder, StackGraph, StackOutput

__all__ = [
    "Node",
    "Artifact",
    "ANY_IPV4",
    "IngressRule",
    "NetworkRef",
    "Protocol",
    "SecurityGroup",
    "SubnetType",
    "ArtifactStore",
    "BootstrapScript",
    "AmazonLinuxGeneration",
    "ComputeFleet",
    "Instance",
    "LaunchTemplate",
    "MachineImage",
    "Role",
    "BuildProject",
    "DeploymentConfig",
    "DeploymentGroup",
    "Listener",
    "LoadBalancer",
    "TargetGroup",
    "Action",
    "ActionKind",
    "BuildAction",
    "DeployAction",
    "Pipeline",
    "PipelineStage",
    "SourceFetchAction",
    "GraphBuilder",
    "StackGraph",
    "StackOutput",
]
