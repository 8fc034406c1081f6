"""
Delivery resources: the build project and the deployment group.

Both are managed services; shipyard only declares their settings.
"""

from dataclasses import dataclass
from enum import Enum

from shipyard.core.compute import ComputeFleet
from shipyard.core.node import Node


class DeploymentConfig(str, Enum):
    """How many fleet instances receive a revision at once."""

    ALL_AT_ONCE = "CodeDeployDefault.AllAtOnce"
    HALF_AT_A_TIME = "CodeDeployDefault.HalfAtATime"
    ONE_AT_A_TIME = "CodeDeployDefault.OneAtATime"


@dataclass(frozen=True)
class BuildProject(Node):
    """A build project fed by the pipeline's source artifact."""

    node_type = "build_project"

    name: str
    build_image: str = "aws/codebuild/standard:6.0"
    buildspec: str = "buildspec.yml"
    """Build manifest filename inside the source artifact"""

    compute_type: str = "BUILD_GENERAL1_SMALL"


@dataclass(frozen=True)
class DeploymentGroup(Node):
    """
    Where and how a revision is rolled out.

    Rollback is triggered only by a failed deployment.
    """

    node_type = "deployment_group"

    name: str
    application_name: str
    fleet: ComputeFleet
    deployment_config: DeploymentConfig = DeploymentConfig.ALL_AT_ONCE
    rollback_on_failure: bool = True
    install_agent: bool = True
    """Fleet bootstrap installs the deployment agent"""
