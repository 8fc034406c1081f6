"""
Compute resources: images, roles, launch templates, fleets and instances.

These describe WHAT runs, not how the provider brings it up. Fleet and
instance bootstrap is handed to the provider as user data.
"""

from dataclasses import dataclass, replace
from enum import Enum

from shipyard.core.bootstrap import BootstrapScript
from shipyard.core.network import SecurityGroup, SubnetType
from shipyard.core.node import Node
from shipyard.core.storage import ArtifactStore
from shipyard.errors import GraphValidationError


class AmazonLinuxGeneration(str, Enum):
    AMAZON_LINUX_2 = "al2"
    AMAZON_LINUX_2023 = "al2023"


_SSM_PARAMETERS = {
    (AmazonLinuxGeneration.AMAZON_LINUX_2, "x86_64"): "amzn2-ami-hvm-x86_64-gp2",
    (AmazonLinuxGeneration.AMAZON_LINUX_2, "arm64"): "amzn2-ami-hvm-arm64-gp2",
    (AmazonLinuxGeneration.AMAZON_LINUX_2023, "x86_64"): "al2023-ami-kernel-default-x86_64",
    (AmazonLinuxGeneration.AMAZON_LINUX_2023, "arm64"): "al2023-ami-kernel-default-arm64",
}


@dataclass(frozen=True)
class MachineImage:
    """
    Latest Amazon Linux image of a generation.

    The image id is not pinned; it is resolved through the public SSM
    parameter at deploy time.
    """

    generation: AmazonLinuxGeneration = AmazonLinuxGeneration.AMAZON_LINUX_2023
    architecture: str = "x86_64"

    def __post_init__(self):
        if (self.generation, self.architecture) not in _SSM_PARAMETERS:
            raise GraphValidationError(
                f"Unsupported architecture for {self.generation.value}: {self.architecture}"
            )

    @property
    def ssm_parameter(self) -> str:
        suffix = _SSM_PARAMETERS[(self.generation, self.architecture)]
        return f"/aws/service/ami-amazon-linux-latest/{suffix}"


@dataclass(frozen=True)
class Role(Node):
    """
    An IAM role assumed by a service principal.

    Example:
        role = Role(
            "InstanceRole",
            service="ec2.amazonaws.com",
            managed_policies=("AmazonSSMManagedInstanceCore",),
        )
        role = role.grant_read(artifact_store)
    """

    node_type = "role"

    name: str
    service: str
    """Service principal allowed to assume the role"""

    managed_policies: tuple[str, ...] = ()
    """AWS managed policy names (e.g. 'AWSCodeDeployFullAccess')"""

    read_access: tuple[ArtifactStore, ...] = ()
    """Stores this role may read from"""

    description: str = ""

    def grant_read(self, store: ArtifactStore) -> 'Role':
        """Return a copy allowed to read objects from ``store``."""
        if store in self.read_access:
            return self
        return replace(self, read_access=self.read_access + (store,))


@dataclass(frozen=True)
class LaunchTemplate(Node):
    """How each instance of a fleet is launched."""

    node_type = "launch_template"

    name: str
    instance_type: str
    image: MachineImage
    bootstrap: BootstrapScript
    role: Role
    security_group: SecurityGroup


@dataclass(frozen=True)
class ComputeFleet(Node):
    """
    A scalable group of identical instances.

    Scale-to-zero is not supported: ``min_capacity`` is at least 1.
    ``max_capacity`` defaults to ``min_capacity``.
    """

    node_type = "compute_fleet"

    name: str
    launch_template: LaunchTemplate
    min_capacity: int = 1
    max_capacity: int | None = None

    def __post_init__(self):
        if self.min_capacity < 1:
            raise GraphValidationError(
                f"Fleet '{self.name}' needs min_capacity >= 1, got {self.min_capacity}"
            )
        if self.max_capacity is None:
            object.__setattr__(self, "max_capacity", self.min_capacity)
        elif self.max_capacity < self.min_capacity:
            raise GraphValidationError(
                f"Fleet '{self.name}' max_capacity ({self.max_capacity}) "
                f"is below min_capacity ({self.min_capacity})"
            )


@dataclass(frozen=True)
class Instance(Node):
    """
    A single standalone compute node.

    ``replace_on_bootstrap_change`` decides whether editing the bootstrap
    script replaces the instance or updates its user data in place.
    """

    node_type = "instance"

    name: str
    instance_type: str
    image: MachineImage
    role: Role
    security_group: SecurityGroup
    bootstrap: BootstrapScript
    replace_on_bootstrap_change: bool = True
    subnet_type: SubnetType = SubnetType.PUBLIC
