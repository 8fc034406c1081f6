"""
InstanceAssembly: one standalone instance with its role and security group.
"""

import logging

from shipyard.assemblies.base import Assembly
from shipyard.config.instance import InstanceConfig
from shipyard.core import (
    AmazonLinuxGeneration,
    BootstrapScript,
    GraphBuilder,
    IngressRule,
    Instance,
    MachineImage,
    Role,
    SecurityGroup,
    StackGraph,
    SubnetType,
)
from shipyard.providers.base import NetworkLookup

logger = logging.getLogger(__name__)


class InstanceAssembly(Assembly):
    """
    Builds the standalone instance stack.

    The bootstrap script is read from ``config.user_data_path`` before
    anything else happens; a missing file fails the build. The stack
    exposes ``instanceId`` and ``instancePublicIp`` outputs, filled in by
    the orchestrator once the instance exists.
    """

    name = "instance"

    def __init__(self, config: InstanceConfig, network: NetworkLookup):
        super().__init__(network)
        self.config = config

    def build(self) -> StackGraph:
        bootstrap = BootstrapScript.from_file(self.config.user_data_path)
        logger.debug("Loaded bootstrap script from %s", bootstrap.source)

        network = self.network.resolve(is_default=True)
        subnet_type = SubnetType(self.config.subnet_type)
        # fail early if the network cannot host the instance
        network.subnets(subnet_type)

        builder = GraphBuilder(self.config.stack_name, network)

        role = builder.add(Role("ec2-role", service="ec2.amazonaws.com"))

        sg = SecurityGroup("sg", description="Standalone instance")
        sg = sg.with_ingress(IngressRule.tcp(self.config.ssh_port, "Allow SSH from anywhere"))
        sg = sg.with_ingress(IngressRule.tcp(self.config.http_port, "Allow HTTP from anywhere"))
        sg = builder.add(sg)

        instance = builder.add(Instance(
            "instance",
            instance_type=self.config.instance_type,
            image=MachineImage(AmazonLinuxGeneration(self.config.image_generation)),
            role=role,
            security_group=sg,
            bootstrap=bootstrap,
            replace_on_bootstrap_change=self.config.user_data_causes_replacement,
            subnet_type=subnet_type,
        ))

        builder.output("instanceId", instance, "id", "Instance identifier")
        builder.output("instancePublicIp", instance, "public_ip", "Instance public IPv4 address")

        graph = builder.build()
        logger.info("Built stack %s with %d nodes", graph.name, len(graph.nodes))
        return graph
