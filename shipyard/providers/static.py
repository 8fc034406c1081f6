"""
Static network lookup for offline synthesis and tests.
"""

from shipyard.core.network import NetworkRef
from shipyard.errors import ExternalLookupFailure
from shipyard.providers.base import NetworkLookup


class StaticNetworkLookup(NetworkLookup):
    """
    Returns a fixed network without calling AWS.

    Example:
        lookup = StaticNetworkLookup(
            vpc_id="vpc-0abc",
            subnet_ids=["subnet-a", "subnet-b"],
        )
        graph = PipelineAssembly(config, lookup).build()
    """

    def __init__(
        self,
        vpc_id: str,
        subnet_ids: list[str],
        public_subnet_ids: list[str] | None = None,
        region: str | None = None,
    ):
        self.vpc_id = vpc_id
        self.subnet_ids = tuple(subnet_ids)
        # Default VPC subnets are all public
        self.public_subnet_ids = tuple(
            public_subnet_ids if public_subnet_ids is not None else subnet_ids
        )
        self.region = region

    def resolve(self, is_default: bool = True, vpc_id: str | None = None) -> NetworkRef:
        if vpc_id is not None and vpc_id != self.vpc_id:
            raise ExternalLookupFailure(f"VPC not found: {vpc_id}")

        return NetworkRef(
            vpc_id=self.vpc_id,
            subnet_ids=self.subnet_ids,
            public_subnet_ids=self.public_subnet_ids,
            is_default=is_default and vpc_id is None,
            region=self.region,
        )

    def get_provider_name(self) -> str:
        return "static"
