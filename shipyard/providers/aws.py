"""
AWS network lookup backed by boto3.
"""

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shipyard.config.provider import AwsConfig
from shipyard.core.network import NetworkRef
from shipyard.errors import ExternalLookupFailure
from shipyard.providers.base import NetworkLookup

logger = logging.getLogger(__name__)


class AWSNetworkLookup(NetworkLookup):
    """
    Resolves VPCs through the EC2 API.

    Example:
        # Default credentials chain
        lookup = AWSNetworkLookup(region="us-east-1")

        # From configuration
        lookup = AWSNetworkLookup.from_config(AwsConfig(region="eu-west-1", profile="prod"))

        network = lookup.resolve()
    """

    def __init__(
        self,
        region: str | None = None,
        profile: str | None = None,
        client: Any | None = None,
    ):
        """
        Initialize the lookup.

        Args:
            region: AWS region
            profile: AWS profile name (optional)
            client: Pre-built EC2 client (optional, overrides region/profile)
        """
        self.region = region or "us-east-1"
        self.profile = profile
        self._client = client

    @classmethod
    def from_config(cls, config: AwsConfig) -> 'AWSNetworkLookup':
        return cls(region=config.region, profile=config.profile)

    @property
    def client(self) -> Any:
        if self._client is None:
            session = boto3.Session(profile_name=self.profile, region_name=self.region)
            self._client = session.client("ec2")
        return self._client

    def resolve(self, is_default: bool = True, vpc_id: str | None = None) -> NetworkRef:
        if vpc_id is not None:
            filters = [{"Name": "vpc-id", "Values": [vpc_id]}]
        elif is_default:
            filters = [{"Name": "is-default", "Values": ["true"]}]
        else:
            raise ExternalLookupFailure("Either is_default or vpc_id is required")

        try:
            vpcs = self.client.describe_vpcs(Filters=filters)["Vpcs"]
            if not vpcs:
                target = vpc_id or "default VPC"
                raise ExternalLookupFailure(f"No VPC found for {target} in {self.region}")

            vpc = vpcs[0]
            subnets = self.client.describe_subnets(
                Filters=[{"Name": "vpc-id", "Values": [vpc["VpcId"]]}]
            )["Subnets"]
        except (BotoCoreError, ClientError) as e:
            raise ExternalLookupFailure(f"Network lookup failed in {self.region}: {e}") from e

        if not subnets:
            raise ExternalLookupFailure(f"VPC {vpc['VpcId']} has no subnets")

        subnets = sorted(subnets, key=lambda s: (s.get("AvailabilityZone", ""), s["SubnetId"]))
        network = NetworkRef(
            vpc_id=vpc["VpcId"],
            subnet_ids=tuple(s["SubnetId"] for s in subnets),
            public_subnet_ids=tuple(
                s["SubnetId"] for s in subnets if s.get("MapPublicIpOnLaunch")
            ),
            is_default=bool(vpc.get("IsDefault", False)),
            region=self.region,
        )

        logger.info(
            "Resolved VPC %s in %s (%d subnets, %d public)",
            network.vpc_id, self.region, len(network.subnet_ids), len(network.public_subnet_ids)
        )
        return network

    def get_provider_name(self) -> str:
        return "aws"
