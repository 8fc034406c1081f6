"""
Tests for network lookups.
"""

import boto3
import pytest
from botocore.stub import Stubber

from shipyard.config import AwsConfig
from shipyard.errors import ExternalLookupFailure
from shipyard.providers import AWSNetworkLookup, StaticNetworkLookup


@pytest.fixture
def ec2_client():
    session = boto3.Session(
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    return session.client("ec2")


DEFAULT_VPC_FILTER = {"Filters": [{"Name": "is-default", "Values": ["true"]}]}


def _subnet(subnet_id, zone, public):
    return {
        "SubnetId": subnet_id,
        "VpcId": "vpc-default",
        "AvailabilityZone": zone,
        "MapPublicIpOnLaunch": public,
    }


class TestStaticNetworkLookup:
    """Tests for StaticNetworkLookup."""

    def test_resolve(self, network_lookup):
        network = network_lookup.resolve()

        assert network.vpc_id == "vpc-0abc"
        assert network.subnet_ids == ("subnet-a", "subnet-b")
        assert network.public_subnet_ids == ("subnet-a", "subnet-b")
        assert network.is_default is True

    def test_resolve_is_stable(self, network_lookup):
        assert network_lookup.resolve() == network_lookup.resolve()

    def test_unknown_vpc(self, network_lookup):
        with pytest.raises(ExternalLookupFailure):
            network_lookup.resolve(vpc_id="vpc-other")

    def test_explicit_public_subnets(self):
        lookup = StaticNetworkLookup("vpc-1", ["a", "b"], public_subnet_ids=["b"])

        assert lookup.resolve().public_subnet_ids == ("b",)
        assert lookup.get_provider_name() == "static"


class TestAWSNetworkLookup:
    """Tests for AWSNetworkLookup against a stubbed EC2 client."""

    def test_default_vpc(self, ec2_client):
        """Test resolving the default VPC and sorting its subnets."""
        stubber = Stubber(ec2_client)
        stubber.add_response(
            "describe_vpcs",
            {"Vpcs": [{"VpcId": "vpc-default", "IsDefault": True}]},
            DEFAULT_VPC_FILTER,
        )
        stubber.add_response(
            "describe_subnets",
            {"Subnets": [
                _subnet("subnet-2", "us-east-1b", True),
                _subnet("subnet-1", "us-east-1a", True),
                _subnet("subnet-3", "us-east-1c", False),
            ]},
            {"Filters": [{"Name": "vpc-id", "Values": ["vpc-default"]}]},
        )

        with stubber:
            network = AWSNetworkLookup(client=ec2_client).resolve()

        assert network.vpc_id == "vpc-default"
        assert network.subnet_ids == ("subnet-1", "subnet-2", "subnet-3")
        assert network.public_subnet_ids == ("subnet-1", "subnet-2")
        assert network.is_default is True
        assert network.region == "us-east-1"
        stubber.assert_no_pending_responses()

    def test_explicit_vpc(self, ec2_client):
        stubber = Stubber(ec2_client)
        stubber.add_response(
            "describe_vpcs",
            {"Vpcs": [{"VpcId": "vpc-123", "IsDefault": False}]},
            {"Filters": [{"Name": "vpc-id", "Values": ["vpc-123"]}]},
        )
        stubber.add_response(
            "describe_subnets",
            {"Subnets": [_subnet("subnet-1", "us-east-1a", False)]},
            {"Filters": [{"Name": "vpc-id", "Values": ["vpc-123"]}]},
        )

        with stubber:
            network = AWSNetworkLookup(client=ec2_client).resolve(vpc_id="vpc-123")

        assert network.is_default is False
        assert network.public_subnet_ids == ()

    def test_no_default_vpc(self, ec2_client):
        stubber = Stubber(ec2_client)
        stubber.add_response("describe_vpcs", {"Vpcs": []}, DEFAULT_VPC_FILTER)

        with stubber, pytest.raises(ExternalLookupFailure, match="default VPC"):
            AWSNetworkLookup(client=ec2_client).resolve()

    def test_vpc_without_subnets(self, ec2_client):
        stubber = Stubber(ec2_client)
        stubber.add_response(
            "describe_vpcs",
            {"Vpcs": [{"VpcId": "vpc-default", "IsDefault": True}]},
            DEFAULT_VPC_FILTER,
        )
        stubber.add_response(
            "describe_subnets",
            {"Subnets": []},
            {"Filters": [{"Name": "vpc-id", "Values": ["vpc-default"]}]},
        )

        with stubber, pytest.raises(ExternalLookupFailure, match="no subnets"):
            AWSNetworkLookup(client=ec2_client).resolve()

    def test_client_error_wrapped(self, ec2_client):
        """Test that API failures surface as ExternalLookupFailure."""
        stubber = Stubber(ec2_client)
        stubber.add_client_error(
            "describe_vpcs",
            service_error_code="UnauthorizedOperation",
            service_message="You are not authorized to perform this operation.",
        )

        with stubber, pytest.raises(ExternalLookupFailure) as exc_info:
            AWSNetworkLookup(client=ec2_client).resolve()

        assert "UnauthorizedOperation" in str(exc_info.value)

    def test_from_config(self):
        lookup = AWSNetworkLookup.from_config(AwsConfig(region="eu-west-1", profile="ops"))

        assert lookup.region == "eu-west-1"
        assert lookup.profile == "ops"
        assert lookup.get_provider_name() == "aws"
