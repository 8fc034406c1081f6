"""Shared test fixtures for shipyard."""

from pathlib import Path

import pytest

from shipyard.config import InstanceConfig, PipelineConfig, SourceConfig
from shipyard.providers import StaticNetworkLookup


@pytest.fixture
def network_lookup() -> StaticNetworkLookup:
    """A two-subnet default VPC that never calls AWS."""
    return StaticNetworkLookup(
        vpc_id="vpc-0abc",
        subnet_ids=["subnet-a", "subnet-b"],
        region="us-east-1",
    )


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    """Pipeline configuration with repository coordinates filled in."""
    return PipelineConfig(
        source=SourceConfig(owner="octo-org", repo="web-app", branch="main")
    )


@pytest.fixture
def user_data(tmp_path: Path) -> Path:
    """A minimal bootstrap script on disk."""
    path = tmp_path / "user-data.sh"
    path.write_text("#!/bin/bash\nsudo yum update -y\nsudo yum install -y git\n")
    return path


@pytest.fixture
def instance_config(user_data: Path) -> InstanceConfig:
    return InstanceConfig(user_data_path=user_data)
