"""
Tests for configuration models and YAML loading.
"""

import pytest
from pydantic import ValidationError

from shipyard.config import (
    AwsConfig,
    FleetConfig,
    InstanceConfig,
    PipelineConfig,
    ShipyardConfig,
    load_config,
)
from shipyard.errors import ConfigurationMissing
from shipyard.scripts import DEFAULT_USER_DATA


class TestDefaults:
    """Tests for default configuration values."""

    def test_pipeline_defaults(self):
        config = PipelineConfig()

        assert config.stack_name == "CICDStack"
        assert config.source.branch == "main"
        assert config.source.oauth_secret_name == "github-token"
        assert config.fleet.instance_type == "t2.micro"
        assert config.fleet.min_capacity == 1
        assert config.fleet.app_port == 3000
        assert config.deploy.deployment_config == "ALL_AT_ONCE"

    def test_instance_defaults(self):
        config = InstanceConfig()

        assert config.stack_name == "Ec2Stack"
        assert config.user_data_path == DEFAULT_USER_DATA
        assert config.user_data_causes_replacement is True

    def test_both_assemblies_by_default(self):
        assert ShipyardConfig().assemblies == ["pipeline", "instance"]


class TestValidation:
    """Tests for rejected configuration."""

    def test_zero_min_capacity(self):
        with pytest.raises(ValidationError):
            FleetConfig(min_capacity=0)

    def test_max_below_min(self):
        with pytest.raises(ValidationError, match="max_capacity"):
            FleetConfig(min_capacity=3, max_capacity=2)

    def test_unknown_key(self):
        """Test that typos in configuration are reported."""
        with pytest.raises(ValidationError):
            ShipyardConfig.from_dict({"pipline": {}})

    def test_unknown_assembly(self):
        with pytest.raises(ValidationError):
            ShipyardConfig.from_dict({"assemblies": ["database"]})

    def test_invalid_deployment_config(self):
        with pytest.raises(ValidationError):
            PipelineConfig.model_validate({"deploy": {"deployment_config": "SOMETIMES"}})

    def test_duplicate_assembly(self):
        """Test that an assembly cannot be materialized twice."""
        with pytest.raises(ValidationError, match="more than once: instance"):
            ShipyardConfig.from_dict({"assemblies": ["instance", "pipeline", "instance"]})


class TestAwsConfig:
    def test_from_env(self, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-central-1")
        monkeypatch.setenv("AWS_PROFILE", "ops")

        config = AwsConfig.from_env()

        assert config.region == "eu-central-1"
        assert config.profile == "ops"

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "us-west-2")

        assert AwsConfig.from_env(region="ap-south-1").region == "ap-south-1"


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "shipyard.yaml"
        path.write_text(
            "aws:\n"
            "  region: eu-west-1\n"
            "pipeline:\n"
            "  source:\n"
            "    owner: octo-org\n"
            "    repo: web-app\n"
            "  fleet:\n"
            "    min_capacity: 2\n"
            "assemblies: [pipeline]\n"
        )

        config = load_config(path)

        assert config.aws.region == "eu-west-1"
        assert config.pipeline.source.owner == "octo-org"
        assert config.pipeline.fleet.min_capacity == 2
        assert config.assemblies == ["pipeline"]

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path) == ShipyardConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationMissing):
            load_config(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- pipeline\n- instance\n")

        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("pipeline: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("pipeline:\n  fleet:\n    min_capacity: 0\n")

        with pytest.raises(ValidationError):
            load_config(path)
