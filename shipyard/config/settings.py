"""
Top-level shipyard configuration and YAML loading.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from shipyard.config.instance import InstanceConfig
from shipyard.config.pipeline import PipelineConfig
from shipyard.config.provider import AwsConfig
from shipyard.errors import ConfigurationMissing

AssemblyName = Literal["pipeline", "instance"]


class ShipyardConfig(BaseModel):
    """
    Everything needed to build both stacks.

    Example (shipyard.yaml):
        aws:
          region: eu-west-1
        pipeline:
          source:
            owner: octo-org
            repo: web-app
        instance:
          user_data_causes_replacement: false
        assemblies: [pipeline]
    """

    model_config = ConfigDict(extra="forbid")

    aws: AwsConfig = Field(default_factory=AwsConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    instance: InstanceConfig = Field(default_factory=InstanceConfig)
    assemblies: list[AssemblyName] = Field(
        default_factory=lambda: ["pipeline", "instance"],
        description="Assemblies materialized by default",
    )

    @field_validator("assemblies")
    @classmethod
    def _check_unique(cls, names: list[str]) -> list[str]:
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"assemblies listed more than once: {', '.join(duplicates)}")
        return names

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> 'ShipyardConfig':
        return cls.model_validate(data or {})


def load_config(path: str | Path) -> ShipyardConfig:
    """
    Load configuration from a YAML file.

    Raises:
        ConfigurationMissing: If the file does not exist
        ValueError: If the file is not a YAML mapping
        pydantic.ValidationError: If a value is invalid
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationMissing(f"Configuration file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")

    return ShipyardConfig.from_dict(data)
