"""
Configuration classes for shipyard stacks.

Static values (repository coordinates, ports, capacities, file paths) are
validated here before any graph is assembled.
"""

from shipyard.config.provider import AwsConfig
from shipyard.config.pipeline import (
    BuildConfig,
    DeployConfig,
    FleetConfig,
    LoadBalancerConfig,
    PipelineConfig,
    SourceConfig,
)
from shipyard.config.instance import InstanceConfig
from shipyard.config.settings import ShipyardConfig, load_config

__all__ = [
    "AwsConfig",
    "BuildConfig",
    "DeployConfig",
    "FleetConfig",
    "LoadBalancerConfig",
    "PipelineConfig",
    "SourceConfig",
    "InstanceConfig",
    "ShipyardConfig",
    "load_config",
]
