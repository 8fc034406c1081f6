"""CLI utilities for shipyard stacks."""

from shipyard.cli.deploy import DeploymentCLI, DeploymentError

__all__ = [
    "DeploymentCLI",
    "DeploymentError",
]
