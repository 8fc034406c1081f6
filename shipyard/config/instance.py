"""
Configuration for the standalone instance stack.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from shipyard.scripts import DEFAULT_USER_DATA


class InstanceConfig(BaseModel):
    """
    Standalone instance configuration.

    Example:
        InstanceConfig(
            user_data_path="./scripts/user-data.sh",
            user_data_causes_replacement=False,
        )
    """

    model_config = ConfigDict(extra="forbid")

    stack_name: str = Field(default="Ec2Stack", description="Stack name")
    instance_type: str = Field(default="t2.micro", description="EC2 instance type")
    image_generation: Literal["al2", "al2023"] = Field(
        default="al2", description="Amazon Linux generation"
    )
    user_data_path: Path = Field(
        default=DEFAULT_USER_DATA, description="Bootstrap script loaded at build time"
    )
    user_data_causes_replacement: bool = Field(
        default=True,
        description="Replace the instance when the bootstrap script changes",
    )
    ssh_port: int = Field(default=22, gt=0, lt=65536, description="SSH port")
    http_port: int = Field(default=80, gt=0, lt=65536, description="HTTP port")
    subnet_type: Literal["public", "all"] = Field(
        default="public", description="Subnets the instance may be placed in"
    )
