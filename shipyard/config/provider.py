"""
AWS account and region configuration.
"""

import os

from pydantic import BaseModel, ConfigDict, Field


class AwsConfig(BaseModel):
    """
    AWS Provider Configuration.

    Example:
        aws_config = AwsConfig(
            region="us-east-1",
            profile="production",
            account_id="123456789012",
            tags={"managed_by": "shipyard"}
        )
    """

    model_config = ConfigDict(extra="forbid")

    region: str = Field(default="us-east-1", description="AWS region")
    profile: str | None = Field(default=None, description="AWS profile name")
    account_id: str | None = Field(default=None, description="AWS account ID")
    tags: dict[str, str] = Field(
        default_factory=dict, description="Default tags for all resources"
    )

    @classmethod
    def from_env(cls, **overrides) -> 'AwsConfig':
        """Load AWS configuration from environment variables."""
        values = {
            "region": os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1",
            "profile": os.getenv("AWS_PROFILE"),
            "account_id": os.getenv("AWS_ACCOUNT_ID"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
