"""
Configuration for the CI/CD pipeline stack.

Defaults reproduce a GitHub → CodeBuild → CodeDeploy pipeline deploying a
Node.js application to a single t2.micro fleet behind a public load
balancer.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SourceConfig(BaseModel):
    """
    Where the pipeline pulls source from.

    Example:
        SourceConfig(owner="octo-org", repo="web-app", branch="main")
    """

    model_config = ConfigDict(extra="forbid")

    owner: str | None = Field(default=None, description="GitHub repository owner")
    repo: str | None = Field(default=None, description="GitHub repository name")
    branch: str = Field(default="main", description="Branch to track")
    oauth_secret_name: str | None = Field(
        default="github-token",
        description="Secrets Manager secret holding the GitHub OAuth token",
    )
    action_name: str = Field(default="GitHub_Source", description="Source action name")
    poll_for_changes: bool = Field(
        default=True, description="Start the pipeline when the branch changes"
    )


class BuildConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    project_name: str = Field(default="BuildProject", description="Build project name")
    build_image: str = Field(
        default="aws/codebuild/standard:6.0", description="Build container image"
    )
    buildspec: str = Field(default="buildspec.yml", description="Build manifest filename")
    compute_type: str = Field(default="BUILD_GENERAL1_SMALL", description="Build compute size")
    action_name: str = Field(default="Build", description="Build action name")


class DeployConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    application_name: str = Field(default="MyApplication", description="Deployment application")
    deployment_group_name: str = Field(
        default="MyDeploymentGroup", description="Deployment group name"
    )
    deployment_config: Literal["ALL_AT_ONCE", "HALF_AT_A_TIME", "ONE_AT_A_TIME"] = Field(
        default="ALL_AT_ONCE", description="Rollout policy"
    )
    rollback_on_failure: bool = Field(
        default=True, description="Roll back automatically when a deployment fails"
    )
    install_agent: bool = Field(
        default=True, description="Install the deployment agent during fleet bootstrap"
    )
    action_name: str = Field(default="Deploy", description="Deploy action name")


class FleetConfig(BaseModel):
    """
    The instances the pipeline deploys to.

    ``min_capacity`` must be at least 1; scale-to-zero is not supported.
    """

    model_config = ConfigDict(extra="forbid")

    instance_type: str = Field(default="t2.micro", description="EC2 instance type")
    image_generation: Literal["al2", "al2023"] = Field(
        default="al2023", description="Amazon Linux generation"
    )
    min_capacity: int = Field(default=1, ge=1, description="Minimum number of instances")
    max_capacity: int | None = Field(
        default=None, ge=1, description="Maximum number of instances (defaults to min)"
    )
    app_port: int = Field(default=3000, gt=0, lt=65536, description="Application port")
    ssh_port: int = Field(default=22, gt=0, lt=65536, description="SSH port")
    http_port: int = Field(default=80, gt=0, lt=65536, description="HTTP port")
    managed_policies: list[str] = Field(
        default_factory=lambda: ["AmazonSSMManagedInstanceCore", "AWSCodeDeployFullAccess"],
        description="AWS managed policies attached to the instance role",
    )

    @model_validator(mode="after")
    def _check_capacity(self) -> 'FleetConfig':
        if self.max_capacity is not None and self.max_capacity < self.min_capacity:
            raise ValueError(
                f"max_capacity ({self.max_capacity}) must be >= min_capacity ({self.min_capacity})"
            )
        return self


class LoadBalancerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    listener_port: int = Field(default=80, gt=0, lt=65536, description="Public listener port")
    internet_facing: bool = Field(default=True, description="Expose the load balancer publicly")
    open: bool = Field(default=True, description="Accept traffic from any address")


class PipelineConfig(BaseModel):
    """
    Top-level configuration of the pipeline stack.

    Example:
        PipelineConfig(
            source=SourceConfig(owner="octo-org", repo="web-app"),
            fleet=FleetConfig(min_capacity=2),
        )
    """

    model_config = ConfigDict(extra="forbid")

    stack_name: str = Field(default="CICDStack", description="Stack name")
    pipeline_name: str = Field(default="MyPipeline", description="Pipeline name")
    artifact_versioning: bool = Field(
        default=True, description="Version objects in the artifact store"
    )
    source: SourceConfig = Field(default_factory=SourceConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    deploy: DeployConfig = Field(default_factory=DeployConfig)
    fleet: FleetConfig = Field(default_factory=FleetConfig)
    load_balancer: LoadBalancerConfig = Field(default_factory=LoadBalancerConfig)
