"""
PipelineAssembly: GitHub → build → deploy pipeline and the fleet it targets.

Nodes, in creation order:

    ArtifactBucket, BuildProject,
    FleetSecurityGroup, InstanceRole, LaunchTemplate, AutoScalingGroup,
    <deployment group>, <pipeline>,
    AppFleet (target group), LoadBalancer
"""

import logging

from shipyard.assemblies.base import Assembly
from shipyard.config.pipeline import PipelineConfig
from shipyard.core import (
    AmazonLinuxGeneration,
    Artifact,
    ArtifactStore,
    BuildAction,
    BuildProject,
    ComputeFleet,
    DeployAction,
    DeploymentConfig,
    DeploymentGroup,
    GraphBuilder,
    IngressRule,
    LaunchTemplate,
    Listener,
    LoadBalancer,
    MachineImage,
    Pipeline,
    PipelineStage,
    Role,
    SecurityGroup,
    SourceFetchAction,
    StackGraph,
    SubnetType,
    TargetGroup,
)
from shipyard.errors import ConfigurationMissing
from shipyard.providers.base import NetworkLookup
from shipyard.scripts import fleet_bootstrap

logger = logging.getLogger(__name__)

STAGE_ORDER = ("Source", "Build", "Deploy")


class PipelineAssembly(Assembly):
    """
    Builds the CI/CD stack.

    Stages are always Source → Build → Deploy, one action each. The deploy
    action targets an auto-scaling fleet that sits behind an application
    load balancer.

    Example:
        config = PipelineConfig(
            source=SourceConfig(owner="octo-org", repo="web-app", branch="main")
        )
        graph = PipelineAssembly(config, AWSNetworkLookup()).build()
    """

    name = "pipeline"

    def __init__(
        self,
        config: PipelineConfig,
        network: NetworkLookup,
        region: str = "us-east-1",
    ):
        super().__init__(network)
        self.config = config
        self.region = region

    def build(self) -> StackGraph:
        self._check_required()

        network = self.network.resolve(is_default=True)
        # fail early if the network cannot host the load balancer
        network.subnets(SubnetType.PUBLIC if self.config.load_balancer.internet_facing else SubnetType.ALL)

        builder = GraphBuilder(self.config.stack_name, network)

        store = builder.add(ArtifactStore("ArtifactBucket", versioned=self.config.artifact_versioning))
        project = builder.add(self._build_project())

        fleet = self._build_fleet(builder, store)
        deployment_group = builder.add(self._deployment_group(fleet))

        pipeline = builder.add(self._pipeline(store, project, deployment_group))
        logger.debug("Pipeline %s stages: %s", pipeline.name, pipeline.stage_names())

        self._build_load_balancer(builder, fleet)

        graph = builder.build()
        logger.info(
            "Built stack %s with %d nodes (pipeline %s)",
            graph.name, len(graph.nodes), pipeline.name
        )
        return graph

    def _check_required(self) -> None:
        source = self.config.source
        missing = [
            key for key, value in (
                ("source.owner", source.owner),
                ("source.repo", source.repo),
                ("source.branch", source.branch),
                ("source.oauth_secret_name", source.oauth_secret_name),
            )
            if not value
        ]
        if missing:
            raise ConfigurationMissing(
                f"Pipeline stack '{self.config.stack_name}' is missing: {', '.join(missing)}"
            )

    def _build_project(self) -> BuildProject:
        build = self.config.build
        return BuildProject(
            build.project_name,
            build_image=build.build_image,
            buildspec=build.buildspec,
            compute_type=build.compute_type,
        )

    def _deployment_group(self, fleet: ComputeFleet) -> DeploymentGroup:
        deploy = self.config.deploy
        return DeploymentGroup(
            deploy.deployment_group_name,
            application_name=deploy.application_name,
            fleet=fleet,
            deployment_config=DeploymentConfig[deploy.deployment_config],
            rollback_on_failure=deploy.rollback_on_failure,
            install_agent=deploy.install_agent,
        )

    def _pipeline(
        self,
        store: ArtifactStore,
        project: BuildProject,
        deployment_group: DeploymentGroup,
    ) -> Pipeline:
        source_cfg = self.config.source
        source_output = Artifact("SourceOutput")
        build_output = Artifact("BuildOutput")

        source_action = SourceFetchAction(
            name=source_cfg.action_name,
            inputs=(),
            outputs=(source_output,),
            owner=source_cfg.owner,
            repo=source_cfg.repo,
            branch=source_cfg.branch,
            oauth_secret=source_cfg.oauth_secret_name,
            poll_for_changes=source_cfg.poll_for_changes,
        )
        build_action = BuildAction(
            name=self.config.build.action_name,
            inputs=(source_output,),
            outputs=(build_output,),
            project=project,
        )
        deploy_action = DeployAction(
            name=self.config.deploy.action_name,
            inputs=(build_output,),
            outputs=(),
            deployment_group=deployment_group,
        )

        pipeline = Pipeline(self.config.pipeline_name, artifact_store=store)
        for stage_name, action in zip(STAGE_ORDER, (source_action, build_action, deploy_action)):
            pipeline = pipeline.add_stage(PipelineStage(stage_name, (action,)))
        return pipeline

    def _build_fleet(self, builder: GraphBuilder, store: ArtifactStore) -> ComputeFleet:
        fleet_cfg = self.config.fleet

        sg = SecurityGroup("FleetSecurityGroup", description="Fleet instances")
        sg = sg.with_ingress(IngressRule.tcp(fleet_cfg.ssh_port, "Allow SSH from anywhere"))
        sg = sg.with_ingress(IngressRule.tcp(fleet_cfg.app_port, "Allow HTTP from anywhere"))
        sg = sg.with_ingress(IngressRule.tcp(fleet_cfg.http_port, "Allow HTTP from anywhere"))
        sg = builder.add(sg)

        role = Role(
            "InstanceRole",
            service="ec2.amazonaws.com",
            managed_policies=tuple(fleet_cfg.managed_policies),
            description="This is a role for my instance",
        )
        role = builder.add(role.grant_read(store))

        bootstrap = fleet_bootstrap(
            region=self.region,
            install_agent=self.config.deploy.install_agent,
        )
        template = builder.add(LaunchTemplate(
            "LaunchTemplate",
            instance_type=fleet_cfg.instance_type,
            image=MachineImage(AmazonLinuxGeneration(fleet_cfg.image_generation)),
            bootstrap=bootstrap,
            role=role,
            security_group=sg,
        ))

        return builder.add(ComputeFleet(
            "AutoScalingGroup",
            launch_template=template,
            min_capacity=fleet_cfg.min_capacity,
            max_capacity=fleet_cfg.max_capacity,
        ))

    def _build_load_balancer(self, builder: GraphBuilder, fleet: ComputeFleet) -> LoadBalancer:
        lb_cfg = self.config.load_balancer
        target_group = builder.add(TargetGroup(
            "AppFleet",
            port=self.config.fleet.app_port,
            fleet=fleet,
        ))
        return builder.add(LoadBalancer(
            "LoadBalancer",
            listeners=(
                Listener(
                    "Listener",
                    port=lb_cfg.listener_port,
                    target_group=target_group,
                    open=lb_cfg.open,
                ),
            ),
            internet_facing=lb_cfg.internet_facing,
        ))
