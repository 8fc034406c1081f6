"""
Pulumi Compiler: registers pulumi_aws resources for a stack graph.

Nodes are compiled in graph order, which is always a valid creation
order. Service roles the managed services need (pipeline, build project,
deployment group) and instance profiles are created here as
implementation details of the nodes that use them.
"""

import base64
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable

import pulumi
import pulumi_aws as aws

from shipyard.compilation.compiler import CompilationError, CompiledStack, Compiler
from shipyard.core import (
    ANY_IPV4,
    Action,
    ArtifactStore,
    BuildAction,
    BuildProject,
    ComputeFleet,
    DeployAction,
    DeploymentGroup,
    Instance,
    LaunchTemplate,
    LoadBalancer,
    MachineImage,
    Node,
    Pipeline,
    Role,
    SecurityGroup,
    SourceFetchAction,
    StackGraph,
    SubnetType,
    TargetGroup,
)

logger = logging.getLogger(__name__)

POLICY_VERSION = "2012-10-17"


def _kebab(value: str) -> str:
    value = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", value)
    value = re.sub(r"(?<=[A-Z])(?=[A-Z][a-z])", "-", value)
    value = re.sub(r"[^A-Za-z0-9]+", "-", value)
    return value.strip("-").lower()


def _assume_role_policy(service: str) -> str:
    return json.dumps({
        "Version": POLICY_VERSION,
        "Statement": [{
            "Effect": "Allow",
            "Principal": {"Service": service},
            "Action": "sts:AssumeRole",
        }],
    })


def _managed_policy_arn(name: str) -> str:
    return f"arn:aws:iam::aws:policy/{name}"


@dataclass
class _Context:
    """Per-compilation bookkeeping."""

    graph: StackGraph
    tags: dict[str, str]
    resources: dict[str, pulumi.Resource] = field(default_factory=dict)
    primary: dict[str, pulumi.Resource] = field(default_factory=dict)
    """Main resource registered for each node name"""

    instance_profiles: dict[str, aws.iam.InstanceProfile] = field(default_factory=dict)
    service_roles: dict[str, aws.iam.Role] = field(default_factory=dict)
    applications: dict[str, aws.codedeploy.Application] = field(default_factory=dict)

    def name(self, *parts: str) -> str:
        return "-".join(_kebab(part) for part in (self.graph.name, *parts))

    def track(self, resource: pulumi.Resource, logical_name: str) -> pulumi.Resource:
        self.resources[logical_name] = resource
        return resource

    def node(self, node: Node) -> Any:
        return self.primary[node.name]


class PulumiCompiler(Compiler):
    """
    Compiles stack graphs to AWS resources via Pulumi.

    Must run inside a Pulumi program (``pulumi up`` / ``pulumi preview``)
    or under ``pulumi.runtime.set_mocks``.

    Example:
        graph = InstanceAssembly(config, lookup).build()
        compiled = PulumiCompiler(tags={"team": "web"}).compile(graph)
        compiled.export_outputs()
    """

    def __init__(self, tags: dict[str, str] | None = None):
        """
        Initialize Pulumi compiler.

        Args:
            tags: Tags applied to every taggable resource
        """
        self.tags = dict(tags or {})
        self._handlers: dict[type, Callable[[_Context, Any], pulumi.Resource]] = {
            ArtifactStore: self._compile_artifact_store,
            BuildProject: self._compile_build_project,
            SecurityGroup: self._compile_security_group,
            Role: self._compile_role,
            LaunchTemplate: self._compile_launch_template,
            ComputeFleet: self._compile_fleet,
            DeploymentGroup: self._compile_deployment_group,
            Pipeline: self._compile_pipeline,
            TargetGroup: self._compile_target_group,
            LoadBalancer: self._compile_load_balancer,
            Instance: self._compile_instance,
        }

    def get_provider_name(self) -> str:
        return "aws"

    def compile(self, graph: StackGraph) -> CompiledStack:
        try:
            ctx = _Context(graph=graph, tags={**self.tags, "shipyard:stack": graph.name})

            for node in graph.nodes:
                handler = self._handlers.get(type(node))
                if handler is None:
                    raise CompilationError(
                        f"No Pulumi mapping for node type '{type(node).__name__}'"
                    )
                ctx.primary[node.name] = handler(ctx, node)
                logger.debug("Compiled %s '%s'", node.node_type, node.name)

            outputs = {
                output.name: getattr(ctx.primary[output.source], output.attribute)
                for output in graph.outputs
            }

            logger.info("Compiled stack %s into %d resources", graph.name, len(ctx.resources))
            return CompiledStack(
                stack_name=graph.name,
                resources=ctx.resources,
                outputs=outputs,
                metadata={
                    "node_count": len(graph.nodes),
                    "resource_count": len(ctx.resources),
                    "vpc_id": graph.network.vpc_id,
                    "region": graph.network.region or "",
                },
            )

        except CompilationError:
            raise
        except Exception as e:
            raise CompilationError(f"Failed to compile stack '{graph.name}': {e}") from e

    def _compile_artifact_store(self, ctx: _Context, store: ArtifactStore) -> aws.s3.BucketV2:
        bucket_name = ctx.name(store.name)
        bucket = ctx.track(aws.s3.BucketV2(bucket_name, tags=ctx.tags), bucket_name)

        if store.versioned:
            versioning_name = f"{bucket_name}-versioning"
            ctx.track(
                aws.s3.BucketVersioningV2(
                    versioning_name,
                    bucket=bucket.id,
                    versioning_configuration=aws.s3.BucketVersioningV2VersioningConfigurationArgs(
                        status="Enabled",
                    ),
                ),
                versioning_name,
            )
        return bucket

    def _service_role(
        self,
        ctx: _Context,
        owner: str,
        service: str,
        managed_policies: tuple[str, ...] = (),
    ) -> aws.iam.Role:
        role_name = ctx.name(owner, "role")
        role = ctx.track(
            aws.iam.Role(role_name, assume_role_policy=_assume_role_policy(service), tags=ctx.tags),
            role_name,
        )
        for policy in managed_policies:
            attachment_name = f"{role_name}-{_kebab(policy)}"
            ctx.track(
                aws.iam.RolePolicyAttachment(
                    attachment_name,
                    role=role.name,
                    policy_arn=_managed_policy_arn(policy),
                ),
                attachment_name,
            )
        ctx.service_roles[owner] = role
        return role

    def _inline_policy(
        self,
        ctx: _Context,
        role: aws.iam.Role,
        logical_name: str,
        statements: pulumi.Input[list],
    ) -> aws.iam.RolePolicy:
        document = pulumi.Output.from_input(statements).apply(
            lambda s: json.dumps({"Version": POLICY_VERSION, "Statement": s})
        )
        return ctx.track(
            aws.iam.RolePolicy(logical_name, role=role.id, policy=document),
            logical_name,
        )

    def _bucket_read_statement(self, bucket: aws.s3.BucketV2) -> pulumi.Output:
        return bucket.arn.apply(lambda arn: {
            "Effect": "Allow",
            "Action": ["s3:GetObject*", "s3:GetBucket*", "s3:List*"],
            "Resource": [arn, f"{arn}/*"],
        })

    def _compile_role(self, ctx: _Context, role: Role) -> aws.iam.Role:
        role_name = ctx.name(role.name)
        resource = ctx.track(
            aws.iam.Role(
                role_name,
                assume_role_policy=_assume_role_policy(role.service),
                description=role.description or None,
                tags=ctx.tags,
            ),
            role_name,
        )

        for policy in role.managed_policies:
            attachment_name = f"{role_name}-{_kebab(policy)}"
            ctx.track(
                aws.iam.RolePolicyAttachment(
                    attachment_name,
                    role=resource.name,
                    policy_arn=_managed_policy_arn(policy),
                ),
                attachment_name,
            )

        if role.read_access:
            statements = pulumi.Output.all(
                *[self._bucket_read_statement(ctx.node(store)) for store in role.read_access]
            )
            self._inline_policy(ctx, resource, f"{role_name}-read", statements)

        return resource

    def _instance_profile(self, ctx: _Context, role: Role) -> aws.iam.InstanceProfile:
        if role.name not in ctx.instance_profiles:
            profile_name = ctx.name(role.name, "profile")
            ctx.instance_profiles[role.name] = ctx.track(
                aws.iam.InstanceProfile(profile_name, role=ctx.node(role).name, tags=ctx.tags),
                profile_name,
            )
        return ctx.instance_profiles[role.name]

    def _compile_security_group(self, ctx: _Context, sg: SecurityGroup) -> aws.ec2.SecurityGroup:
        sg_name = ctx.name(sg.name)
        ingress = [
            aws.ec2.SecurityGroupIngressArgs(
                protocol=rule.protocol.value,
                from_port=rule.port,
                to_port=rule.port,
                cidr_blocks=[rule.source],
                description=rule.description or None,
            )
            for rule in sg.rules
        ]
        return ctx.track(
            aws.ec2.SecurityGroup(
                sg_name,
                vpc_id=ctx.graph.network.vpc_id,
                description=sg.description or f"{ctx.graph.name}/{sg.name}",
                ingress=ingress,
                egress=self._egress(sg.allow_all_outbound),
                tags=ctx.tags,
            ),
            sg_name,
        )

    def _egress(self, allow_all: bool) -> list[aws.ec2.SecurityGroupEgressArgs]:
        if not allow_all:
            return []
        return [
            aws.ec2.SecurityGroupEgressArgs(
                protocol="-1",
                from_port=0,
                to_port=0,
                cidr_blocks=[ANY_IPV4],
                description="Allow all outbound traffic",
            )
        ]

    def _image_id(self, image: MachineImage) -> pulumi.Output[str]:
        return aws.ssm.get_parameter_output(name=image.ssm_parameter).value

    def _compile_launch_template(self, ctx: _Context, template: LaunchTemplate) -> aws.ec2.LaunchTemplate:
        template_name = ctx.name(template.name)
        profile = self._instance_profile(ctx, template.role)
        user_data = base64.b64encode(template.bootstrap.render().encode("utf-8")).decode("ascii")

        return ctx.track(
            aws.ec2.LaunchTemplate(
                template_name,
                image_id=self._image_id(template.image),
                instance_type=template.instance_type,
                user_data=user_data,
                iam_instance_profile=aws.ec2.LaunchTemplateIamInstanceProfileArgs(arn=profile.arn),
                vpc_security_group_ids=[ctx.node(template.security_group).id],
                tags=ctx.tags,
            ),
            template_name,
        )

    def _compile_fleet(self, ctx: _Context, fleet: ComputeFleet) -> aws.autoscaling.Group:
        fleet_name = ctx.name(fleet.name)
        return ctx.track(
            aws.autoscaling.Group(
                fleet_name,
                min_size=fleet.min_capacity,
                max_size=fleet.max_capacity,
                vpc_zone_identifiers=list(ctx.graph.network.subnet_ids),
                launch_template=aws.autoscaling.GroupLaunchTemplateArgs(
                    id=ctx.node(fleet.launch_template).id,
                    version="$Latest",
                ),
            ),
            fleet_name,
        )

    def _compile_build_project(self, ctx: _Context, project: BuildProject) -> aws.codebuild.Project:
        project_name = ctx.name(project.name)
        role = self._service_role(ctx, project.name, "codebuild.amazonaws.com")
        self._inline_policy(ctx, role, f"{project_name}-logs", [{
            "Effect": "Allow",
            "Action": ["logs:CreateLogGroup", "logs:CreateLogStream", "logs:PutLogEvents"],
            "Resource": "*",
        }])

        return ctx.track(
            aws.codebuild.Project(
                project_name,
                service_role=role.arn,
                source=aws.codebuild.ProjectSourceArgs(
                    type="CODEPIPELINE",
                    buildspec=project.buildspec,
                ),
                artifacts=aws.codebuild.ProjectArtifactsArgs(type="CODEPIPELINE"),
                environment=aws.codebuild.ProjectEnvironmentArgs(
                    compute_type=project.compute_type,
                    image=project.build_image,
                    type="LINUX_CONTAINER",
                ),
                tags=ctx.tags,
            ),
            project_name,
        )

    def _compile_deployment_group(
        self,
        ctx: _Context,
        group: DeploymentGroup
    ) -> aws.codedeploy.DeploymentGroup:
        if group.application_name not in ctx.applications:
            app_name = ctx.name(group.application_name)
            ctx.applications[group.application_name] = ctx.track(
                aws.codedeploy.Application(
                    app_name,
                    name=group.application_name,
                    compute_platform="Server",
                    tags=ctx.tags,
                ),
                app_name,
            )
        application = ctx.applications[group.application_name]

        role = self._service_role(
            ctx, group.name, "codedeploy.amazonaws.com",
            managed_policies=("service-role/AWSCodeDeployRole",),
        )

        rollback = None
        if group.rollback_on_failure:
            rollback = aws.codedeploy.DeploymentGroupAutoRollbackConfigurationArgs(
                enabled=True,
                events=["DEPLOYMENT_FAILURE"],
            )

        group_name = ctx.name(group.name)
        return ctx.track(
            aws.codedeploy.DeploymentGroup(
                group_name,
                app_name=application.name,
                deployment_group_name=group.name,
                service_role_arn=role.arn,
                deployment_config_name=group.deployment_config.value,
                autoscaling_groups=[ctx.node(group.fleet).name],
                auto_rollback_configuration=rollback,
                tags=ctx.tags,
            ),
            group_name,
        )

    def _compile_pipeline(self, ctx: _Context, pipeline: Pipeline) -> aws.codepipeline.Pipeline:
        bucket = ctx.node(pipeline.artifact_store)
        role = self._service_role(ctx, pipeline.name, "codepipeline.amazonaws.com")

        bucket_access = bucket.arn.apply(lambda arn: {
            "Effect": "Allow",
            "Action": ["s3:GetObject*", "s3:GetBucket*", "s3:List*", "s3:PutObject*", "s3:DeleteObject*"],
            "Resource": [arn, f"{arn}/*"],
        })
        self._inline_policy(ctx, role, f"{ctx.name(pipeline.name)}-policy", pulumi.Output.all(
            bucket_access,
            {
                "Effect": "Allow",
                "Action": ["codebuild:BatchGetBuilds", "codebuild:StartBuild"],
                "Resource": "*",
            },
            {
                "Effect": "Allow",
                "Action": [
                    "codedeploy:CreateDeployment",
                    "codedeploy:GetApplication",
                    "codedeploy:GetApplicationRevision",
                    "codedeploy:GetDeployment",
                    "codedeploy:GetDeploymentConfig",
                    "codedeploy:RegisterApplicationRevision",
                ],
                "Resource": "*",
            },
        ))

        stages = []
        for stage in pipeline.stages:
            actions = [self._pipeline_action(ctx, pipeline, action) for action in stage.actions]
            stages.append(aws.codepipeline.PipelineStageArgs(name=stage.name, actions=actions))

        pipeline_name = ctx.name(pipeline.name)
        return ctx.track(
            aws.codepipeline.Pipeline(
                pipeline_name,
                name=pipeline.name,
                role_arn=role.arn,
                artifact_stores=[
                    aws.codepipeline.PipelineArtifactStoreArgs(location=bucket.bucket, type="S3"),
                ],
                stages=stages,
                tags=ctx.tags,
            ),
            pipeline_name,
        )

    def _pipeline_action(
        self,
        ctx: _Context,
        pipeline: Pipeline,
        action: Action,
    ) -> aws.codepipeline.PipelineStageActionArgs:
        common = {
            "name": action.name,
            "version": "1",
            "input_artifacts": [artifact.name for artifact in action.inputs] or None,
            "output_artifacts": [artifact.name for artifact in action.outputs] or None,
        }

        if isinstance(action, SourceFetchAction):
            token = aws.secretsmanager.get_secret_version_output(
                secret_id=action.oauth_secret
            ).secret_string
            return aws.codepipeline.PipelineStageActionArgs(
                category="Source",
                owner="ThirdParty",
                provider="GitHub",
                configuration={
                    "Owner": action.owner,
                    "Repo": action.repo,
                    "Branch": action.branch,
                    "OAuthToken": pulumi.Output.secret(token),
                    "PollForSourceChanges": "true" if action.poll_for_changes else "false",
                },
                **common,
            )

        if isinstance(action, BuildAction):
            # build role needs the artifacts too
            bucket = ctx.node(pipeline.artifact_store)
            build_role = ctx.service_roles[action.project.name]
            self._inline_policy(
                ctx, build_role, f"{ctx.name(action.project.name)}-artifacts",
                bucket.arn.apply(lambda arn: [{
                    "Effect": "Allow",
                    "Action": ["s3:GetObject*", "s3:GetBucket*", "s3:List*", "s3:PutObject*"],
                    "Resource": [arn, f"{arn}/*"],
                }]),
            )
            return aws.codepipeline.PipelineStageActionArgs(
                category="Build",
                owner="AWS",
                provider="CodeBuild",
                configuration={"ProjectName": ctx.node(action.project).name},
                **common,
            )

        if isinstance(action, DeployAction):
            group = action.deployment_group
            return aws.codepipeline.PipelineStageActionArgs(
                category="Deploy",
                owner="AWS",
                provider="CodeDeploy",
                configuration={
                    "ApplicationName": ctx.applications[group.application_name].name,
                    "DeploymentGroupName": ctx.node(group).deployment_group_name,
                },
                **common,
            )

        raise CompilationError(f"Unsupported pipeline action: {type(action).__name__}")

    def _compile_target_group(self, ctx: _Context, target_group: TargetGroup) -> aws.lb.TargetGroup:
        tg_name = ctx.name(target_group.name)
        resource = ctx.track(
            aws.lb.TargetGroup(
                tg_name,
                port=target_group.port,
                protocol=target_group.protocol,
                vpc_id=ctx.graph.network.vpc_id,
                target_type="instance",
                tags=ctx.tags,
            ),
            tg_name,
        )

        attachment_name = f"{tg_name}-attachment"
        ctx.track(
            aws.autoscaling.Attachment(
                attachment_name,
                autoscaling_group_name=ctx.node(target_group.fleet).name,
                lb_target_group_arn=resource.arn,
            ),
            attachment_name,
        )
        return resource

    def _compile_load_balancer(self, ctx: _Context, lb: LoadBalancer) -> aws.lb.LoadBalancer:
        lb_name = ctx.name(lb.name)
        sg_name = f"{lb_name}-sg"
        sg = ctx.track(
            aws.ec2.SecurityGroup(
                sg_name,
                vpc_id=ctx.graph.network.vpc_id,
                description=f"{ctx.graph.name}/{lb.name}",
                ingress=[
                    aws.ec2.SecurityGroupIngressArgs(
                        protocol="tcp",
                        from_port=port,
                        to_port=port,
                        cidr_blocks=[ANY_IPV4],
                        description=f"Allow from anyone on port {port}",
                    )
                    for port in lb.open_ports()
                ],
                egress=self._egress(True),
                tags=ctx.tags,
            ),
            sg_name,
        )

        subnets = ctx.graph.network.subnets(SubnetType.PUBLIC if lb.internet_facing else SubnetType.ALL)
        resource = ctx.track(
            aws.lb.LoadBalancer(
                lb_name,
                internal=not lb.internet_facing,
                load_balancer_type="application",
                security_groups=[sg.id],
                subnets=list(subnets),
                tags=ctx.tags,
            ),
            lb_name,
        )

        for listener in lb.listeners:
            listener_name = f"{lb_name}-{_kebab(listener.name)}"
            ctx.track(
                aws.lb.Listener(
                    listener_name,
                    load_balancer_arn=resource.arn,
                    port=listener.port,
                    protocol=listener.protocol,
                    default_actions=[
                        aws.lb.ListenerDefaultActionArgs(
                            type="forward",
                            target_group_arn=ctx.node(listener.target_group).arn,
                        )
                    ],
                    tags=ctx.tags,
                ),
                listener_name,
            )
        return resource

    def _compile_instance(self, ctx: _Context, instance: Instance) -> aws.ec2.Instance:
        instance_name = ctx.name(instance.name)
        profile = self._instance_profile(ctx, instance.role)
        subnet_id = ctx.graph.network.subnets(instance.subnet_type)[0]

        return ctx.track(
            aws.ec2.Instance(
                instance_name,
                ami=self._image_id(instance.image),
                instance_type=instance.instance_type,
                subnet_id=subnet_id,
                vpc_security_group_ids=[ctx.node(instance.security_group).id],
                iam_instance_profile=profile.name,
                user_data=instance.bootstrap.render(),
                user_data_replace_on_change=instance.replace_on_bootstrap_change,
                tags={**ctx.tags, "Name": f"{ctx.graph.name}/{instance.name}"},
            ),
            instance_name,
        )
