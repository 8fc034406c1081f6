"""
Shipyard CLI - build, inspect and deploy the pipeline and instance stacks.
"""

import json
import logging
import sys

import click
import yaml
from pydantic import ValidationError

from shipyard import __version__
from shipyard.assemblies import ASSEMBLIES, create_assemblies
from shipyard.cli.deploy import DeploymentCLI, DeploymentError
from shipyard.config import AwsConfig, ShipyardConfig, load_config
from shipyard.core.graph import StackGraph
from shipyard.errors import ShipyardError
from shipyard.providers import AWSNetworkLookup, NetworkLookup, StaticNetworkLookup

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """
    Shipyard - declare a CI/CD pipeline and a standalone instance on AWS.

    Graphs are built offline with `synth`/`validate` and deployed through
    Pulumi with `preview`/`up`/`destroy`.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _network_options(func):
    func = click.option(
        "--subnet",
        "subnets",
        multiple=True,
        help="Subnet id for offline synthesis (repeatable, requires --vpc-id)",
    )(func)
    func = click.option(
        "--vpc-id",
        help="Skip the AWS lookup and place stacks in this VPC",
    )(func)
    func = click.option(
        "--assembly",
        "-a",
        type=click.Choice([*ASSEMBLIES, "all"]),
        default=None,
        help="Assembly to build (defaults to the configured ones)",
    )(func)
    func = click.option(
        "--config",
        "-c",
        "config_file",
        type=click.Path(),
        help="YAML configuration file",
    )(func)
    return func


def _load(config_file: str | None) -> ShipyardConfig:
    if config_file:
        return load_config(config_file)
    return ShipyardConfig(aws=AwsConfig.from_env())


def _lookup(config: ShipyardConfig, vpc_id: str | None, subnets: tuple[str, ...]) -> NetworkLookup:
    if vpc_id:
        if not subnets:
            raise click.UsageError("--vpc-id requires at least one --subnet")
        return StaticNetworkLookup(vpc_id=vpc_id, subnet_ids=list(subnets), region=config.aws.region)
    if subnets:
        raise click.UsageError("--subnet requires --vpc-id")
    return AWSNetworkLookup.from_config(config.aws)


def _selected(config: ShipyardConfig, assembly: str | None) -> list[str]:
    if assembly is None:
        return list(config.assemblies)
    if assembly == "all":
        return list(ASSEMBLIES)
    return [assembly]


def _build_graphs(config_file, assembly, vpc_id, subnets) -> list[StackGraph]:
    config = _load(config_file)
    network = _lookup(config, vpc_id, subnets)
    names = _selected(config, assembly)
    logger.debug("Building %s with %s network lookup", ", ".join(names), network.get_provider_name())
    return [a.build() for a in create_assemblies(config, network, names)]


def _echo_text(graph: StackGraph) -> None:
    click.echo(f"\n Stack: {graph.name}")
    click.echo(f"{'=' * 50}")
    click.echo(f"  VPC: {graph.network.vpc_id} ({len(graph.network.subnet_ids)} subnets)")

    click.echo(f"\n Nodes: {len(graph.nodes)}")
    for node in graph.nodes:
        deps = graph.get_dependencies(node.name)
        suffix = f" <- {', '.join(deps)}" if deps else ""
        click.echo(f"  - {node.name} [{node.node_type}]{suffix}")

    if graph.outputs:
        click.echo("\n Outputs:")
        for output in graph.outputs:
            click.echo(f"  - {output.name}: {output.source}.{output.attribute}")


@cli.command()
@_network_options
@click.option("--format", "fmt", type=click.Choice(["text", "json", "yaml"]), default="text")
def synth(config_file, assembly, vpc_id, subnets, fmt):
    """
    Build stack graphs and print them without deploying.

    Example:
        shipyard synth -c shipyard.yaml
        shipyard synth -a instance --vpc-id vpc-123 --subnet subnet-a --format json
    """
    try:
        graphs = _build_graphs(config_file, assembly, vpc_id, subnets)
    except (ShipyardError, ValidationError, ValueError) as e:
        click.echo(f"✗ Synthesis failed: {e}", err=True)
        sys.exit(1)

    if fmt == "json":
        click.echo(json.dumps([g.to_dict() for g in graphs], indent=2))
    elif fmt == "yaml":
        click.echo(yaml.safe_dump([g.to_dict() for g in graphs], sort_keys=False))
    else:
        for graph in graphs:
            _echo_text(graph)


@cli.command()
@_network_options
def validate(config_file, assembly, vpc_id, subnets):
    """
    Validate configuration by building every selected stack graph.

    Example:
        shipyard validate -c shipyard.yaml
    """
    try:
        graphs = _build_graphs(config_file, assembly, vpc_id, subnets)
    except (ShipyardError, ValidationError, ValueError) as e:
        click.echo(f"✗ Validation failed: {e}", err=True)
        sys.exit(1)

    for graph in graphs:
        click.echo(f"✓ Stack '{graph.name}' is valid ({len(graph.nodes)} nodes)")


def _pulumi_options(func):
    func = click.option("--stack", "-s", help="Pulumi stack name")(func)
    func = click.option(
        "--project-dir",
        type=click.Path(exists=True, file_okay=False),
        default=".",
        help="Directory containing Pulumi.yaml",
    )(func)
    return func


def _require_yes(action: str, yes: bool) -> None:
    if not yes:
        raise click.UsageError(f"pulumi {action} cannot prompt here; pass --yes to confirm")


def _run_deployment(action: str, project_dir: str, stack: str | None, **kwargs) -> None:
    deployer = DeploymentCLI(project_dir)
    try:
        result = getattr(deployer, action)(stack, **kwargs)
    except DeploymentError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    if result.stdout:
        click.echo(result.stdout)
    click.echo(f"✓ pulumi {action} completed")


@cli.command()
@_pulumi_options
def preview(project_dir, stack):
    """Preview infrastructure changes with Pulumi."""
    _run_deployment("preview", project_dir, stack)


@cli.command()
@_pulumi_options
@click.option("--yes", "-y", is_flag=True, help="Confirm the update (required)")
def up(project_dir, stack, yes):
    """Deploy the selected stacks with Pulumi."""
    _require_yes("up", yes)
    _run_deployment("up", project_dir, stack, yes=yes)


@cli.command()
@_pulumi_options
@click.option("--yes", "-y", is_flag=True, help="Confirm the teardown (required)")
def destroy(project_dir, stack, yes):
    """Tear down deployed stacks with Pulumi."""
    _require_yes("destroy", yes)
    _run_deployment("destroy", project_dir, stack, yes=yes)


@cli.command()
@_pulumi_options
def outputs(project_dir, stack):
    """Print stack outputs (instance id and public address)."""
    try:
        values = DeploymentCLI(project_dir).stack_output(stack)
    except DeploymentError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    for key, value in values.items():
        click.echo(f"{key}: {value}")


if __name__ == "__main__":
    cli()
