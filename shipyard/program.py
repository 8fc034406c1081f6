"""
Pulumi program entry point.

Selects which assemblies to materialize from Pulumi stack configuration,
builds their graphs and hands them to the compiler:

    pulumi config set shipyard:configFile shipyard.yaml
    pulumi config set --path 'shipyard:assemblies[0]' instance
    pulumi up
"""

import logging

import pulumi

from shipyard.assemblies import create_assemblies
from shipyard.compilation import CompiledStack, PulumiCompiler
from shipyard.config import ShipyardConfig, load_config
from shipyard.providers import AWSNetworkLookup, NetworkLookup

logger = logging.getLogger(__name__)


def load_program_config(pulumi_config: pulumi.Config) -> ShipyardConfig:
    """
    Read shipyard configuration for the current Pulumi stack.

    ``shipyard:configFile`` points at a YAML file; otherwise the structured
    ``shipyard:settings`` object is used, falling back to defaults.
    """
    config_file = pulumi_config.get("configFile")
    if config_file:
        return load_config(config_file)
    return ShipyardConfig.from_dict(pulumi_config.get_object("settings"))


def run(
    config: ShipyardConfig | None = None,
    network: NetworkLookup | None = None,
) -> list[CompiledStack]:
    """
    Build and compile the selected assemblies, exporting their outputs.

    Args:
        config: Configuration (read from Pulumi config when omitted)
        network: Network lookup (boto3 against ``config.aws`` when omitted)

    Returns:
        One CompiledStack per materialized assembly
    """
    pulumi_config = pulumi.Config("shipyard")
    if config is None:
        config = load_program_config(pulumi_config)

    names = pulumi_config.get_object("assemblies") or config.assemblies
    network = network or AWSNetworkLookup.from_config(config.aws)
    compiler = PulumiCompiler(tags=config.aws.tags)
    logger.debug("Compiling %s with the %s compiler", ", ".join(names), compiler.get_provider_name())

    compiled_stacks = []
    for assembly in create_assemblies(config, network, names):
        graph = assembly.build()
        compiled = compiler.compile(graph)
        compiled.export_outputs()
        compiled_stacks.append(compiled)

    logger.info("Materialized assemblies: %s", ", ".join(names))
    return compiled_stacks
