"""
Assemblies: named units of configuration, each expanding into one stack graph.
"""

from shipyard.assemblies.base import Assembly
from shipyard.assemblies.instance import InstanceAssembly
from shipyard.assemblies.pipeline import PipelineAssembly
from shipyard.config.settings import ShipyardConfig
from shipyard.providers.base import NetworkLookup

ASSEMBLIES = ("pipeline", "instance")


def create_assemblies(
    config: ShipyardConfig,
    network: NetworkLookup,
    names: list[str] | None = None,
) -> list[Assembly]:
    """
    Instantiate the selected assemblies.

    The two assemblies are independent: they share no nodes, and each
    resolves its own network.

    Args:
        config: Shipyard configuration
        network: Network lookup handed to every assembly
        names: Assemblies to create (defaults to ``config.assemblies``)

    Returns:
        Assemblies in the order requested

    Raises:
        ValueError: If a name is unknown or selected twice
    """
    selected = list(names) if names is not None else list(config.assemblies)
    duplicates = sorted({name for name in selected if selected.count(name) > 1})
    if duplicates:
        raise ValueError(f"Assembly selected more than once: {', '.join(duplicates)}")

    assemblies: list[Assembly] = []
    for name in selected:
        if name == "pipeline":
            assemblies.append(PipelineAssembly(config.pipeline, network, region=config.aws.region))
        elif name == "instance":
            assemblies.append(InstanceAssembly(config.instance, network))
        else:
            raise ValueError(
                f"Unknown assembly '{name}'. Choose from: {', '.join(ASSEMBLIES)}"
            )
    return assemblies


__all__ = [
    "ASSEMBLIES",
    "Assembly",
    "InstanceAssembly",
    "PipelineAssembly",
    "create_assemblies",
]
