"""
Assembly: a named unit of configuration that expands into one stack graph.
"""

from abc import ABC, abstractmethod

from shipyard.core.graph import StackGraph
from shipyard.providers.base import NetworkLookup


class Assembly(ABC):
    """
    Abstract assembly interface.

    ``build()`` is a single synchronous construction pass. Apart from the
    injected network lookup (and, for some assemblies, reading a local
    file) it performs no I/O, and calling it twice with the same inputs
    yields equal graphs.
    """

    name: str = "assembly"

    def __init__(self, network: NetworkLookup):
        self.network = network

    @abstractmethod
    def build(self) -> StackGraph:
        """
        Build the stack graph.

        Returns:
            StackGraph with every node linked

        Raises:
            ConfigurationMissing: If a required static value is absent
            ExternalLookupFailure: If the network cannot be resolved
        """
        pass
