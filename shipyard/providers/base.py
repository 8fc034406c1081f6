"""
Network lookup interface.

Resolving the network a stack is placed in is the only external call an
assembly makes. It is modeled as an explicit dependency passed to the
assembly rather than ambient context.
"""

from abc import ABC, abstractmethod

from shipyard.core.network import NetworkRef


class NetworkLookup(ABC):
    """
    Resolves a VPC and its subnets.

    Implementations raise ExternalLookupFailure when the network cannot be
    resolved. They never retry.
    """

    @abstractmethod
    def resolve(self, is_default: bool = True, vpc_id: str | None = None) -> NetworkRef:
        """
        Resolve a network.

        Args:
            is_default: Look up the account's default VPC
            vpc_id: Look up this VPC instead of the default one

        Returns:
            NetworkRef describing the VPC and its subnets

        Raises:
            ExternalLookupFailure: If the lookup fails
        """
        pass

    def get_provider_name(self) -> str:
        return "unknown"
