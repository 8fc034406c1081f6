"""
Network lookups used by assemblies to place stacks.
"""

from shipyard.providers.base import NetworkLookup
from shipyard.providers.static import StaticNetworkLookup
from shipyard.providers.aws import AWSNetworkLookup

__all__ = [
    "NetworkLookup",
    "StaticNetworkLookup",
    "AWSNetworkLookup",
]
