"""
Load balancing: one listener forwarding to one target group.
"""

from dataclasses import dataclass

from shipyard.core.compute import ComputeFleet
from shipyard.core.node import Node


@dataclass(frozen=True)
class TargetGroup(Node):
    """The fleet port traffic is forwarded to."""

    node_type = "target_group"

    name: str
    port: int
    fleet: ComputeFleet
    protocol: str = "HTTP"


@dataclass(frozen=True)
class Listener:
    """
    A public port on the load balancer.

    ``open`` listeners accept traffic from any IPv4 address.
    """

    name: str
    port: int
    target_group: TargetGroup
    protocol: str = "HTTP"
    open: bool = True


@dataclass(frozen=True)
class LoadBalancer(Node):
    """An application load balancer in front of a fleet."""

    node_type = "load_balancer"

    name: str
    listeners: tuple[Listener, ...]
    internet_facing: bool = True

    def open_ports(self) -> list[int]:
        return [listener.port for listener in self.listeners if listener.open]
