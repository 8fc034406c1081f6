"""
Network resources: security groups and the resolved network they live in.
"""

from dataclasses import dataclass, replace
from enum import Enum

from shipyard.core.node import Node
from shipyard.errors import GraphValidationError

ANY_IPV4 = "0.0.0.0/0"


class Protocol(str, Enum):
    """IP protocol of an ingress rule."""

    TCP = "tcp"
    UDP = "udp"


class SubnetType(str, Enum):
    """Which subnets of the network a resource is placed in."""

    PUBLIC = "public"
    ALL = "all"


@dataclass(frozen=True)
class IngressRule:
    """
    A single inbound rule.

    Rules are ingress-only; outbound traffic is governed by the group's
    ``allow_all_outbound`` flag.
    """

    port: int
    """Port opened by this rule"""

    protocol: Protocol = Protocol.TCP
    """IP protocol"""

    source: str = ANY_IPV4
    """CIDR block allowed in"""

    description: str = ""
    """Human readable purpose"""

    def __post_init__(self):
        if not 0 < self.port < 65536:
            raise GraphValidationError(f"Invalid port for ingress rule: {self.port}")

    def as_tuple(self) -> tuple[str, int, str]:
        """(protocol, port, source) triple identifying this rule."""
        return (self.protocol.value, self.port, self.source)

    @classmethod
    def tcp(cls, port: int, description: str = "", source: str = ANY_IPV4) -> 'IngressRule':
        return cls(port=port, protocol=Protocol.TCP, source=source, description=description)


@dataclass(frozen=True)
class SecurityGroup(Node):
    """
    A named, additive set of ingress rules attached to one network target.

    Example:
        sg = SecurityGroup("InstanceSecurityGroup")
        sg = sg.with_ingress(IngressRule.tcp(22, "Allow SSH from anywhere"))
        sg = sg.with_ingress(IngressRule.tcp(80, "Allow HTTP from anywhere"))
    """

    node_type = "security_group"

    name: str
    rules: tuple[IngressRule, ...] = ()
    allow_all_outbound: bool = True
    description: str = ""

    def with_ingress(self, rule: IngressRule) -> 'SecurityGroup':
        """Return a copy with ``rule`` added. Re-adding an existing rule is a no-op."""
        if any(existing.as_tuple() == rule.as_tuple() for existing in self.rules):
            return self
        return replace(self, rules=self.rules + (rule,))

    def rule_set(self) -> set[tuple[str, int, str]]:
        return {rule.as_tuple() for rule in self.rules}

    def ports(self) -> list[int]:
        return [rule.port for rule in self.rules]

    def allows(self, port: int, protocol: Protocol = Protocol.TCP) -> bool:
        return any(r.port == port and r.protocol == protocol for r in self.rules)


@dataclass(frozen=True)
class NetworkRef:
    """
    The network a stack is placed in, as returned by a network lookup.

    Subnet ids are kept in a stable order so that two lookups of the same
    network produce equal references.
    """

    vpc_id: str
    """VPC identifier"""

    subnet_ids: tuple[str, ...]
    """All subnets of the VPC"""

    public_subnet_ids: tuple[str, ...] = ()
    """Subnets that assign public addresses on launch"""

    is_default: bool = True
    """Whether this is the account's default VPC"""

    region: str | None = None
    """Region the VPC was resolved in"""

    def subnets(self, subnet_type: SubnetType = SubnetType.ALL) -> tuple[str, ...]:
        """
        Subnet ids matching ``subnet_type``.

        Raises:
            GraphValidationError: If no subnet matches
        """
        selected = self.public_subnet_ids if subnet_type == SubnetType.PUBLIC else self.subnet_ids
        if not selected:
            raise GraphValidationError(
                f"VPC {self.vpc_id} has no {subnet_type.value} subnets"
            )
        return selected

    def to_dict(self) -> dict:
        return {
            "vpc_id": self.vpc_id,
            "subnet_ids": list(self.subnet_ids),
            "public_subnet_ids": list(self.public_subnet_ids),
            "is_default": self.is_default,
            "region": self.region,
        }
