"""
Storage resources.
"""

from dataclasses import dataclass

from shipyard.core.node import Node


@dataclass(frozen=True)
class ArtifactStore(Node):
    """
    Durable object storage for pipeline hand-offs.

    Maps to an S3 bucket. Every artifact produced by a pipeline action is
    written here and read back by the next stage.
    """

    node_type = "artifact_store"

    name: str
    versioned: bool = True
    """Keep previous object versions"""
