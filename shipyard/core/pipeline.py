"""
Pipeline: ordered stages of actions passing artifacts along.

An action reads artifacts produced by earlier stages and writes new ones.
The producer-before-consumer rule is checked every time a Pipeline is
constructed, so appending a stage that reads an artifact nobody has
produced yet fails immediately.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import ClassVar

from shipyard.core.delivery import BuildProject, DeploymentGroup
from shipyard.core.node import Artifact, Node, to_plain
from shipyard.core.storage import ArtifactStore
from shipyard.errors import GraphValidationError


class ActionKind(str, Enum):
    SOURCE_FETCH = "source-fetch"
    BUILD = "build"
    DEPLOY = "deploy"


@dataclass(frozen=True)
class Action:
    """
    A unit of work within a stage.

    Actions bind artifacts by name; they do not own them.
    """

    kind: ClassVar[ActionKind]

    name: str
    inputs: tuple[Artifact, ...]
    outputs: tuple[Artifact, ...]

    def to_dict(self) -> dict:
        data = to_plain(self)
        data["kind"] = self.kind.value
        return data


@dataclass(frozen=True)
class SourceFetchAction(Action):
    """Pull a branch of a GitHub repository."""

    kind = ActionKind.SOURCE_FETCH

    owner: str
    repo: str
    branch: str
    oauth_secret: str
    """Secrets Manager secret name holding the GitHub token (never the token)"""

    poll_for_changes: bool = True


@dataclass(frozen=True)
class BuildAction(Action):
    """Run a build project on the source artifact."""

    kind = ActionKind.BUILD

    project: BuildProject


@dataclass(frozen=True)
class DeployAction(Action):
    """Roll the build artifact out to a deployment group."""

    kind = ActionKind.DEPLOY

    deployment_group: DeploymentGroup


@dataclass(frozen=True)
class PipelineStage:
    """An ordered phase of a pipeline."""

    name: str
    actions: tuple[Action, ...]

    def __post_init__(self):
        if not self.actions:
            raise GraphValidationError(f"Stage '{self.name}' has no actions")

    def produced(self) -> list[Artifact]:
        return [artifact for action in self.actions for artifact in action.outputs]

    def consumed(self) -> list[Artifact]:
        return [artifact for action in self.actions for artifact in action.inputs]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "actions": [action.to_dict() for action in self.actions],
        }


@dataclass(frozen=True)
class Pipeline(Node):
    """
    A release pipeline.

    Example:
        pipeline = Pipeline("MyPipeline", artifact_store=store)
        pipeline = pipeline.add_stage(PipelineStage("Source", (source_action,)))
        pipeline = pipeline.add_stage(PipelineStage("Build", (build_action,)))
    """

    node_type = "pipeline"

    name: str
    artifact_store: ArtifactStore
    stages: tuple[PipelineStage, ...] = ()

    def __post_init__(self):
        self.validate()

    def add_stage(self, stage: PipelineStage) -> 'Pipeline':
        """Return a copy with ``stage`` appended after the existing stages."""
        return replace(self, stages=self.stages + (stage,))

    def validate(self) -> None:
        """
        Check stage names and artifact flow.

        Raises:
            GraphValidationError: If a stage name repeats, an artifact is
                produced twice, or an action reads an artifact no earlier
                stage produced
        """
        seen_stages: set[str] = set()
        produced: set[str] = set()

        for stage in self.stages:
            if stage.name in seen_stages:
                raise GraphValidationError(
                    f"Pipeline '{self.name}' has duplicate stage '{stage.name}'"
                )
            seen_stages.add(stage.name)

            for artifact in stage.consumed():
                if artifact.name not in produced:
                    raise GraphValidationError(
                        f"Stage '{stage.name}' consumes artifact '{artifact.name}' "
                        f"before any earlier stage produces it"
                    )

            for artifact in stage.produced():
                if artifact.name in produced:
                    raise GraphValidationError(
                        f"Artifact '{artifact.name}' is produced more than once"
                    )
                produced.add(artifact.name)

    def stage_names(self) -> list[str]:
        return [stage.name for stage in self.stages]

    def get_stage(self, name: str) -> PipelineStage | None:
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    def producer_of(self, artifact: Artifact) -> PipelineStage | None:
        """The stage whose actions write ``artifact``."""
        for stage in self.stages:
            if artifact in stage.produced():
                return stage
        return None

    def to_dict(self) -> dict:
        return {
            "type": self.node_type,
            "name": self.name,
            "artifact_store": self.artifact_store.name,
            "stages": [stage.to_dict() for stage in self.stages],
        }
