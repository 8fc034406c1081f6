"""
Exceptions raised while assembling a stack graph.

Failures during reconciliation (a bootstrap step, a deployment rollout)
belong to the orchestrator and never surface here.
"""


class ShipyardError(Exception):
    """Base class for all shipyard errors."""
    pass


class ConfigurationMissing(ShipyardError, FileNotFoundError):
    """
    A required static value is absent at build time.

    Covers missing credential references, repository coordinates and
    files (bootstrap scripts, configuration files). Subclasses
    FileNotFoundError so callers can treat a missing script like any
    other missing file.
    """
    pass


class ExternalLookupFailure(ShipyardError):
    """Resolving an external dependency (e.g. the default VPC) failed."""
    pass


class GraphValidationError(ShipyardError, ValueError):
    """A stack graph invariant does not hold."""
    pass
