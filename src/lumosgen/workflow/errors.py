"""Workflow engine errors."""

from lumosgen.ai.errors import LumosGenError


class WorkflowError(LumosGenError):
    """Base class for workflow errors."""


class WorkflowConfigError(WorkflowError):
    """Task graph is invalid (duplicate ids, unknown dependencies, cycles)."""


class WorkflowRunningError(WorkflowError):
    """A run was requested while another run is in progress."""
