"""
Domain layer package.

This package contains the workflow graph, the linearizer and the campaign
logic: pure business rules that are independent of any browser driver.
"""

from .errors import (  # noqa: F401
    ActionFailedError,
    CampaignError,
    ConfigurationError,
    FillerError,
    LinearizationError,
)
from .graph import FillerGraph, GraphCursor, advance  # noqa: F401
from .models import (  # noqa: F401
    Action,
    ActionKind,
    CampaignSummary,
    ExecutionContext,
    Jump,
    LinearizationResult,
    Node,
    ProgressEvent,
    RunContext,
    Transition,
)
from .ports import (  # noqa: F401
    ActionExecutorPort,
    ClockPort,
    IdGeneratorPort,
    JobPortalPort,
    LoggerPort,
)

__all__ = [
    # Graph
    "FillerGraph",
    "GraphCursor",
    "advance",
    # Models
    "Node",
    "Transition",
    "ActionKind",
    "Action",
    "LinearizationResult",
    "Jump",
    "ExecutionContext",
    "ProgressEvent",
    "RunContext",
    "CampaignSummary",
    # Errors
    "FillerError",
    "ConfigurationError",
    "LinearizationError",
    "ActionFailedError",
    "CampaignError",
    # Ports
    "ActionExecutorPort",
    "JobPortalPort",
    "ClockPort",
    "IdGeneratorPort",
    "LoggerPort",
]
