from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple, Sequence


class ActionKind(str, Enum):
    """Closed vocabulary of node and action kinds found in graph documents."""

    CLICK = "click"
    FILL = "fill"
    FILL_DATE = "fill_date"
    SELECT = "select"
    MATCH_SELECT = "match_select"
    CHECK = "check"
    FIELDSET_CHECK = "fieldset_check"
    GOTO = "goto"
    GET = "get"
    QA = "qa"
    PAUSE = "pause"
    UPLOAD = "upload"
    WAIT = "wait"
    KEYBOARD = "keyboard"
    BATCH_CLICK = "batch_click"
    FINALIZE = "finalize"
    # structural kinds, consumed by the linearizer and never emitted
    BRANCH = "branch"
    GROUP = "group"

    @classmethod
    def _missing_(cls, value: object) -> "ActionKind | None":
        aliases = {
            "lmia_finalize": cls.FINALIZE,
            "navigate": cls.GOTO,
            "read": cls.GET,
            "group_checkbox": cls.FIELDSET_CHECK,
        }
        if isinstance(value, str):
            return aliases.get(value.lower())
        return None

    @property
    def is_structural(self) -> bool:
        return self in (ActionKind.BRANCH, ActionKind.GROUP)


# Kinds that carry out their effect without a data value.
VALUE_FREE_KINDS: frozenset[ActionKind] = frozenset(
    {
        ActionKind.CHECK,
        ActionKind.CLICK,
        ActionKind.GET,
        ActionKind.PAUSE,
        ActionKind.FINALIZE,
        ActionKind.GOTO,
        ActionKind.WAIT,
        ActionKind.BATCH_CLICK,
    }
)


@dataclass(frozen=True)
class Transition:
    """Labeled edge between two nodes of the same graph."""

    source: int
    target: int
    label: str | None = None

    def as_triple(self) -> list[Any]:
        return [self.source, self.target, self.label]

    def __str__(self) -> str:
        if self.label:
            return f"({self.source} --> {self.label} --> {self.target})"
        return f"({self.source} --> {self.target})"


@dataclass
class Node:
    """
    One step of a workflow graph.

    ``data`` is either a key for the data source (a string) or a literal
    value. ``option`` carries formatting modifiers and, for group nodes, the
    name of the loop exit node. ``fallback`` names the node an optional
    node jumps to when its value is missing and no exit matches; without
    one the first exit is taken.
    """

    id: int
    name: str | None = None
    description: str | None = None
    data: Any = None
    selector: str | None = None
    option: str | None = None
    action: ActionKind | None = None
    is_entrance: bool = False
    is_optional: bool = False
    skip: bool = False
    fallback: str | None = None
    transitions: list[Transition] = field(default_factory=list)

    def option_tags(self) -> frozenset[str]:
        return option_tags(self.option)


def option_tags(option: str | None) -> frozenset[str]:
    """Split an option string such as ``"label,post_pause"`` into tags."""
    if not option:
        return frozenset()
    normalized = option.replace("|", ",")
    return frozenset(tag.strip() for tag in normalized.split(",") if tag.strip())


class Action(NamedTuple):
    """Concrete step produced by the linearizer and consumed once by the engine."""

    name: str | None
    kind: ActionKind
    selector: str | None
    option: str | None
    value: Any


InvalidField = tuple[str | None, Any]


@dataclass(frozen=True)
class LinearizationResult:
    actions: list[Action] = field(default_factory=list)
    invalid_fields: list[InvalidField] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.invalid_fields


@dataclass(frozen=True)
class Jump:
    """Control-flow directive returned by a read action."""

    target: str


@dataclass
class ExecutionContext:
    """Per-run values captured by read actions. Never persisted."""

    values: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.values[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification handed to the caller-supplied sink."""

    progress: int
    message: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"progress": self.progress, "message": dict(self.message)}


@dataclass(frozen=True)
class RunContext:
    """
    Per-run context for form fills and campaigns.

    The log directory is an abstract path; infra decides how it maps
    to the real filesystem.
    """

    run_id: str
    is_debug: bool = False
    log_directory: str | None = None


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration loaded from config.json."""

    headless: bool = True
    timeout_seconds: int = 30
    debug_mode: bool = False
    screenshot_dir: str = "logs"
    finalize_base_url: str = "https://tfwp.lmia.esdc.gc.ca"
    s3_bucket: str | None = None
    s3_profile: str | None = None


@dataclass(frozen=True)
class FormRunResult:
    """Outcome of one form fill as reported to the UI layer."""

    success: bool
    message: str
    timestamp: datetime
    summary_url: str | None = None
    invalid_fields: Sequence[InvalidField] = field(default_factory=tuple)
    error: str | None = None


# -- invitation campaign ------------------------------------------------------


@dataclass(frozen=True)
class SecurityAnswer:
    question: str
    answer: str


@dataclass(frozen=True)
class PortalCredentials:
    """Employer portal login. Stored and secured by the caller."""

    username: str | None
    password: str | None
    security_answers: Sequence[SecurityAnswer] = field(default_factory=tuple)

    def answer_for(self, question: str) -> str | None:
        for item in self.security_answers:
            if item.question == question:
                return item.answer
        return None


@dataclass(frozen=True)
class JobTarget:
    """A job posting to invite candidates for, with its minimum score."""

    job_id: str
    minimum_score: float = 0.0


@dataclass(frozen=True)
class CampaignConfig:
    credentials: PortalCredentials
    jobs: Sequence[JobTarget] = field(default_factory=tuple)
    items_per_page: int = 100


@dataclass(frozen=True)
class CandidateRow:
    """One row of the portal's match table. ``handle`` is opaque to the domain."""

    index: int
    score_text: str
    status_text: str
    handle: Any = None


class CampaignState(str, Enum):
    LOGGED_OUT = "logged_out"
    LOGGING_IN = "logging_in"
    NAVIGATING = "navigating"
    SCANNING = "scanning"
    INVITING = "inviting"
    LOGGING_OUT = "logging_out"
    DONE = "done"


class JobOutcomeStatus(str, Enum):
    INVITED = "invited"
    NO_CANDIDATES = "no_candidates"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class JobOutcome:
    job_id: str
    status: JobOutcomeStatus
    invited: int = 0
    error: str | None = None


@dataclass(frozen=True)
class CampaignSummary:
    """Aggregated outcome of a campaign across all jobs."""

    outcomes: Sequence[JobOutcome] = field(default_factory=tuple)
    errors: Sequence[str] = field(default_factory=tuple)
    log: Sequence[str] = field(default_factory=tuple)

    @property
    def total_invited(self) -> int:
        return sum(outcome.invited for outcome in self.outcomes)

    @property
    def successful(self) -> list[JobOutcome]:
        return [o for o in self.outcomes if o.status is JobOutcomeStatus.INVITED]

    @property
    def no_candidates(self) -> list[JobOutcome]:
        return [o for o in self.outcomes if o.status is JobOutcomeStatus.NO_CANDIDATES]

    @property
    def failed(self) -> list[JobOutcome]:
        return [
            o
            for o in self.outcomes
            if o.status in (JobOutcomeStatus.FAILED, JobOutcomeStatus.NOT_FOUND)
        ]

    @property
    def status(self) -> str:
        if not self.outcomes or len(self.failed) == len(self.outcomes):
            return "failure"
        if self.failed or self.errors:
            return "partial"
        return "success"


__all__ = [
    "ActionKind",
    "VALUE_FREE_KINDS",
    "Transition",
    "Node",
    "option_tags",
    "Action",
    "InvalidField",
    "LinearizationResult",
    "Jump",
    "ExecutionContext",
    "ProgressEvent",
    "RunContext",
    "AppConfig",
    "FormRunResult",
    "SecurityAnswer",
    "PortalCredentials",
    "JobTarget",
    "CampaignConfig",
    "CandidateRow",
    "CampaignState",
    "JobOutcomeStatus",
    "JobOutcome",
    "CampaignSummary",
]
