"""
Data models for ProwJob records.

These models describe a CI job request and the record of how it ran. They are
plain values: the orchestrator that schedules jobs, creates pods and reports
results reads and writes them, but none of that lives here.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ProwJobType(str, Enum):
    """Determines how a job is triggered."""

    PRESUBMIT = "presubmit"
    POSTSUBMIT = "postsubmit"
    PERIODIC = "periodic"
    BATCH = "batch"


class ProwJobAgent(str, Enum):
    """Selects the backend that executes a job."""

    KUBERNETES = "kubernetes"
    JENKINS = "jenkins"


class ProwJobState(str, Enum):
    """
    Where a job run is in its lifecycle.

    The executor moves jobs triggered -> pending -> one of the final states.
    That ordering is the executor's contract; this model does not enforce it.
    """

    TRIGGERED = "triggered"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    ABORTED = "aborted"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset(
    {
        ProwJobState.SUCCESS,
        ProwJobState.FAILURE,
        ProwJobState.ABORTED,
        ProwJobState.ERROR,
    }
)


@dataclass(frozen=True)
class Pull:
    """A pull request to merge on top of the base ref."""

    number: int = 0
    author: str = ""
    sha: str = ""


@dataclass(frozen=True)
class Refs:
    """
    A base repository position plus the pull requests to overlay on it.

    Pulls are merged in the order they are stored, so that order is kept
    wherever refs are rendered or serialized.
    """

    org: str = ""
    repo: str = ""
    base_ref: str = ""
    base_sha: str = ""
    pulls: tuple[Pull, ...] = ()

    def __str__(self) -> str:
        return render_refs(self)


@dataclass(frozen=True)
class ProwJobSpec:
    """
    What to run.

    run_after_success holds the specs to trigger once this one succeeds. Each
    child belongs to exactly one parent, so the whole thing is a tree.

    pod_spec is an opaque mapping carried by reference; callers must not edit
    it in place. Because of it, specs compare by value but are not hashable.
    """

    __hash__ = None  # type: ignore[assignment]

    type: ProwJobType | None = None
    agent: ProwJobAgent | None = None
    job: str = ""
    refs: Refs | None = None  # Periodic jobs may have none

    report: bool = False
    context: str = ""
    rerun_command: str = ""
    max_concurrency: int = 0  # 0 means unbounded

    pod_spec: dict[str, Any] = field(default_factory=dict)

    run_after_success: tuple["ProwJobSpec", ...] = ()


@dataclass(frozen=True)
class ProwJobStatus:
    """
    What happened.

    The orchestrator replaces the whole status value rather than editing
    fields in place. An unset completion_time means the job has not finished.
    """

    start_time: datetime | None = None
    completion_time: datetime | None = None
    state: ProwJobState | None = None
    description: str = ""
    url: str = ""
    pod_name: str = ""
    build_id: str = ""

    def __post_init__(self):
        # The zero timestamp means unset, same as on the wire
        for name in ("start_time", "completion_time"):
            if is_zero_time(getattr(self, name)):
                object.__setattr__(self, name, None)

    def is_complete(self) -> bool:
        """Whether completion_time is set, regardless of state."""
        return is_complete(self)


@dataclass
class ProwJob:
    """
    A job record: identity envelope, spec and status.

    api_version, kind and metadata belong to the store that holds the record
    and are carried through untouched.
    """

    api_version: str = ""
    kind: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    spec: ProwJobSpec = field(default_factory=ProwJobSpec)
    status: ProwJobStatus = field(default_factory=ProwJobStatus)

    def complete(self) -> bool:
        """Whether the job has finished."""
        return is_complete(self.status)


def is_zero_time(value: datetime | None) -> bool:
    """Whether a timestamp is the zero time (0001-01-01T00:00:00 in any zone)."""
    return value is not None and value.replace(tzinfo=None) == datetime.min


def is_complete(status: ProwJobStatus) -> bool:
    """
    Check whether a job status records a finished job.

    Only completion_time is consulted, so a status still in the pending
    state counts as complete once its completion time has been set.

    Args:
        status: Job status to inspect

    Returns:
        True if completion_time is set, False otherwise
    """
    return status.completion_time is not None


def render_refs(refs: Refs) -> str:
    """
    Render refs as "<base_ref>:<base_sha>" followed by ",<number>:<sha>"
    for each pull, in stored order.

    Pull authors are not included. Empty base fields still produce the
    leading ":" segment.

    Args:
        refs: Refs to render

    Returns:
        Summary string, e.g. "main:abc123,42:def456,7:111aaa"
    """
    parts = [f"{refs.base_ref}:{refs.base_sha}"]
    for pull in refs.pulls:
        parts.append(f"{pull.number}:{pull.sha}")
    return ",".join(parts)
