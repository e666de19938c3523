"""Hydration run state and reporting models.

Every per-set unit of work produces a :class:`SetOutcome` instead of a
swallowed exception.  Outcomes roll up into one :class:`BatchReport` per
batch and a :class:`HydrationReport` per run, which the status endpoint and
the CLI both display.

All report models serialize with camelCase keys (``workSize``,
``startedAt``) to match the rest of the HTTP surface.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from transmog_catalog.models.item_set import ItemSet

_REPORT_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class HydrationState(str, Enum):  # noqa: UP042 -- StrEnum requires Python 3.11+
    """Run state machine: IDLE -> RUNNING -> (IDLE | FAILED).

    FAILED is only reached when the index fetch aborts a run; the next
    trigger moves the pipeline back to RUNNING.
    """

    IDLE = "Idle"
    RUNNING = "Running"
    FAILED = "Failed"


class SetFailure(BaseModel):
    """One set that could not be hydrated in a run."""

    model_config = _REPORT_CONFIG

    id: int
    reason: str


class SetOutcome(BaseModel):
    """Result of hydrating a single set: either a record or a failure reason."""

    model_config = ConfigDict(frozen=True)

    set_id: int
    ok: bool
    item_set: ItemSet | None = None
    reason: str | None = None

    @classmethod
    def success(cls, item_set: ItemSet) -> SetOutcome:
        return cls(set_id=item_set.id, ok=True, item_set=item_set)

    @classmethod
    def failure(cls, set_id: int, reason: str) -> SetOutcome:
        return cls(set_id=set_id, ok=False, reason=reason)


class BatchReport(BaseModel):
    """Aggregated outcomes of one batch: ``{succeeded, failed: [{id, reason}]}``."""

    model_config = _REPORT_CONFIG

    batch_index: int = 0
    succeeded: list[int] = Field(default_factory=list)
    failed: list[SetFailure] = Field(default_factory=list)

    @classmethod
    def from_outcomes(cls, batch_index: int, outcomes: list[SetOutcome]) -> BatchReport:
        return cls(
            batch_index=batch_index,
            succeeded=[o.set_id for o in outcomes if o.ok],
            failed=[
                SetFailure(id=o.set_id, reason=o.reason or "unknown error")
                for o in outcomes
                if not o.ok
            ],
        )


class HydrationReport(BaseModel):
    """Summary of one complete (or aborted) hydration run."""

    model_config = _REPORT_CONFIG

    started_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )
    finished_at: datetime | None = None
    state: HydrationState = HydrationState.RUNNING
    index_size: int = 0
    work_size: int = 0
    batches: int = 0
    persisted_writes: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: list[SetFailure] = Field(default_factory=list)
    error: str | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()
