"""Run history data structures: per-site results, runs, and the run index."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel

Status = Literal["OK", "FAIL"]


def iso_timestamp(moment: datetime | None = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision, e.g. ``2026-01-02T03:04:05.678Z``."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CaptureResult(_RecordModel):
    """Outcome of checking one site within a run."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    status: Status = "FAIL"
    http_status: Optional[int] = None
    duration_ms: int = Field(default=0, ge=0)
    error: Optional[str] = None
    screenshot_path: str = Field(alias="screenshot")
    checked_at: str

    @property
    def ok(self) -> bool:
        return self.status == "OK"


class Run(_RecordModel):
    id: str
    overall: Status
    total: int
    failed: int
    started_at: str
    finished_at: str
    duration_ms: int = Field(ge=0)
    items: list[CaptureResult] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_summary(self) -> "Run":
        failed = sum(1 for item in self.items if not item.ok)
        if self.total != len(self.items):
            raise ValueError(f"total={self.total} but {len(self.items)} items")
        if self.failed != failed:
            raise ValueError(f"failed={self.failed} but {failed} items failed")
        if (self.overall == "FAIL") != (failed > 0):
            raise ValueError(f"overall={self.overall} disagrees with failed={failed}")
        return self

    @classmethod
    def from_results(
        cls,
        run_id: str,
        results: list[CaptureResult],
        started_at: str,
        finished_at: str,
        duration_ms: int,
    ) -> "Run":
        failed = sum(1 for r in results if not r.ok)
        return cls(
            id=run_id,
            overall="FAIL" if failed else "OK",
            total=len(results),
            failed=failed,
            started_at=started_at,
            finished_at=finished_at,
            duration_ms=max(0, duration_ms),
            items=list(results),
        )


class IndexEntry(_RecordModel):
    """Summary of a Run, denormalized so the index can be listed cheaply."""

    id: str
    overall: Status
    total: int
    failed: int
    started_at: str
    finished_at: str
    duration_ms: int
    # Older index files stored the record path under "runJson".
    run_record_path: str = Field(
        validation_alias=AliasChoices("runRecordPath", "run_record_path", "runJson"),
        serialization_alias="runRecordPath",
    )

    @classmethod
    def for_run(cls, run: Run, run_record_path: str) -> "IndexEntry":
        return cls(
            id=run.id,
            overall=run.overall,
            total=run.total,
            failed=run.failed,
            started_at=run.started_at,
            finished_at=run.finished_at,
            duration_ms=run.duration_ms,
            run_record_path=run_record_path,
        )


class RunIndex(_RecordModel):
    runs: list[IndexEntry] = Field(default_factory=list)  # newest first
