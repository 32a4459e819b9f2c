"""Request schemas for billing snapshots.

Field names follow the Python side (snake_case) and also accept the
camelCase names the presentation layer sends (``createdAt``, ``totalRvu``).
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class BilledCodeIn(BaseModel):
    """A code billed in one encounter."""

    code: str = Field(..., min_length=1, description="Procedure code (exact, case-sensitive)")
    rvu: float | None = Field(
        None, ge=0, allow_inf_nan=False, description="RVU weight; null is treated as 0"
    )
    description: str | None = Field("", description="Code description")


class CodeRecordIn(BaseModel):
    """A historical code row saved with a case."""

    code: str = Field(..., min_length=1, description="Procedure code (exact, case-sensitive)")
    description: str | None = Field("", description="Code description")
    rvu: float | None = Field(
        None, ge=0, allow_inf_nan=False, description="RVU weight; null is treated as 0"
    )
    category: str | None = Field(None, description="Category; blank maps to 'Other'")
    created_at: datetime | None = Field(None, alias="createdAt", description="When the code was saved")

    model_config = {"populate_by_name": True}


class CaseRecordIn(BaseModel):
    """A billed encounter with its codes."""

    id: str | int | None = Field(None, description="Case identifier")
    total_rvu: float | None = Field(
        None, ge=0, allow_inf_nan=False, alias="totalRvu", description="Stored case RVU total"
    )
    estimated_value: float | None = Field(
        None, ge=0, allow_inf_nan=False, alias="estimatedValue", description="Stored case value estimate"
    )
    created_at: datetime | None = Field(None, alias="createdAt", description="When the case was saved")
    procedure_date: date | None = Field(None, alias="procedureDate", description="Date of the procedure")
    codes: list[CodeRecordIn] = Field(default_factory=list, description="Codes billed in the case")

    model_config = {"populate_by_name": True}


class SnapshotRequest(BaseModel):
    """A user's case history plus an optional rate override."""

    cases: list[CaseRecordIn] = Field(default_factory=list, description="Snapshot of the user's cases")
    rate_per_rvu: float | None = Field(
        None,
        ge=0,
        allow_inf_nan=False,
        alias="ratePerRvu",
        description="Currency per RVU; defaults to configured rate",
    )
    now: datetime | None = Field(None, description="Reference time for windows; defaults to server time")

    model_config = {"populate_by_name": True}


class AdjustRequest(BaseModel):
    """Codes billed together for one session."""

    codes: list[BilledCodeIn] = Field(default_factory=list, description="Codes billed together")
    rate_per_rvu: float | None = Field(
        None,
        ge=0,
        allow_inf_nan=False,
        alias="ratePerRvu",
        description="Currency per RVU for the value estimate",
    )

    model_config = {"populate_by_name": True}
