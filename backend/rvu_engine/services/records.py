"""Billing record model and boundary coercion.

Cases and codes arrive from the record store as loosely shaped rows
(camelCase API payloads, snake_case ORM rows, or the store's own column
names such as ``cpt_code`` / ``rvu_value``). Everything downstream works on
the frozen dataclasses defined here, so coercion is the single place where
missing values get their defaults and negative amounts are rejected.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from dateutil.parser import isoparse

from rvu_engine.core.exceptions import ContractViolationError, InvalidRateError, NegativeRVUError

OTHER_CATEGORY = "Other"


def round_half_up(value: float, places: int = 2) -> float:
    """Round half away from zero to ``places`` decimals.

    Goes through the shortest decimal repr of the float, so 2.675 rounds
    to 2.68 rather than to the binary neighbour 2.67.

    Raises:
        ContractViolationError: If value is infinite or NaN, which is what
            sums of oversized amounts overflow to.
    """
    if not math.isfinite(value):
        raise ContractViolationError("Amount must be finite", {"value": value})
    quantum = Decimal(1).scaleb(-places)
    exact = Decimal(str(value))
    with localcontext() as ctx:
        # enough digits for every finite float at the requested places
        ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
        rounded = exact.quantize(quantum, rounding=ROUND_HALF_UP)
    # + 0.0 folds negative zero
    return float(rounded) + 0.0


def normalize_category(category: str | None) -> str:
    """Map an absent or blank category to the literal "Other" bucket."""
    if category is None or not str(category).strip():
        return OTHER_CATEGORY
    return str(category)


def check_amount(field_name: str, value: float, code: str | None = None) -> None:
    """Reject RVU-like amounts that are negative, infinite or NaN."""
    if not math.isfinite(value):
        context: dict[str, Any] = {"value": value}
        if code is not None:
            context["code"] = code
        raise ContractViolationError(f"{field_name} must be finite", context)
    if value < 0:
        raise NegativeRVUError(field_name, value, code)


@dataclass(frozen=True)
class BilledCode:
    """A code billed in one encounter, as fed to the MPPR calculator."""

    code: str
    rvu: float
    description: str = ""

    def __post_init__(self) -> None:
        check_amount("rvu", self.rvu, self.code)


@dataclass(frozen=True)
class CodeRecord:
    """A historical code row belonging to a saved case."""

    code: str
    description: str = ""
    rvu: float = 0.0
    category: str = ""
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        check_amount("rvu", self.rvu, self.code)


@dataclass(frozen=True)
class CaseRecord:
    """A billed encounter and the codes saved with it."""

    id: str | int | None = None
    total_rvu: float = 0.0
    estimated_value: float = 0.0
    created_at: datetime | None = None
    procedure_date: date | None = None
    codes: tuple[CodeRecord, ...] = ()

    def __post_init__(self) -> None:
        check_amount("total_rvu", self.total_rvu)
        check_amount("estimated_value", self.estimated_value)
        if not isinstance(self.codes, tuple):
            object.__setattr__(self, "codes", tuple(self.codes))


# ============================================================================
# Coercion helpers
# ============================================================================


def _lookup(item: Any, *names: str, default: Any = None) -> Any:
    """Return the first non-null value among ``names`` on a mapping or object."""
    if isinstance(item, Mapping):
        for name in names:
            value = item.get(name)
            if value is not None:
                return value
        return default
    for name in names:
        value = getattr(item, name, None)
        if value is not None:
            return value
    return default


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; ``None`` and blank strings mean absent."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    text = str(value).strip()
    if not text:
        return None
    try:
        return isoparse(text)
    except ValueError as e:
        raise ContractViolationError("Invalid ISO-8601 timestamp", {"value": text}) from e


def parse_date(value: Any) -> date | None:
    """Parse a calendar date, accepting full timestamps as well."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_timestamp(value)
    return parsed.date() if parsed else None


def _amount(value: Any, field_name: str, code: str | None = None) -> float:
    """Coerce an RVU-like amount, treating null as zero."""
    if value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError) as e:
        raise ContractViolationError(
            f"{field_name} must be numeric", {"value": value}
        ) from e
    check_amount(field_name, amount, code)
    return amount


def validate_rate(rate_per_rvu: float) -> float:
    """Check a currency-per-RVU rate is finite and non-negative."""
    if not math.isfinite(rate_per_rvu) or rate_per_rvu < 0:
        raise InvalidRateError(rate_per_rvu)
    return rate_per_rvu


def _code_identity(item: Any) -> str:
    code = _lookup(item, "code", "cpt_code")
    if not isinstance(code, str) or not code:
        raise ContractViolationError("code must be a non-empty string", {"value": code})
    return code


def coerce_billed_code(item: Any) -> BilledCode:
    """Coerce one calculator input item (object or mapping)."""
    if isinstance(item, BilledCode):
        return item
    code = _code_identity(item)
    return BilledCode(
        code=code,
        rvu=_amount(_lookup(item, "rvu", "rvu_value"), "rvu", code),
        description=str(_lookup(item, "description", default="")),
    )


def coerce_code_record(item: Any) -> CodeRecord:
    """Coerce one historical code row into a CodeRecord."""
    if isinstance(item, CodeRecord):
        return item
    code = _code_identity(item)
    return CodeRecord(
        code=code,
        description=str(_lookup(item, "description", default="")),
        rvu=_amount(_lookup(item, "rvu", "rvu_value"), "rvu", code),
        category=str(_lookup(item, "category", default="")),
        created_at=parse_timestamp(_lookup(item, "created_at", "createdAt")),
    )


def coerce_case_record(item: Any) -> CaseRecord:
    """Coerce one case row, including its nested codes."""
    if isinstance(item, CaseRecord):
        return item
    codes = _lookup(item, "codes", "case_codes", default=())
    return CaseRecord(
        id=_lookup(item, "id"),
        total_rvu=_amount(_lookup(item, "total_rvu", "totalRvu"), "total_rvu"),
        estimated_value=_amount(
            _lookup(item, "estimated_value", "estimatedValue"), "estimated_value"
        ),
        created_at=parse_timestamp(_lookup(item, "created_at", "createdAt")),
        procedure_date=parse_date(_lookup(item, "procedure_date", "procedureDate")),
        codes=tuple(coerce_code_record(code) for code in codes),
    )


def coerce_cases(items: Iterable[Any]) -> list[CaseRecord]:
    """Coerce a whole snapshot of cases."""
    return [coerce_case_record(item) for item in items]


def flatten_codes(cases: Iterable[CaseRecord]) -> list[CodeRecord]:
    """All code rows of a snapshot, in case order then code order."""
    return [code for case in cases for code in case.codes]
