"""Tests for billing records, rounding and boundary coercion."""

from datetime import UTC, date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from rvu_engine.core.exceptions import ContractViolationError, NegativeRVUError
from rvu_engine.services.records import (
    OTHER_CATEGORY,
    BilledCode,
    CaseRecord,
    CodeRecord,
    coerce_billed_code,
    coerce_case_record,
    coerce_cases,
    coerce_code_record,
    flatten_codes,
    normalize_category,
    parse_date,
    parse_timestamp,
    round_half_up,
)


class TestRoundHalfUp:
    """Test half-away-from-zero rounding."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (2.675, 2.68),
            (-2.675, -2.68),
            (1.005, 1.01),
            (0.125, 0.13),
            (16.0, 16.0),
            (0.1 + 0.2, 0.3),
        ],
    )
    def test_rounds_to_cents(self, value: float, expected: float) -> None:
        """Test values round to 2 places, halves away from zero."""
        assert round_half_up(value) == expected

    def test_negative_zero_folded(self) -> None:
        """Test tiny negatives round to plain zero."""
        result = round_half_up(-0.001)
        assert result == 0.0
        assert str(result) == "0.0"

    def test_large_values(self) -> None:
        """Test values past the default decimal precision round without error."""
        assert round_half_up(1e27) == 1e27
        assert round_half_up(1.7976931348623157e308) == 1.7976931348623157e308

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_rejected(self, value: float) -> None:
        """Test infinities and NaN are a contract violation."""
        with pytest.raises(ContractViolationError):
            round_half_up(value)

    def test_custom_places(self) -> None:
        """Test rounding to a different number of places."""
        assert round_half_up(1.2345, places=3) == 1.235
        assert round_half_up(12.5, places=0) == 13.0


class TestNormalizeCategory:
    """Test category normalization."""

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_maps_to_other(self, raw) -> None:
        """Test absent and blank categories become "Other"."""
        assert normalize_category(raw) == OTHER_CATEGORY == "Other"

    def test_named_category_kept(self) -> None:
        """Test a real category passes through unchanged."""
        assert normalize_category("Knee") == "Knee"


class TestRecordValidation:
    """Test dataclass-level validation."""

    def test_code_record_rejects_negative_rvu(self) -> None:
        """Test CodeRecord refuses a negative RVU."""
        with pytest.raises(NegativeRVUError):
            CodeRecord(code="A", rvu=-0.5)

    def test_case_record_rejects_negative_total(self) -> None:
        """Test CaseRecord refuses a negative total RVU."""
        with pytest.raises(NegativeRVUError) as exc_info:
            CaseRecord(total_rvu=-1.0)
        assert exc_info.value.field_name == "total_rvu"

    def test_case_record_rejects_negative_value(self) -> None:
        """Test CaseRecord refuses a negative estimated value."""
        with pytest.raises(NegativeRVUError):
            CaseRecord(estimated_value=-10.0)

    def test_case_record_codes_become_tuple(self) -> None:
        """Test a list of codes is stored as a tuple."""
        case = CaseRecord(codes=[CodeRecord(code="A")])
        assert isinstance(case.codes, tuple)


class TestTimestampParsing:
    """Test ISO-8601 parsing at the boundary."""

    def test_offset_timestamp(self) -> None:
        """Test a timestamp with an offset keeps it."""
        parsed = parse_timestamp("2026-03-17T23:30:00-05:00")
        assert parsed.utcoffset() == timedelta(hours=-5)

    def test_zulu_timestamp(self) -> None:
        """Test a trailing Z is read as UTC."""
        parsed = parse_timestamp("2026-03-17T10:00:00Z")
        assert parsed == datetime(2026, 3, 17, 10, 0, tzinfo=UTC)

    @pytest.mark.parametrize("raw", [None, "", "  "])
    def test_absent_timestamp(self, raw) -> None:
        """Test missing and blank timestamps parse to None."""
        assert parse_timestamp(raw) is None

    def test_datetime_passthrough(self) -> None:
        """Test datetime instances are returned as-is."""
        stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(stamp) is stamp

    def test_invalid_timestamp_rejected(self) -> None:
        """Test garbage timestamps are a contract violation."""
        with pytest.raises(ContractViolationError):
            parse_timestamp("yesterday-ish")

    def test_parse_date_from_timestamp(self) -> None:
        """Test a full timestamp can serve as a date."""
        assert parse_date("2026-02-14T08:00:00Z") == date(2026, 2, 14)
        assert parse_date("2026-02-14") == date(2026, 2, 14)
        assert parse_date(None) is None


class TestCoercion:
    """Test coercion of loosely shaped rows."""

    def test_billed_code_from_mapping(self) -> None:
        """Test a mapping becomes a BilledCode with defaults."""
        billed = coerce_billed_code({"code": "27447", "rvu": 20.72})
        assert billed.code == "27447"
        assert billed.rvu == 20.72
        assert billed.description == ""

    def test_billed_code_from_store_columns(self) -> None:
        """Test the store's cpt_code / rvu_value column names."""
        billed = coerce_billed_code({"cpt_code": "99213", "rvu_value": "1.3"})
        assert billed.code == "99213"
        assert billed.rvu == 1.3

    def test_non_numeric_rvu_rejected(self) -> None:
        """Test a non-numeric RVU is a contract violation."""
        with pytest.raises(ContractViolationError):
            coerce_billed_code({"code": "A", "rvu": "lots"})

    @pytest.mark.parametrize("raw", ["inf", "nan", float("inf")])
    def test_non_finite_rvu_rejected(self, raw) -> None:
        """Test infinite and NaN RVUs are refused at the boundary."""
        with pytest.raises(ContractViolationError):
            coerce_code_record({"code": "A", "rvu": raw})

    def test_non_finite_case_total_rejected(self) -> None:
        """Test an infinite case total is refused."""
        with pytest.raises(ContractViolationError):
            coerce_case_record({"totalRvu": float("inf")})

    def test_billed_code_rejects_negative_rvu(self) -> None:
        """Test BilledCode validates like CodeRecord."""
        with pytest.raises(NegativeRVUError):
            BilledCode(code="A", rvu=-1.0)

    def test_empty_code_rejected(self) -> None:
        """Test an empty code string is refused."""
        with pytest.raises(ContractViolationError):
            coerce_code_record({"code": "", "rvu": 1.0})

    def test_code_identity_is_exact(self) -> None:
        """Test codes are not trimmed or case-folded."""
        record = coerce_code_record({"code": "99213 ", "rvu": 1.0})
        assert record.code == "99213 "

    def test_code_record_camel_case(self) -> None:
        """Test camelCase createdAt is read."""
        record = coerce_code_record({
            "code": "A",
            "rvu": 1.0,
            "createdAt": "2026-03-01T09:00:00Z",
            "category": None,
        })
        assert record.created_at == datetime(2026, 3, 1, 9, 0, tzinfo=UTC)
        assert record.category == ""

    def test_code_record_from_object(self) -> None:
        """Test attribute-style rows are read too."""
        row = SimpleNamespace(code="B", rvu=2.0, description="desc", category="Hip", created_at=None)
        record = coerce_code_record(row)
        assert record == CodeRecord(code="B", description="desc", rvu=2.0, category="Hip")

    def test_case_record_defaults(self) -> None:
        """Test a bare case gets zero totals and no codes."""
        case = coerce_case_record({"id": 7})
        assert case == CaseRecord(id=7)

    def test_case_record_nested_codes(self, sample_cases) -> None:
        """Test nested codes are coerced with the case."""
        case = coerce_case_record(sample_cases[0])
        assert case.id == "C1"
        assert case.total_rvu == 16.0
        assert case.estimated_value == 1040.0
        assert [c.code for c in case.codes] == ["A", "B"]
        assert all(isinstance(c, CodeRecord) for c in case.codes)

    def test_case_record_procedure_date(self) -> None:
        """Test procedureDate is parsed as a calendar date."""
        case = coerce_case_record({"procedureDate": "2026-03-02", "case_codes": []})
        assert case.procedure_date == date(2026, 3, 2)

    def test_case_negative_value_rejected(self) -> None:
        """Test a negative stored value is refused."""
        with pytest.raises(NegativeRVUError):
            coerce_case_record({"totalRvu": 1.0, "estimatedValue": -5})

    def test_flatten_codes_order(self, sample_cases) -> None:
        """Test codes flatten in case order then code order."""
        codes = flatten_codes(coerce_cases(sample_cases))
        assert [c.code for c in codes] == ["A", "B", "X", "X", "X", "Y"]
