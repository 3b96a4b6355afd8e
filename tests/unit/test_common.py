"""Tests for bc_common: cents, errors, response envelope, ids and datetimes."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from src.bc_common.cents import cents_to_display, validate_positive_amount
from src.bc_common.datetime_utils import ensure_utc, hours_between, same_local_day, utc_now
from src.bc_common.enums import GameType, LedgerEntryType, MatchStatus
from src.bc_common.errors import (
    AlreadyConfirmedError,
    AppError,
    DoubleBookingError,
    ErrorKind,
    InsufficientBalanceError,
    InternalError,
    InvalidAmountError,
    NotSlotOwnerError,
    SlotNotFoundError,
)
from src.bc_common.id_generator import SnowflakeIdGenerator, generate_id
from src.bc_common.response import error_response, success_response


class TestCentsToDisplay:
    def test_basic(self) -> None:
        assert cents_to_display(400) == "€4.00"

    def test_zero(self) -> None:
        assert cents_to_display(0) == "€0.00"

    def test_one_cent(self) -> None:
        assert cents_to_display(1) == "€0.01"

    def test_thousands_separator(self) -> None:
        assert cents_to_display(150000) == "€1,500.00"

    def test_negative(self) -> None:
        assert cents_to_display(-450) == "-€4.50"


class TestValidatePositiveAmount:
    def test_accepts_positive(self) -> None:
        validate_positive_amount(1)
        validate_positive_amount(100_000)

    @pytest.mark.parametrize("bad", [0, -1, 1.5, "100", None, True])
    def test_rejects(self, bad: object) -> None:
        with pytest.raises(InvalidAmountError):
            validate_positive_amount(bad)  # type: ignore[arg-type]


class TestAppError:
    def test_status_follows_kind(self) -> None:
        err = AppError(code=9999, message="x", kind=ErrorKind.NOT_FOUND)
        assert err.http_status == 404

    def test_default_is_internal(self) -> None:
        err = AppError(code=9002, message="boom")
        assert err.kind is ErrorKind.INTERNAL
        assert err.http_status == 500

    def test_explicit_status_wins(self) -> None:
        err = AppError(code=1, message="x", http_status=418, kind=ErrorKind.NOT_FOUND)
        assert err.http_status == 418


class TestSpecificErrors:
    def test_insufficient_balance(self) -> None:
        err = InsufficientBalanceError(required=400, available=150)
        assert err.code == 2001
        assert err.kind is ErrorKind.FAILED_PRECONDITION
        assert "400" in err.message
        assert "150" in err.message

    def test_slot_errors(self) -> None:
        assert SlotNotFoundError("SLT-1").kind is ErrorKind.NOT_FOUND
        assert NotSlotOwnerError("SLT-1").http_status == 403
        assert DoubleBookingError("2030-01-01T18:00:00+00:00").code == 3004

    def test_already_confirmed_is_conflict(self) -> None:
        err = AlreadyConfirmedError("MCH-1")
        assert err.kind is ErrorKind.ALREADY_EXISTS
        assert err.http_status == 409

    def test_internal(self) -> None:
        assert InternalError().message == "Internal server error"


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "SLT-1"})
        assert resp.success is True
        assert resp.code == 0
        assert resp.data == {"id": "SLT-1"}
        assert resp.error_kind is None

    def test_error(self) -> None:
        resp = error_response(2001, "Insufficient balance", ErrorKind.FAILED_PRECONDITION.value)
        assert resp.success is False
        assert resp.code == 2001
        assert resp.data is None
        assert resp.error_kind == "failed_precondition"

    def test_serialization(self) -> None:
        d = success_response().model_dump()
        for key in ("success", "code", "message", "data", "error_kind", "timestamp", "request_id"):
            assert key in d
        assert d["request_id"].startswith("req_")


class TestEnums:
    def test_team_size(self) -> None:
        assert GameType.SINGLES.team_size == 1
        assert GameType.DOUBLES.team_size == 2

    def test_values_match_storage(self) -> None:
        assert MatchStatus.REQUESTED_CANCELLATION.value == "requested_cancellation"
        assert LedgerEntryType.CANCELLATION_NO_REFUND.value == "cancellation_no_refund"


class TestSnowflakeIdGenerator:
    def test_unique_and_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = [gen.next_int() for _ in range(1000)]
        assert len(set(ids)) == 1000
        assert ids == sorted(ids)

    def test_machine_id_bounds(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_prefixed_ids(self) -> None:
        slot_id = generate_id("SLT")
        assert slot_id.startswith("SLT-")
        assert slot_id[4:].isdigit()
        assert generate_id().isdigit()


class TestDatetimeUtils:
    def test_utc_now_is_aware(self) -> None:
        now = utc_now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_hours_between(self) -> None:
        start = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)
        assert hours_between(start, start + timedelta(hours=36)) == 36
        assert hours_between(start, start - timedelta(minutes=30)) == -0.5

    def test_ensure_utc(self) -> None:
        naive = datetime(2030, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2030, 1, 1, 12, 0, tzinfo=UTC)
        plus_two = datetime(2030, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert ensure_utc(plus_two).hour == 12

    def test_same_local_day(self) -> None:
        evening = datetime(2030, 1, 1, 22, 30, tzinfo=UTC)  # 23:30 in Berlin
        late = datetime(2030, 1, 1, 23, 30, tzinfo=UTC)  # 00:30 next day in Berlin
        morning = datetime(2030, 1, 1, 7, 0, tzinfo=UTC)
        assert same_local_day(morning, evening, "Europe/Berlin") is True
        assert same_local_day(morning, late, "Europe/Berlin") is False
        assert same_local_day(morning, late, "UTC") is True
