"""Tests for the pure aggregation engine."""

from datetime import datetime

import pytest

from gametrack.aggregation.engine import (
    aggregate,
    monthly_average,
    period_average,
    raw_listing,
    yearly_average,
)
from gametrack.errors import ErrorKind, ResultError
from gametrack.models.domain import EmptyResult, ResultRecord


def make_record(date, results, result_id=None, sound="true"):
    """Build a ResultRecord with sensible defaults."""
    return ResultRecord(
        result_id=result_id or f"r-{date.isoformat()}",
        patient_id="patient-1",
        game_id="game-1",
        sound=sound,
        results=results,
        date=date,
    )


@pytest.fixture
def two_months():
    """Records from February and January 2023, store order reversed."""
    return [
        make_record(datetime(2023, 2, 9), {"t": 10}),
        make_record(datetime(2023, 1, 10), {"t": 20}),
    ]


class TestEmptyInput:
    """Every mode signals EmptyResult for no records."""

    @pytest.mark.parametrize(
        "fn", [raw_listing, period_average, monthly_average, yearly_average]
    )
    def test_empty_input(self, fn):
        assert isinstance(fn([]), EmptyResult)

    def test_aggregate_empty(self):
        assert isinstance(aggregate([], "monthly_average"), EmptyResult)


class TestRawListing:
    """Test raw mode."""

    def test_one_entry_per_record(self, two_months):
        entries = raw_listing(two_months)
        assert len(entries) == 2
        assert all(e.days_logged == 1 for e in entries)

    def test_sorted_by_date(self, two_months):
        entries = raw_listing(two_months)
        assert [e.record.date for e in entries] == [
            datetime(2023, 1, 10),
            datetime(2023, 2, 9),
        ]

    def test_records_unchanged(self, two_months):
        entries = raw_listing(two_months)
        assert [e.record for e in entries] == [two_months[1], two_months[0]]

    def test_rejects_non_numeric(self):
        records = [make_record(datetime(2023, 1, 1), {"t": "fast"})]
        with pytest.raises(ResultError) as exc_info:
            raw_listing(records)
        assert exc_info.value.kind is ErrorKind.COMPUTATION


class TestPeriodAverage:
    """Test full-period average."""

    def test_example_from_two_months(self, two_months):
        assert period_average(two_months) == {"t": 15}

    def test_missing_metric_excluded_not_zero(self):
        records = [
            make_record(datetime(2023, 1, 1), {"a": 10, "b": 5}),
            make_record(datetime(2023, 1, 2), {"a": 20}),
        ]
        assert period_average(records) == {"a": 15, "b": 5}

    def test_mean_is_sum_over_count(self):
        values = [0.1, 0.2, 0.3, 7.5]
        records = [
            make_record(datetime(2023, 1, i + 1), {"m": v}) for i, v in enumerate(values)
        ]
        assert period_average(records)["m"] == sum(values) / len(values)

    def test_no_rounding(self):
        records = [
            make_record(datetime(2023, 1, 1), {"m": 1}),
            make_record(datetime(2023, 1, 2), {"m": 2}),
            make_record(datetime(2023, 1, 3), {"m": 2}),
        ]
        assert period_average(records)["m"] == 5 / 3

    def test_order_independent(self, two_months):
        assert period_average(two_months) == period_average(list(reversed(two_months)))

    def test_open_metric_keys(self):
        records = [
            make_record(datetime(2023, 1, 1), {"hits": 4, "reaction_ms": 300.0}),
            make_record(datetime(2023, 1, 2), {"misses": 2}),
        ]
        assert period_average(records) == {"hits": 4, "reaction_ms": 300.0, "misses": 2}

    def test_rejects_boolean_metric(self):
        records = [make_record(datetime(2023, 1, 1), {"won": True})]
        with pytest.raises(ResultError) as exc_info:
            period_average(records)
        assert exc_info.value.kind is ErrorKind.COMPUTATION
        assert "won" in exc_info.value.message

    def test_error_names_record(self):
        records = [make_record(datetime(2023, 1, 1), {"t": None}, result_id="bad-1")]
        with pytest.raises(ResultError, match="bad-1"):
            period_average(records)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_rejects_non_finite_metric(self, value):
        records = [
            make_record(datetime(2023, 1, 1), {"t": 10}, result_id="ok"),
            make_record(datetime(2023, 1, 2), {"t": value}, result_id="bad"),
        ]
        with pytest.raises(ResultError) as exc_info:
            period_average(records)
        assert exc_info.value.kind is ErrorKind.COMPUTATION
        assert "bad" in exc_info.value.message

    def test_rejects_int_too_large_for_float(self):
        records = [make_record(datetime(2023, 1, 1), {"t": 10**400})]
        with pytest.raises(ResultError) as exc_info:
            period_average(records)
        assert exc_info.value.kind is ErrorKind.COMPUTATION

    def test_rejects_non_mapping_results(self):
        records = [make_record(datetime(2023, 1, 1), [1, 2, 3])]
        with pytest.raises(ResultError) as exc_info:
            period_average(records)
        assert exc_info.value.kind is ErrorKind.COMPUTATION


class TestMonthlyAverage:
    """Test monthly partitions."""

    def test_example_from_two_months(self, two_months):
        partitions = monthly_average(two_months)
        assert len(partitions) == 2
        by_label = {p.results["month-year"]: p for p in partitions}
        assert by_label["2-2023"].results["t"] == 10
        assert by_label["2-2023"].days_logged == 1
        assert by_label["1-2023"].results["t"] == 20
        assert by_label["1-2023"].days_logged == 1

    def test_chronological_order(self, two_months):
        labels = [p.results["month-year"] for p in monthly_average(two_months)]
        assert labels == ["1-2023", "2-2023"]

    def test_label_is_first_key(self, two_months):
        partition = monthly_average(two_months)[0]
        assert list(partition.results)[0] == "month-year"

    def test_same_day_sessions_count_once(self):
        records = [
            make_record(datetime(2023, 3, 1, 9, 0), {"t": 10}),
            make_record(datetime(2023, 3, 1, 18, 30), {"t": 20}),
            make_record(datetime(2023, 3, 2, 12, 0), {"t": 30}),
        ]
        (partition,) = monthly_average(records)
        assert partition.days_logged == 2
        # Every session still counts toward the mean
        assert partition.results["t"] == 20

    def test_same_month_different_years_split(self):
        records = [
            make_record(datetime(2022, 5, 1), {"t": 1}),
            make_record(datetime(2023, 5, 1), {"t": 3}),
        ]
        labels = [p.results["month-year"] for p in monthly_average(records)]
        assert labels == ["5-2022", "5-2023"]

    def test_days_logged_bounded_by_records(self):
        records = [
            make_record(datetime(2023, 4, day, hour), {"t": day}, result_id=f"{day}-{hour}")
            for day in (1, 1, 2, 5)
            for hour in (8, 20)
        ]
        for partition in monthly_average(records):
            assert 0 < partition.days_logged <= len(records)
        assert monthly_average(records)[0].days_logged == 3

    def test_partitions_cover_all_contributions(self):
        records = [
            make_record(datetime(2023, 1, 3), {"a": 1, "b": 2}),
            make_record(datetime(2023, 1, 9), {"a": 3}),
            make_record(datetime(2023, 2, 1), {"b": 4}),
            make_record(datetime(2023, 3, 7), {"a": 5}),
        ]
        partitions = monthly_average(records)
        assert [p.results["month-year"] for p in partitions] == ["1-2023", "2-2023", "3-2023"]
        assert partitions[0].results == {"month-year": "1-2023", "a": 2, "b": 2}
        assert partitions[1].results == {"month-year": "2-2023", "b": 4}
        assert partitions[2].results == {"month-year": "3-2023", "a": 5}

    def test_metric_named_like_label_rejected(self):
        records = [make_record(datetime(2023, 1, 1), {"month-year": 3})]
        with pytest.raises(ResultError) as exc_info:
            monthly_average(records)
        assert exc_info.value.kind is ErrorKind.COMPUTATION

    def test_idempotent(self, two_months):
        assert monthly_average(two_months) == monthly_average(two_months)


class TestYearlyAverage:
    """Test yearly partitions."""

    def test_example_from_two_months(self, two_months):
        (partition,) = yearly_average(two_months)
        assert partition.results == {"year": "2023", "t": 15}
        assert partition.days_logged == 1

    def test_days_logged_is_distinct_years_everywhere(self):
        records = [
            make_record(datetime(2021, 6, 1), {"t": 1}),
            make_record(datetime(2022, 6, 1), {"t": 2}),
            make_record(datetime(2022, 6, 2), {"t": 4}),
            make_record(datetime(2023, 6, 1), {"t": 3}),
        ]
        partitions = yearly_average(records)
        assert [p.results["year"] for p in partitions] == ["2021", "2022", "2023"]
        assert {p.days_logged for p in partitions} == {3}
        assert partitions[1].results["t"] == 3

    def test_metric_named_like_label_rejected(self):
        records = [make_record(datetime(2023, 1, 1), {"year": 2023})]
        with pytest.raises(ResultError) as exc_info:
            yearly_average(records)
        assert exc_info.value.kind is ErrorKind.COMPUTATION

    def test_many_days_one_year(self):
        records = [make_record(datetime(2023, 1, day), {"t": day}) for day in range(1, 11)]
        (partition,) = yearly_average(records)
        assert partition.days_logged == 1
        assert partition.results["t"] == 5.5


class TestAggregateDispatch:
    """Test the mode dispatcher."""

    def test_dispatches_modes(self, two_months):
        assert aggregate(two_months, "period_average") == {"t": 15}
        assert len(aggregate(two_months, "raw")) == 2
        assert len(aggregate(two_months, "monthly_average")) == 2
        assert len(aggregate(two_months, "yearly_average")) == 1

    def test_unknown_mode(self, two_months):
        with pytest.raises(ResultError) as exc_info:
            aggregate(two_months, "weekly_average")
        assert exc_info.value.kind is ErrorKind.VALIDATION
