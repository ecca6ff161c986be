from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from flightsla.audit import audit_flight
from flightsla.columns import ColumnMap, resolve_columns
from flightsla.parse import format_duration, parse_date, round_half_up
from flightsla.rules import (
    BAG_RULE,
    CHECKPOINT_RULES,
    DURATION_RULES,
    OPERATING_WEEKMASK,
    BagRule,
    CheckpointRule,
    DurationRule,
)
from flightsla.schema import FlightAudit, MonthlyAggregate, Record, Table


def check_selection(table: Table, month: int, year: int) -> None:
    if table is None:
        raise TypeError("A Table is required; got None")
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    if year < 1:
        raise ValueError(f"year must be positive, got {year}")


def potential_flights(month: int, year: int, weekmask: str = OPERATING_WEEKMASK) -> int:
    """
    Counts the operating weekdays (Mon/Wed/Fri by default) in a month. This is
    a schedule assumption, independent of the flights actually recorded.
    """
    start = np.datetime64(f"{year:04d}-{month:02d}", "M")
    end = start + np.timedelta64(1, "M")
    return int(np.busday_count(start.astype("datetime64[D]"), end.astype("datetime64[D]"), weekmask=weekmask))


def filter_by_month(table: Table, month: int, year: int, columns: Optional[ColumnMap] = None) -> List[Record]:
    """Returns the records whose landing date falls in the given month and year."""
    columns = columns or resolve_columns(table.headers)
    if not columns.get("landing"):
        return []
    selected = []
    for record in table.records:
        day = parse_date(columns.value(record, "landing"))
        if day is not None and day.month == month and day.year == year:
            selected.append(record)
    return selected


def available_years(table: Table, columns: Optional[ColumnMap] = None) -> List[int]:
    """Distinct landing years in the table, ascending. Empty when no date parses."""
    columns = columns or resolve_columns(table.headers)
    years = set()
    for record in table.records:
        day = parse_date(columns.value(record, "landing"))
        if day is not None:
            years.add(day.year)
    return sorted(years)


def _average(total: float, count: int) -> float:
    return round_half_up(total / count, 1) if count else 0.0


def empty_aggregate(
    month: int,
    year: int,
    rules: Sequence[CheckpointRule] = CHECKPOINT_RULES,
    bag_rule: BagRule = BAG_RULE,
    duration_rules: Sequence[DurationRule] = DURATION_RULES,
    warnings: Sequence[str] = (),
) -> MonthlyAggregate:
    """The 'no data' aggregate: zero counts and '00:00' durations."""
    return MonthlyAggregate(
        month=month,
        year=year,
        total_flights=0,
        potential_flights=potential_flights(month, year),
        compliant_flights=0,
        non_compliant_flights=0,
        compliance_pct=0.0,
        checkpoint_scores={rule.key: 0.0 for rule in (*rules, bag_rule)},
        duration_averages={rule.key: "00:00" for rule in duration_rules},
        duration_minutes={rule.key: None for rule in duration_rules},
        total_pax=0,
        total_bags=0,
        avg_orbital_punctuality=0.0,
        avg_base_punctuality=0.0,
        flights=(),
        warnings=tuple(warnings),
    )


def summarize_flights(
    flights: Sequence[FlightAudit],
    month: int,
    year: int,
    rules: Sequence[CheckpointRule] = CHECKPOINT_RULES,
    bag_rule: BagRule = BAG_RULE,
    duration_rules: Sequence[DurationRule] = DURATION_RULES,
    count_missing_in_average: bool = True,
) -> MonthlyAggregate:
    """
    Reduces per-flight audits into the monthly aggregate.

    Args:
        flights: Audits of the flights selected for the month.
        month: Calendar month, 1-12.
        year: Calendar year.
        rules: Timed checkpoint rules.
        bag_rule: The hand bag rule.
        duration_rules: Flow interval rules.
        count_missing_in_average: When True (the current business policy),
            an unmeasured checkpoint adds 0 to the score sum and the flight
            still counts in the denominator. When False, only measured
            checkpoints are averaged.

    Returns:
        A MonthlyAggregate. Scores are rounded to one decimal place.
    """
    if not flights:
        return empty_aggregate(month, year, rules, bag_rule, duration_rules, warnings=("no flights in the selected month",))

    total = len(flights)
    keys = [rule.key for rule in (*rules, bag_rule)]
    score_sums: Dict[str, float] = {key: 0.0 for key in keys}
    measured_counts: Dict[str, int] = {key: 0 for key in keys}
    duration_sums: Dict[str, int] = {rule.key: 0 for rule in duration_rules}
    duration_counts: Dict[str, int] = {rule.key: 0 for rule in duration_rules}
    total_pax = total_bags = 0
    sum_orbital = sum_base = 0.0
    compliant = 0

    for flight in flights:
        for check in flight.checks:
            score_sums[check.key] += check.score
            if check.measured:
                measured_counts[check.key] += 1
        for key, minutes in flight.durations.items():
            if minutes is not None:
                duration_sums[key] += minutes
                duration_counts[key] += 1
        total_pax += flight.pax
        total_bags += flight.bags
        sum_orbital += flight.orbital_punctuality
        sum_base += flight.base_punctuality
        if flight.compliant:
            compliant += 1

    if count_missing_in_average:
        checkpoint_scores = {key: _average(score_sums[key], total) for key in keys}
    else:
        checkpoint_scores = {key: _average(score_sums[key], measured_counts[key]) for key in keys}

    duration_minutes: Dict[str, Optional[float]] = {
        key: (duration_sums[key] / duration_counts[key] if duration_counts[key] else None)
        for key in duration_sums
    }

    return MonthlyAggregate(
        month=month,
        year=year,
        total_flights=total,
        potential_flights=potential_flights(month, year),
        compliant_flights=compliant,
        non_compliant_flights=total - compliant,
        compliance_pct=_average(compliant * 100, total),
        checkpoint_scores=checkpoint_scores,
        duration_averages={key: format_duration(value) for key, value in duration_minutes.items()},
        duration_minutes=duration_minutes,
        total_pax=total_pax,
        total_bags=total_bags,
        avg_orbital_punctuality=_average(sum_orbital, total),
        avg_base_punctuality=_average(sum_base, total),
        flights=tuple(flights),
    )


def compute_monthly_aggregate(
    table: Table,
    month: int,
    year: int,
    columns: Optional[ColumnMap] = None,
    overrides: Optional[Mapping[str, str]] = None,
    rules: Sequence[CheckpointRule] = CHECKPOINT_RULES,
    bag_rule: BagRule = BAG_RULE,
    duration_rules: Sequence[DurationRule] = DURATION_RULES,
    count_missing_in_average: bool = True,
) -> MonthlyAggregate:
    """
    Computes the monthly SLA aggregate for one (month, year) selection.

    Args:
        table: The source table.
        month: Calendar month, 1-12.
        year: Calendar year.
        columns: A pre-resolved column map; resolved from the headers when omitted.
        overrides: Field -> header pins used when resolving columns here.
        rules, bag_rule, duration_rules: The rule set to evaluate.
        count_missing_in_average: See summarize_flights.

    Returns:
        A MonthlyAggregate. An empty selection, or a table whose landing date
        column cannot be resolved, yields the zeroed aggregate with a warning.
    """
    check_selection(table, month, year)
    print(f"Computing SLA aggregate for {month:02d}/{year}...")

    columns = columns or resolve_columns(table.headers, overrides)
    if not columns.get("landing"):
        print("Warning: landing date column not found. Returning an empty aggregate.")
        return empty_aggregate(
            month, year, rules, bag_rule, duration_rules,
            warnings=("landing date column not found in the sheet headers",),
        )

    records = filter_by_month(table, month, year, columns)
    flights = [audit_flight(r, columns, rules, bag_rule, duration_rules) for r in records]
    aggregate = summarize_flights(
        flights, month, year, rules, bag_rule, duration_rules,
        count_missing_in_average=count_missing_in_average,
    )

    print(f"SLA aggregate complete: {aggregate.total_flights} flights, {aggregate.compliant_flights} fully compliant.")
    return aggregate
