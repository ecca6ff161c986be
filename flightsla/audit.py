from typing import Dict, Optional, Sequence

from flightsla.columns import ColumnMap
from flightsla.parse import (
    clock_portion,
    minutes_to_clock,
    parse_locale_number,
    parse_percent,
    parse_time_minutes,
)
from flightsla.rules import (
    BAG_RULE,
    CHECKPOINT_RULES,
    DURATION_RULES,
    BagRule,
    CheckpointRule,
    DurationRule,
    bags_required,
    checkpoint_target,
)
from flightsla.schema import CheckpointResult, FlightAudit, RawField, Record


def time_score(real: int, target: int) -> float:
    """
    Performance of one timed checkpoint: 100 when on time, then one point
    lost per minute late, floored at 0.
    """
    if real <= target:
        return 100.0
    return float(max(0, 100 - (real - target)))


def _display(value) -> str:
    text = str(value).strip() if value is not None else ""
    return text or "--"


def audit_checkpoint(record: Record, columns: ColumnMap, rule: CheckpointRule) -> CheckpointResult:
    std_raw = columns.value(record, "std")
    real_raw = columns.value(record, rule.field)
    std = parse_time_minutes(std_raw)
    real = parse_time_minutes(real_raw)
    target = checkpoint_target(std, rule)

    raw_details = (
        RawField(label="Flight STD", column=columns.get("std"), value=std_raw),
        RawField(label=f"Actual {rule.label}", column=columns.get(rule.field), value=real_raw),
    )
    target_display = minutes_to_clock(target) if target is not None else "--"

    if real is None or target is None:
        # No data: the flight is not penalised for a checkpoint it cannot measure.
        missing = "STD" if std is None else rule.label
        return CheckpointResult(
            key=rule.key,
            label=rule.label,
            real_display=clock_portion(real_raw) or "--",
            target_display=target_display,
            real_value=real,
            target_value=target,
            measured=False,
            passed=True,
            score=0.0,
            logic=f"No {missing} recorded for this flight; checkpoint not evaluated.",
            raw_details=raw_details,
        )

    return CheckpointResult(
        key=rule.key,
        label=rule.label,
        real_display=clock_portion(real_raw),
        target_display=target_display,
        real_value=real,
        target_value=target,
        measured=True,
        passed=real <= target,
        score=time_score(real, target),
        logic=(
            f"Actual ({_display(real_raw)}) vs target ({target_display}). "
            f"Target based on STD ({_display(std_raw)}) - {rule.offset_minutes} min."
        ),
        raw_details=raw_details,
    )


def audit_bags(record: Record, columns: ColumnMap, rule: BagRule = BAG_RULE) -> CheckpointResult:
    pax_raw = columns.value(record, rule.pax_field)
    bags_raw = columns.value(record, rule.bags_field)
    pax = parse_locale_number(pax_raw)
    bags = parse_locale_number(bags_raw)

    raw_details = (
        RawField(label="Total PAX", column=columns.get(rule.pax_field), value=pax_raw),
        RawField(label="Bags collected", column=columns.get(rule.bags_field), value=bags_raw),
    )

    if bags_required(pax, rule):
        return CheckpointResult(
            key=rule.key,
            label=rule.label,
            real_display=f"{bags:g}",
            target_display=f"{rule.min_bags:g}",
            real_value=bags,
            target_value=rule.min_bags,
            measured=True,
            passed=bags >= rule.min_bags,
            score=min(100.0, bags / rule.min_bags * 100),
            logic=(
                f"Flight with {pax:g} passengers (>= {rule.pax_threshold:g}). "
                f"Requires at least {rule.min_bags:g} bags. Actual: {bags:g}."
            ),
            raw_details=raw_details,
        )

    # Exempt: low occupancy flights always meet the bag target.
    return CheckpointResult(
        key=rule.key,
        label=rule.label,
        real_display=f"{bags:g}",
        target_display="--",
        real_value=bags,
        target_value=None,
        measured=True,
        passed=True,
        score=100.0,
        logic=(
            f"Flight with {pax:g} passengers (< {rule.pax_threshold:g}). "
            "Exempt from the hand bag target."
        ),
        raw_details=raw_details,
    )


def interval_minutes(record: Record, columns: ColumnMap, rule: DurationRule) -> Optional[int]:
    """Minutes between two checkpoints, or None unless both exist and end after start."""
    start = parse_time_minutes(columns.value(record, rule.start_field))
    end = parse_time_minutes(columns.value(record, rule.end_field))
    if start is None or end is None:
        return None
    elapsed = end - start
    return elapsed if elapsed > 0 else None


def audit_flight(
    record: Record,
    columns: ColumnMap,
    rules: Sequence[CheckpointRule] = CHECKPOINT_RULES,
    bag_rule: BagRule = BAG_RULE,
    duration_rules: Sequence[DurationRule] = DURATION_RULES,
) -> FlightAudit:
    """
    Evaluates one flight record against every checkpoint rule.

    Args:
        record: One row of the source table.
        columns: The table's resolved column map.
        rules: Timed checkpoint rules (offsets from STD).
        bag_rule: The hand bag quantity rule.
        duration_rules: Flow intervals derived from pairs of checkpoints.

    Returns:
        A FlightAudit with one CheckpointResult per rule, the overall
        compliance flag and the derived durations.
    """
    checks = tuple(audit_checkpoint(record, columns, rule) for rule in rules)
    checks += (audit_bags(record, columns, bag_rule),)

    durations: Dict[str, Optional[int]] = {
        rule.key: interval_minutes(record, columns, rule) for rule in duration_rules
    }

    return FlightAudit(
        flight_id=str(columns.value(record, "flight_id")),
        landing=str(columns.value(record, "landing")),
        std=clock_portion(columns.value(record, "std")),
        checks=checks,
        compliant=all(check.passed for check in checks),
        durations=durations,
        pax=parse_locale_number(columns.value(record, bag_rule.pax_field)),
        bags=parse_locale_number(columns.value(record, bag_rule.bags_field)),
        orbital_punctuality=parse_percent(columns.value(record, "orbital_punctuality")),
        base_punctuality=parse_percent(columns.value(record, "base_punctuality")),
    )
