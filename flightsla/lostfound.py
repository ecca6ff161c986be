from typing import Optional

from flightsla.columns import ColumnMap, resolve_columns
from flightsla.kpis import check_selection, filter_by_month
from flightsla.parse import minutes_to_clock, parse_datetime, parse_time_minutes, round_half_up
from flightsla.rules import (
    CONTENT_LIST_KEY,
    CONTENT_LIST_LABEL,
    CONTENT_LIST_MAX_HOURS,
    LOST_FOUND_RULES,
    LOST_FOUND_SLA_TARGET,
    lost_found_target,
)
from flightsla.schema import LostFoundAudit, LostFoundCheck, LostFoundRate, LostFoundSummary, Record, Table


def content_list_within_window(record: Record, columns: ColumnMap) -> Optional[bool]:
    """
    True when the content list was requested within 72h of the AHL opening.
    None when either timestamp is missing. Uses full date+time, not minutes of day.
    """
    opened = parse_datetime(columns.value(record, "lf_ahl_open"))
    requested = parse_datetime(columns.value(record, "lf_content_list"))
    if opened is None or requested is None:
        return None
    hours = (requested - opened).total_seconds() / 3600
    return hours <= CONTENT_LIST_MAX_HOURS


def audit_lost_found(record: Record, columns: ColumnMap) -> LostFoundAudit:
    target = lost_found_target(parse_time_minutes(columns.value(record, "lf_cutoff")))
    target_display = minutes_to_clock(target) if target is not None else "--"

    checks = []
    for rule in LOST_FOUND_RULES:
        raw = columns.value(record, rule.field)
        real = parse_time_minutes(raw)
        passed = real <= target if real is not None and target is not None else None
        checks.append(LostFoundCheck(
            key=rule.key,
            label=rule.label,
            value_display=str(raw).strip() or "--",
            target_display=target_display,
            passed=passed,
        ))

    checks.append(LostFoundCheck(
        key=CONTENT_LIST_KEY,
        label=CONTENT_LIST_LABEL,
        value_display="OK" if str(columns.value(record, "lf_content_list")).strip() else "--",
        target_display=f"{CONTENT_LIST_MAX_HOURS}h",
        passed=content_list_within_window(record, columns),
    ))

    return LostFoundAudit(
        record_id=str(columns.value(record, "flight_id")),
        landing=str(columns.value(record, "landing")),
        checks=tuple(checks),
        compliant=all(c.passed is not False for c in checks),
    )


def summarize_lost_found(
    table: Table,
    month: int,
    year: int,
    columns: Optional[ColumnMap] = None,
) -> LostFoundSummary:
    """
    Lost and found compliance for one month. Each check's rate is the share of
    evaluated records that passed, rounded to a whole percent; a check with no
    evaluated record reports 100.
    """
    check_selection(table, month, year)
    print(f"Computing lost and found summary for {month:02d}/{year}...")

    columns = columns or resolve_columns(table.headers)
    audits = [audit_lost_found(r, columns) for r in filter_by_month(table, month, year, columns)]

    labels = [(rule.key, rule.label) for rule in LOST_FOUND_RULES] + [(CONTENT_LIST_KEY, CONTENT_LIST_LABEL)]
    rates = []
    for key, label in labels:
        evaluated = ok = 0
        for audit in audits:
            check = next(c for c in audit.checks if c.key == key)
            if check.passed is None:
                continue
            evaluated += 1
            if check.passed:
                ok += 1
        rate = int(round_half_up(ok / evaluated * 100)) if evaluated else 100
        rates.append(LostFoundRate(key=key, label=label, evaluated=evaluated, ok=ok, rate=rate, target=LOST_FOUND_SLA_TARGET))

    compliant = sum(1 for a in audits if a.compliant)
    warnings = () if columns.get("landing") else ("landing date column not found in the sheet headers",)
    return LostFoundSummary(
        month=month,
        year=year,
        total=len(audits),
        compliant=compliant,
        non_compliant=len(audits) - compliant,
        rates=tuple(rates),
        audits=tuple(audits),
        warnings=warnings,
    )
