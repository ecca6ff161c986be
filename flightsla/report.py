from typing import Dict, List, Sequence

import pandas as pd

from flightsla.parse import round_half_up
from flightsla.rules import BAG_RULE, CHECKPOINT_RULES, DURATION_RULES
from flightsla.schema import FlightAudit, LostFoundSummary, MonthlyAggregate, Table

FLIGHT_FILTERS = ("all", "compliant", "non_compliant")


def summary_cards(aggregate: MonthlyAggregate) -> Dict[str, object]:
    return {
        "total_flights": aggregate.total_flights,
        "compliant_flights": aggregate.compliant_flights,
        "non_compliant_flights": aggregate.non_compliant_flights,
        "potential_flights": aggregate.potential_flights,
        "compliance_pct": aggregate.compliance_pct,
        "total_pax": aggregate.total_pax,
        "total_bags": aggregate.total_bags,
        "avg_orbital_punctuality": aggregate.avg_orbital_punctuality,
        "avg_base_punctuality": aggregate.avg_base_punctuality,
    }


def sla_chart_frame(aggregate: MonthlyAggregate) -> pd.DataFrame:
    """
    One row per checkpoint: realized average score vs. its SLA target and the gap.
    """
    rows = []
    for rule in (*CHECKPOINT_RULES, BAG_RULE):
        realized = aggregate.checkpoint_scores.get(rule.key, 0.0)
        rows.append({
            "checkpoint": rule.key,
            "label": rule.label,
            "realized": realized,
            "target": rule.sla_target,
            "gap": round_half_up(realized - rule.sla_target, 1),
            "met": realized >= rule.sla_target,
        })
    return pd.DataFrame(rows, columns=["checkpoint", "label", "realized", "target", "gap", "met"])


def flux_metrics_frame(aggregate: MonthlyAggregate) -> pd.DataFrame:
    rows = [
        {
            "metric": rule.key,
            "label": rule.label,
            "average": aggregate.duration_averages.get(rule.key, "00:00"),
            "formula": rule.formula,
        }
        for rule in DURATION_RULES
    ]
    return pd.DataFrame(rows, columns=["metric", "label", "average", "formula"])


def filter_flights(flights: Sequence[FlightAudit], status: str = "all") -> List[FlightAudit]:
    if status not in FLIGHT_FILTERS:
        raise ValueError(f"status must be one of {FLIGHT_FILTERS}, got {status!r}")
    if status == "compliant":
        return [f for f in flights if f.compliant]
    if status == "non_compliant":
        return [f for f in flights if not f.compliant]
    return list(flights)


def flight_table_frame(flights: Sequence[FlightAudit]) -> pd.DataFrame:
    """One row per flight: identification, each checkpoint's actual value and score, and flow durations."""
    columns = ["flight_id", "std", "landing"]
    columns += [rule.label for rule in (*CHECKPOINT_RULES, BAG_RULE)]
    columns += [rule.label for rule in DURATION_RULES]
    columns += ["compliant"]

    rows = []
    for flight in flights:
        row = {"flight_id": flight.flight_id, "std": flight.std, "landing": flight.landing}
        for check in flight.checks:
            if check.measured:
                row[check.label] = f"{check.real_display} ({check.score:.0f}%)"
            else:
                row[check.label] = "--"
        for rule in DURATION_RULES:
            row[rule.label] = flight.duration_display(rule.key)
        row["compliant"] = flight.compliant
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def audit_trail(flight: FlightAudit, checkpoint_key: str) -> Dict[str, object]:
    """Everything the audit-trail view shows for one flight checkpoint."""
    check = flight.check(checkpoint_key)
    return {
        "flight_id": flight.flight_id,
        "checkpoint": check.label,
        "real": check.real_display,
        "target": check.target_display,
        "passed": check.passed,
        "measured": check.measured,
        "score": int(round_half_up(check.score)),
        "logic": check.logic,
        "raw_details": [
            {"label": d.label, "column": d.column, "value": d.value if str(d.value).strip() else "--"}
            for d in check.raw_details
        ],
    }


def metric_guide(checkpoint_key: str) -> Dict[str, str]:
    for rule in CHECKPOINT_RULES:
        if rule.key == checkpoint_key:
            return {
                "name": rule.label,
                "source_field": rule.field,
                "rule": rule.rule_text,
                "target": rule.target_text,
                "description": rule.description,
            }
    if checkpoint_key == BAG_RULE.key:
        return {
            "name": BAG_RULE.label,
            "source_field": BAG_RULE.bags_field,
            "rule": BAG_RULE.rule_text,
            "target": BAG_RULE.target_text,
            "description": BAG_RULE.description,
        }
    raise KeyError(checkpoint_key)


def flux_guide(metric_key: str) -> Dict[str, str]:
    for rule in DURATION_RULES:
        if rule.key == metric_key:
            return {
                "name": rule.label,
                "formula": rule.formula,
                "description": rule.description,
                "importance": rule.importance,
            }
    raise KeyError(metric_key)


def search_records(table: Table, term: str) -> Table:
    """Case-insensitive substring search across every cell of every record."""
    if not term:
        return table
    needle = term.casefold()
    matches = tuple(
        record for record in table.records
        if any(needle in str(value).casefold() for value in record.values())
    )
    return Table(headers=table.headers, records=matches)


def lost_found_chart_frame(summary: LostFoundSummary) -> pd.DataFrame:
    rows = [
        {"check": r.key, "label": r.label, "realized": r.rate, "target": r.target, "met": r.rate >= r.target}
        for r in summary.rates
    ]
    return pd.DataFrame(rows, columns=["check", "label", "realized", "target", "met"])


def lost_found_table_frame(summary: LostFoundSummary, status: str = "all") -> pd.DataFrame:
    if status not in FLIGHT_FILTERS:
        raise ValueError(f"status must be one of {FLIGHT_FILTERS}, got {status!r}")
    labels = [r.label for r in summary.rates]
    rows = []
    for audit in summary.audits:
        if status == "compliant" and not audit.compliant:
            continue
        if status == "non_compliant" and audit.compliant:
            continue
        row = {"record_id": audit.record_id, "landing": audit.landing}
        for check in audit.checks:
            row[check.label] = "--" if check.skipped else f"{check.value_display} (target {check.target_display})"
        row["compliant"] = audit.compliant
        rows.append(row)
    return pd.DataFrame(rows, columns=["record_id", "landing", *labels, "compliant"])
