# cli.py
import os
import sys

from flightsla.columns import require_columns, resolve_columns
from flightsla.config import OUTPUT_DIR, column_overrides_from_env
from flightsla.kpis import compute_monthly_aggregate
from flightsla.load import load_sheet_table, load_table_from_file
from flightsla.report import flight_table_frame, sla_chart_frame, summary_cards
from flightsla.visualize import plot_sla_performance

USAGE = "Usage: flightsla-report <Flight_Data.xlsx | data_dir | sheet> <month 1-12> <year>"


def _parse_period(month_arg: str, year_arg: str):
    try:
        month, year = int(month_arg), int(year_arg)
    except ValueError:
        return None
    if not 1 <= month <= 12 or year < 1:
        return None
    return month, year


def load_source(source: str):
    if source == "sheet":
        return load_sheet_table()
    return load_table_from_file(source)


def print_summary(aggregate) -> None:
    cards = summary_cards(aggregate)
    print(f"\n--- SLA summary {aggregate.month:02d}/{aggregate.year} ---")
    print(f"Flights: {cards['total_flights']} of {cards['potential_flights']} potential")
    print(f"Fully compliant: {cards['compliant_flights']} ({cards['compliance_pct']}%)")
    for row in sla_chart_frame(aggregate).itertuples():
        status = "OK" if row.met else "BELOW TARGET"
        print(f"  {row.label:<26} {row.realized:>6.1f}% (target {row.target}%) {status}")
    for key, value in aggregate.duration_averages.items():
        print(f"  {key:<26} {value}")
    for warning in aggregate.warnings:
        print(f"Warning: {warning}")


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    if len(args) < 3:
        print(USAGE)
        sys.exit(1)

    period = _parse_period(args[1], args[2])
    if period is None:
        print(f"Invalid month/year: {args[1]} {args[2]}")
        print(USAGE)
        sys.exit(1)
    month, year = period

    table = load_source(args[0])
    columns = resolve_columns(table.headers, column_overrides_from_env())
    require_columns(columns)

    aggregate = compute_monthly_aggregate(table, month, year, columns=columns)

    os.makedirs(OUTPUT_DIR, exist_ok=True)
    suffix = f"{year:04d}_{month:02d}"

    audits_path = os.path.join(OUTPUT_DIR, f"flight_audits_{suffix}.csv")
    flight_table_frame(aggregate.flights).to_csv(audits_path, index=False)
    print(f"Flight audits saved to {audits_path}")

    summary_path = os.path.join(OUTPUT_DIR, f"sla_summary_{suffix}.csv")
    chart_df = sla_chart_frame(aggregate)
    chart_df.to_csv(summary_path, index=False)
    print(f"SLA summary saved to {summary_path}")

    plot_sla_performance(chart_df, os.path.join(OUTPUT_DIR, f"sla_performance_{suffix}.html"))

    print_summary(aggregate)
    return aggregate


if __name__ == "__main__":
    main()
