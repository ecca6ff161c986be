# flightsla/schema.py

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

import pandas as pd

from flightsla.parse import format_duration

CellValue = Union[str, int, float]
Record = Dict[str, CellValue]


@dataclass(frozen=True)
class Table:
    headers: Tuple[str, ...]
    records: Tuple[Record, ...]

    @classmethod
    def empty(cls) -> "Table":
        return cls(headers=(), records=())

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "Table":
        """Builds a Table from a DataFrame, turning missing cells into empty strings."""
        headers = tuple(str(c) for c in df.columns)
        clean = df.astype(object).where(pd.notna(df), "")
        clean.columns = list(headers)
        return cls(headers=headers, records=tuple(clean.to_dict(orient="records")))

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.records), columns=list(self.headers))

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class RawField:
    label: str
    column: str
    value: CellValue


@dataclass(frozen=True)
class CheckpointResult:
    key: str
    label: str
    real_display: str
    target_display: str
    real_value: Optional[float]
    target_value: Optional[float]
    measured: bool
    passed: bool
    score: float
    logic: str
    raw_details: Tuple[RawField, ...] = ()


@dataclass(frozen=True)
class FlightAudit:
    flight_id: str
    landing: str
    std: str
    checks: Tuple[CheckpointResult, ...]
    compliant: bool
    durations: Dict[str, Optional[int]]
    pax: float
    bags: float
    orbital_punctuality: float
    base_punctuality: float

    def check(self, key: str) -> CheckpointResult:
        for result in self.checks:
            if result.key == key:
                return result
        raise KeyError(f"Flight {self.flight_id!r} has no checkpoint {key!r}")

    def duration_display(self, key: str) -> str:
        """'HH:MM' for a derived interval, or '--' when it could not be measured."""
        minutes = self.durations.get(key)
        return format_duration(minutes) if minutes is not None else "--"


@dataclass(frozen=True)
class MonthlyAggregate:
    month: int
    year: int
    total_flights: int
    potential_flights: int
    compliant_flights: int
    non_compliant_flights: int
    compliance_pct: float
    checkpoint_scores: Dict[str, float]
    duration_averages: Dict[str, str]
    duration_minutes: Dict[str, Optional[float]]
    total_pax: float
    total_bags: float
    avg_orbital_punctuality: float
    avg_base_punctuality: float
    flights: Tuple[FlightAudit, ...] = ()
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LostFoundCheck:
    key: str
    label: str
    value_display: str
    target_display: str
    passed: Optional[bool]

    @property
    def skipped(self) -> bool:
        return self.passed is None


@dataclass(frozen=True)
class LostFoundAudit:
    record_id: str
    landing: str
    checks: Tuple[LostFoundCheck, ...]
    compliant: bool


@dataclass(frozen=True)
class LostFoundRate:
    key: str
    label: str
    evaluated: int
    ok: int
    rate: int
    target: int


@dataclass(frozen=True)
class LostFoundSummary:
    month: int
    year: int
    total: int
    compliant: int
    non_compliant: int
    rates: Tuple[LostFoundRate, ...]
    audits: Tuple[LostFoundAudit, ...] = ()
    warnings: Tuple[str, ...] = ()
