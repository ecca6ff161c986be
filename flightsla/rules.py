from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class CheckpointRule:
    key: str
    label: str
    field: str
    offset_minutes: int
    sla_target: float
    target_text: str
    rule_text: str
    description: str


@dataclass(frozen=True)
class BagRule:
    key: str
    label: str
    pax_field: str
    bags_field: str
    pax_threshold: float
    min_bags: float
    sla_target: float
    target_text: str
    rule_text: str
    description: str


@dataclass(frozen=True)
class DurationRule:
    key: str
    label: str
    start_field: str
    end_field: str
    formula: str
    description: str
    importance: str


@dataclass(frozen=True)
class LostFoundRule:
    key: str
    label: str
    field: str


CHECKPOINT_RULES: Tuple[CheckpointRule, ...] = (
    CheckpointRule(
        key="checkin_open",
        label="Check-in Opening",
        field="checkin_open",
        offset_minutes=210,
        sla_target=98,
        target_text="STD - 210 minutes (3h30 before departure).",
        rule_text="Target: (STD - 210 min) vs actual check-in opening.",
        description="Measures punctuality of the check-in counter opening.",
    ),
    CheckpointRule(
        key="checkin_close",
        label="Check-in Closing",
        field="checkin_close",
        offset_minutes=60,
        sla_target=98,
        target_text="STD - 60 minutes (1h before departure).",
        rule_text="Target: (STD - 60 min) vs actual check-in closing.",
        description="Ensures passenger processing closes in time for the manifest.",
    ),
    CheckpointRule(
        key="boarding_start",
        label="Boarding Start",
        field="boarding_start",
        offset_minutes=40,
        sla_target=95,
        target_text="STD - 40 minutes.",
        rule_text="Target: (STD - 40 min) vs actual boarding start.",
        description="Flow indicator for an efficient boarding.",
    ),
    CheckpointRule(
        key="last_pax",
        label="Last Passenger On Board",
        field="last_pax",
        offset_minutes=10,
        sla_target=95,
        target_text="STD - 10 minutes.",
        rule_text="Target: (STD - 10 min) vs actual last passenger on board.",
        description="Sets the limit for closing the aircraft doors.",
    ),
)

BAG_RULE = BagRule(
    key="hand_bags",
    label="Hand Bags",
    pax_field="pax",
    bags_field="bags",
    pax_threshold=107,
    min_bags=35,
    sla_target=70,
    target_text="At least 35 bags (when occupancy is high).",
    rule_text="If PAX >= 107, target is 35 bags. Below 107 the flight is exempt (100%).",
    description="Cabin space management and boarding agility.",
)

DURATION_RULES: Tuple[DurationRule, ...] = (
    DurationRule(
        key="service_cycle",
        label="Service Cycle",
        start_field="checkin_open",
        end_field="last_pax",
        formula="Last passenger on board - Check-in opening",
        description=(
            "Total passenger processing time, from the first counter service "
            "until the aircraft is closed."
        ),
        importance=(
            "Sizes ground staff productivity and makes sure passenger flow "
            "does not push the STD."
        ),
    ),
    DurationRule(
        key="boarding_efficiency",
        label="Boarding Efficiency",
        start_field="boarding_start",
        end_field="last_pax",
        formula="Last passenger on board - Boarding start",
        description="Net time spent boarding every passenger at the gate.",
        importance="Shows how fast the gate team clears the queue and seats the cabin.",
    ),
    DurationRule(
        key="ground_turnaround",
        label="Ground Turnaround",
        start_field="landing",
        end_field="pushback",
        formula="Pushback time - Landing time",
        description="Complete aircraft turnaround on the ground, between arrival and departure.",
        importance=(
            "Reflects coordination between ramp, cleaning, catering and traffic "
            "to release the aircraft as early as possible."
        ),
    ),
)

# Lost and found: a shared target of cutoff + 2h, plus a 72h content-list window.
LOST_FOUND_TARGET_OFFSET = 120
CONTENT_LIST_MAX_HOURS = 72
LOST_FOUND_SLA_TARGET = 95

LOST_FOUND_RULES: Tuple[LostFoundRule, ...] = (
    LostFoundRule(key="ahl_open", label="AHL Opening", field="lf_ahl_open"),
    LostFoundRule(key="ohd_open", label="OHD Opening", field="lf_ohd_open"),
    LostFoundRule(key="ahl_delivered", label="Delivered to Carrier", field="lf_ahl_delivered"),
)
CONTENT_LIST_KEY = "content_list"
CONTENT_LIST_LABEL = "Content List"

# Weekdays with a scheduled operation, in numpy weekmask notation.
OPERATING_WEEKMASK = "Mon Wed Fri"


def checkpoint_target(std_minutes: Optional[int], rule: CheckpointRule) -> Optional[int]:
    """Required-by time in minutes of day; not wrapped, so early STDs can yield negative targets."""
    if std_minutes is None:
        return None
    return std_minutes - rule.offset_minutes


def lost_found_target(cutoff_minutes: Optional[int]) -> Optional[int]:
    if cutoff_minutes is None:
        return None
    return cutoff_minutes + LOST_FOUND_TARGET_OFFSET


def bags_required(pax: float, rule: BagRule = BAG_RULE) -> bool:
    return pax >= rule.pax_threshold
