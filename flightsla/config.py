import os
from dataclasses import dataclass
from typing import Dict, Optional

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
OUTPUT_DIR = os.getenv("SLA_OUTPUT_DIR", os.path.join(PROJECT_ROOT, "outputs"))

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{range}"
DEFAULT_SHEET_ID = "1WguJvxihAo0MDW9Pf3Sy_wCzkTeEBOs_j7qFr14E3XU"
# A5:DF spans the full 110-column operations layout.
DEFAULT_SHEET_RANGE = "Performance!A5:DF"

# Environment variables that pin a semantic field to an explicit header.
COLUMN_OVERRIDE_ENV = {
    "landing": "SLA_DATE_COLUMN",
    "std": "SLA_STD_COLUMN",
    "flight_id": "SLA_FLIGHT_ID_COLUMN",
    "pushback": "SLA_PUSHBACK_COLUMN",
}


@dataclass(frozen=True)
class SheetConfig:
    sheet_id: str
    sheet_range: str
    api_key: str
    timeout: float


@dataclass(frozen=True)
class InsightsConfig:
    api_key: Optional[str]
    model: str
    temperature: float
    top_p: float
    sample_size: int


def load_sheet_config() -> SheetConfig:
    api_key = os.getenv("GOOGLE_SHEETS_API_KEY")
    if not api_key:
        raise RuntimeError("GOOGLE_SHEETS_API_KEY not set; cannot read the operations sheet")

    return SheetConfig(
        sheet_id=os.getenv("SLA_SHEET_ID", DEFAULT_SHEET_ID),
        sheet_range=os.getenv("SLA_SHEET_RANGE", DEFAULT_SHEET_RANGE),
        api_key=api_key,
        timeout=float(os.getenv("SLA_SHEET_TIMEOUT_SECONDS", "30")),
    )


def load_insights_config() -> InsightsConfig:
    return InsightsConfig(
        api_key=os.getenv("OPENAI_API_KEY"),
        model=os.getenv("SLA_INSIGHTS_MODEL", "gpt-4o-mini"),
        temperature=float(os.getenv("SLA_INSIGHTS_TEMPERATURE", "0.7")),
        top_p=float(os.getenv("SLA_INSIGHTS_TOP_P", "0.95")),
        sample_size=int(os.getenv("SLA_INSIGHTS_SAMPLE_SIZE", "15")),
    )


def column_overrides_from_env() -> Dict[str, str]:
    overrides = {}
    for field, env_name in COLUMN_OVERRIDE_ENV.items():
        value = (os.getenv(env_name) or "").strip()
        if value:
            overrides[field] = value
    return overrides


def data_file_from_env() -> Optional[str]:
    """Local CSV/XLSX source that replaces the sheet when set."""
    return (os.getenv("SLA_DATA_FILE") or "").strip() or None
