import glob
import math
import os
from datetime import date, datetime, time
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote

import pandas as pd
import requests

from flightsla.columns import FIELD_VARIANTS, resolve_column
from flightsla.config import SHEETS_API_URL, SheetConfig, load_sheet_config
from flightsla.schema import Table

SHEET_WIDTH = 110  # columns A..DF

# Zero-based, inclusive column ranges of the sheet that carry no data used by
# the dashboard (I-M, O-S, U-Y, AB-AF, AI-AJ, AL-AP, AR-AV, AY-BH, BK-BN,
# BP-BS, BU-BX, BZ-CC, CE-CH, CJ-CM, CO, CQ, CS-CV).
EXCLUDED_COLUMN_RANGES: Tuple[Tuple[int, int], ...] = (
    (8, 12), (14, 18), (20, 24), (27, 31), (34, 35), (37, 41), (43, 47),
    (50, 59), (62, 65), (67, 70), (72, 75), (77, 80), (82, 85), (87, 90),
    (92, 92), (94, 94), (96, 99),
)


class SheetFetchError(RuntimeError):
    """Raised when the spreadsheet API cannot return the operations range."""


def included_column_indices(width: int = SHEET_WIDTH) -> List[int]:
    return [
        i for i in range(width)
        if not any(start <= i <= end for start, end in EXCLUDED_COLUMN_RANGES)
    ]


def build_table_from_values(rows: Sequence[Sequence], exclude_columns: bool = True) -> Table:
    """
    Turns the raw 'values' matrix (first row = headers) into a Table.

    Blank headers are named 'Column N' after their position in the sheet, and
    short rows are padded with empty strings.
    """
    if not rows:
        return Table.empty()

    raw_headers = list(rows[0] or [])
    width = SHEET_WIDTH if exclude_columns else max(len(r) for r in rows)
    indices = included_column_indices(width) if exclude_columns else list(range(width))

    headers = []
    for i in indices:
        text = str(raw_headers[i]).strip() if i < len(raw_headers) and raw_headers[i] is not None else ""
        headers.append(text or f"Column {i + 1}")

    records = []
    for row in rows[1:]:
        record = {}
        for header, i in zip(headers, indices):
            record[header] = row[i] if i < len(row) and row[i] is not None else ""
        records.append(record)

    return Table(headers=tuple(headers), records=tuple(records))


def fetch_sheet_values(config: SheetConfig, session: Optional[requests.Session] = None) -> List[List]:
    """Reads the configured range from the Sheets v4 API and returns its 'values' matrix."""
    http = session or requests.Session()
    url = SHEETS_API_URL.format(sheet_id=config.sheet_id, range=quote(config.sheet_range, safe=""))

    try:
        response = http.get(url, params={"key": config.api_key}, timeout=config.timeout)
    except requests.RequestException as e:
        raise SheetFetchError(f"Could not reach the spreadsheet API: {e}") from e

    try:
        payload = response.json()
    except ValueError:
        payload = {}

    if not response.ok:
        message = (payload.get("error") or {}).get("message") or response.reason
        print(f"Spreadsheet API error ({response.status_code}): {message}")
        raise SheetFetchError(message)

    return payload.get("values") or []


def load_sheet_table(config: Optional[SheetConfig] = None, session: Optional[requests.Session] = None) -> Table:
    config = config or load_sheet_config()
    print(f"Fetching range '{config.sheet_range}' from sheet {config.sheet_id}...")
    values = fetch_sheet_values(config, session)
    table = build_table_from_values(values)
    print(f"Loaded {len(table)} rows with {len(table.headers)} columns.")
    return table


def _find_header_row(df_raw: pd.DataFrame) -> int:
    """Index of the first row that holds both the flight id and the STD headers, or -1."""
    for i, row in df_raw.iterrows():
        cells = [str(x) for x in row if str(x).strip()]
        if resolve_column(cells, FIELD_VARIANTS["flight_id"]) and resolve_column(cells, FIELD_VARIANTS["std"]):
            return i
    return -1


def _excel_cell_text(value):
    """
    Renders a typed Excel cell the way the sheet API returns it: dates as
    'DD/MM/YYYY HH:MM' (date only at midnight), clock cells as 'HH:MM' and
    whole numbers without a trailing '.0'. Fractional numbers stay numeric.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)) or value is pd.NaT:
        return ""
    if isinstance(value, datetime):
        if value.hour == 0 and value.minute == 0 and value.second == 0:
            return value.strftime("%d/%m/%Y")
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return value
    return str(value)


def _read_raw(path: str) -> pd.DataFrame:
    if path.lower().endswith(".csv"):
        return pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
    df_raw = pd.read_excel(path, header=None, dtype=object)
    return df_raw.apply(lambda col: col.map(_excel_cell_text))


def _load_frame(path: str) -> Optional[pd.DataFrame]:
    df_raw = _read_raw(path)
    header_row_index = _find_header_row(df_raw)
    if header_row_index == -1:
        print(f"Warning: Could not find a valid header row in {path}. Skipping file.")
        return None

    headers = [str(h).strip() for h in df_raw.iloc[header_row_index]]
    df = df_raw.iloc[header_row_index + 1:].copy()
    df.columns = headers
    # Drop fully blank spacer rows left by the sheet layout.
    df = df[(df != "").any(axis=1)]
    return df.reset_index(drop=True)


def _source_files(path: str) -> Iterable[str]:
    if os.path.isdir(path):
        files = sorted(glob.glob(os.path.join(path, "*.xlsx")) + glob.glob(os.path.join(path, "*.csv")))
        if not files:
            raise FileNotFoundError(f"No Excel (.xlsx) or CSV files found in the directory: {path}")
        print(f"Found {len(files)} files: {files}")
        return files
    if not os.path.exists(path):
        raise FileNotFoundError(f"Data file not found: {path}")
    return [path]


def load_table_from_file(path: str) -> Table:
    """
    Loads an export of the operations sheet (CSV or XLSX, or a directory of
    them) into a Table. Cells are read as the text the sheet API would return,
    so typed Excel dates and clock times reach the parsers as DD/MM/YYYY and HH:MM.
    """
    frames = [f for f in (_load_frame(p) for p in _source_files(path)) if f is not None]
    if not frames:
        print("No tables were loaded. Please check the files for a header row with 'ID Voo' and STD.")
        return Table.empty()

    combined = pd.concat(frames, ignore_index=True).fillna("")
    print(f"Successfully loaded {len(combined)} rows from {path}.")
    return Table.from_dataframe(combined)
