import sys
import tempfile
import unittest
from datetime import datetime, time
from pathlib import Path

import requests
from openpyxl import Workbook

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from flightsla.config import SheetConfig
from flightsla.kpis import compute_monthly_aggregate
from flightsla.load import (
    SHEET_WIDTH,
    SheetFetchError,
    build_table_from_values,
    fetch_sheet_values,
    included_column_indices,
    load_sheet_table,
    load_table_from_file,
)

CONFIG = SheetConfig(sheet_id="sheet-1", sheet_range="Performance!A5:DF", api_key="k", timeout=5)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error:
            raise self.error
        return self.response


class BuildTableTests(unittest.TestCase):
    def test_empty_payload_is_empty_table(self):
        table = build_table_from_values([])
        self.assertEqual(len(table), 0)
        self.assertEqual(table.headers, ())

    def test_excluded_ranges_are_dropped(self):
        indices = included_column_indices()
        self.assertEqual(indices[:9], [0, 1, 2, 3, 4, 5, 6, 7, 13])
        self.assertNotIn(50, indices)
        self.assertNotIn(99, indices)
        self.assertIn(100, indices)
        self.assertEqual(indices[-1], SHEET_WIDTH - 1)

    def test_blank_headers_are_named_and_rows_padded(self):
        header = ["ID Voo", "Pouso", ""] + [f"H{i}" for i in range(3, SHEET_WIDTH)]
        table = build_table_from_values([header, ["G3 1", "05/03/2025"]])
        self.assertEqual(table.headers[:3], ("ID Voo", "Pouso", "Column 3"))
        self.assertNotIn("H8", table.headers)
        self.assertIn("H13", table.headers)
        record = table.records[0]
        self.assertEqual(record["ID Voo"], "G3 1")
        self.assertEqual(record["Column 3"], "")
        self.assertEqual(record["H13"], "")

    def test_without_exclusion_keeps_every_column(self):
        table = build_table_from_values([["A", "B"], ["1"]], exclude_columns=False)
        self.assertEqual(table.headers, ("A", "B"))
        self.assertEqual(table.records[0], {"A": "1", "B": ""})


class FetchSheetTests(unittest.TestCase):
    def test_returns_values(self):
        session = FakeSession(FakeResponse(payload={"values": [["ID Voo"], ["G3 1"]]}))
        values = fetch_sheet_values(CONFIG, session)
        self.assertEqual(values, [["ID Voo"], ["G3 1"]])
        url, params, timeout = session.calls[0]
        self.assertIn("sheet-1", url)
        self.assertIn("Performance%21A5%3ADF", url)
        self.assertEqual(params, {"key": "k"})
        self.assertEqual(timeout, 5)

    def test_api_error_message_is_raised(self):
        payload = {"error": {"message": "API key not valid."}}
        session = FakeSession(FakeResponse(status_code=400, payload=payload, reason="Bad Request"))
        with self.assertRaises(SheetFetchError) as ctx:
            fetch_sheet_values(CONFIG, session)
        self.assertIn("API key not valid", str(ctx.exception))

    def test_network_error_is_wrapped(self):
        session = FakeSession(error=requests.ConnectionError("down"))
        with self.assertRaises(SheetFetchError):
            fetch_sheet_values(CONFIG, session)

    def test_missing_values_key_is_empty_table(self):
        session = FakeSession(FakeResponse(payload={"range": "Performance!A5:DF"}))
        self.assertEqual(len(load_sheet_table(CONFIG, session)), 0)


class LoadFileTests(unittest.TestCase):
    def test_csv_with_title_rows(self):
        content = (
            "Relatório de Performance,,\n"
            ",,\n"
            "ID Voo,Pouso,Previsão Decolagem\n"
            "G3 1,05/03/2025 15:30,16:40\n"
            ",,\n"
            "G3 2,07/03/2025 15:30,16:40\n"
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "march.csv"
            path.write_text(content, encoding="utf-8")
            table = load_table_from_file(str(path))

            self.assertEqual(table.headers, ("ID Voo", "Pouso", "Previsão Decolagem"))
            self.assertEqual(len(table), 2)
            self.assertEqual(table.records[1]["Pouso"], "07/03/2025 15:30")

            # A directory load concatenates every export inside it.
            (Path(tmp) / "april.csv").write_text(content, encoding="utf-8")
            self.assertEqual(len(load_table_from_file(tmp)), 4)

    def test_xlsx_with_typed_date_and_time_cells(self):
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(["Relatório de Performance"])
        sheet.append(["ID Voo", "Pouso", "Previsão Decolagem", "Abertura CHECK IN", "PAX Atendidos", "Data"])
        sheet.append(["G3 1", datetime(2025, 3, 5, 15, 30), time(16, 40), time(13, 0), 120, datetime(2025, 3, 5)])

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "march.xlsx"
            workbook.save(path)
            table = load_table_from_file(str(path))

        record = table.records[0]
        self.assertEqual(record["Pouso"], "05/03/2025 15:30")
        self.assertEqual(record["Previsão Decolagem"], "16:40")
        self.assertEqual(record["PAX Atendidos"], "120")
        self.assertEqual(record["Data"], "05/03/2025")

        aggregate = compute_monthly_aggregate(table, 3, 2025)
        self.assertEqual(aggregate.total_flights, 1)
        self.assertEqual(aggregate.checkpoint_scores["checkin_open"], 100.0)

    def test_file_without_header_row_is_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "other.csv"
            path.write_text("a,b\n1,2\n", encoding="utf-8")
            self.assertEqual(len(load_table_from_file(str(path))), 0)

    def test_missing_path_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_table_from_file("/nonexistent/flights.xlsx")


if __name__ == "__main__":
    unittest.main()
