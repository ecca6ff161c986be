import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from flightsla import cli
from flightsla.columns import MissingColumnError
from flightsla.config import column_overrides_from_env, load_sheet_config

CSV = (
    "ID Voo,Pouso,Previsão Decolagem,Abertura CHECK IN\n"
    "G3 1,05/03/2025 15:30,16:40,13:00\n"
    "G3 2,07/03/2025 15:30,16:40,13:20\n"
)


class CliTests(unittest.TestCase):
    def test_usage_error_exits_with_status_1(self):
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["data.csv"])
        self.assertEqual(ctx.exception.code, 1)

    def test_invalid_month_exits_with_status_1(self):
        with self.assertRaises(SystemExit) as ctx:
            cli.main(["data.csv", "13", "2025"])
        self.assertEqual(ctx.exception.code, 1)

    def test_writes_reports(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "flights.csv"
            source.write_text(CSV, encoding="utf-8")
            out_dir = Path(tmp) / "outputs"

            with mock.patch.object(cli, "OUTPUT_DIR", str(out_dir)), mock.patch.dict(os.environ, {}, clear=False):
                os.environ.pop("SLA_DATE_COLUMN", None)
                aggregate = cli.main([str(source), "3", "2025"])

            self.assertEqual(aggregate.total_flights, 2)
            self.assertTrue((out_dir / "flight_audits_2025_03.csv").exists())
            self.assertTrue((out_dir / "sla_summary_2025_03.csv").exists())
            self.assertTrue((out_dir / "sla_performance_2025_03.html").exists())

    def test_missing_date_column_is_rejected(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "flights.csv"
            source.write_text("ID Voo,Previsão Decolagem\nG3 1,16:40\n", encoding="utf-8")
            with mock.patch.dict(os.environ, {}, clear=False):
                os.environ.pop("SLA_DATE_COLUMN", None)
                with self.assertRaises(MissingColumnError):
                    cli.main([str(source), "3", "2025"])


class ConfigTests(unittest.TestCase):
    def test_sheet_config_requires_api_key(self):
        with mock.patch.dict(os.environ, {"GOOGLE_SHEETS_API_KEY": ""}):
            with self.assertRaises(RuntimeError):
                load_sheet_config()

    def test_sheet_config_from_env(self):
        env = {"GOOGLE_SHEETS_API_KEY": "k", "SLA_SHEET_RANGE": "Ops!A1:Z", "SLA_SHEET_TIMEOUT_SECONDS": "12"}
        with mock.patch.dict(os.environ, env):
            config = load_sheet_config()
        self.assertEqual(config.api_key, "k")
        self.assertEqual(config.sheet_range, "Ops!A1:Z")
        self.assertEqual(config.timeout, 12.0)

    def test_column_overrides(self):
        with mock.patch.dict(os.environ, {"SLA_DATE_COLUMN": " Data Real ", "SLA_STD_COLUMN": ""}):
            overrides = column_overrides_from_env()
        self.assertEqual(overrides.get("landing"), "Data Real")
        self.assertNotIn("std", overrides)


if __name__ == "__main__":
    unittest.main()
