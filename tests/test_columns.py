import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from flightsla.columns import (
    MissingColumnError,
    require_columns,
    resolve_column,
    resolve_columns,
)


class ResolveColumnTests(unittest.TestCase):
    def test_match_is_trimmed_and_case_insensitive(self):
        headers = ["ID Voo", "  previsão decolagem ", "Pouso"]
        self.assertEqual(resolve_column(headers, ("Previsão Decolagem", "STD")), "  previsão decolagem ")

    def test_first_header_in_sheet_order_wins(self):
        headers = ["STD", "Previsão Decolagem"]
        self.assertEqual(resolve_column(headers, ("Previsão Decolagem", "STD")), "STD")

    def test_no_match_is_empty(self):
        self.assertEqual(resolve_column(["A", "B"], ("C",)), "")

    def test_resolve_columns_maps_every_field(self):
        columns = resolve_columns(["ID Voo", "Pouso", "STD", "PAX"])
        self.assertEqual(columns.get("flight_id"), "ID Voo")
        self.assertEqual(columns.get("landing"), "Pouso")
        self.assertEqual(columns.get("std"), "STD")
        self.assertEqual(columns.get("pax"), "PAX")
        self.assertIn("bags", columns.missing)

    def test_override_pins_a_header(self):
        columns = resolve_columns(["Pouso", "Data Real"], overrides={"landing": "Data Real"})
        self.assertEqual(columns.get("landing"), "Data Real")

    def test_override_to_absent_header_is_unresolved(self):
        columns = resolve_columns(["Pouso"], overrides={"landing": "Nope"})
        self.assertEqual(columns.get("landing"), "")

    def test_value_of_unresolved_field_is_empty(self):
        columns = resolve_columns(["Pouso"])
        self.assertEqual(columns.value({"Pouso": "01/03/2025"}, "std"), "")
        self.assertEqual(columns.value({"Pouso": None}, "landing"), "")


class RequireColumnsTests(unittest.TestCase):
    def test_missing_landing_raises(self):
        columns = resolve_columns(["ID Voo", "STD"])
        with self.assertRaises(MissingColumnError) as ctx:
            require_columns(columns)
        self.assertEqual(ctx.exception.fields, ("landing",))
        self.assertIn("landing", str(ctx.exception))
        self.assertIsInstance(ctx.exception, KeyError)

    def test_present_landing_passes(self):
        require_columns(resolve_columns(["Pouso"]))


if __name__ == "__main__":
    unittest.main()
