import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from flightsla.columns import resolve_columns
from flightsla.lostfound import audit_lost_found, content_list_within_window, summarize_lost_found
from flightsla.schema import Table

HEADERS = [
    "ID Voo", "Pouso", "Horário de Corte (Anti Colisão)", "Horário Abertura AHL",
    "Horário Abertura OHD", "AHL Entregue a Transportadora", "Data/Hr Lista de Conteúdo Solicitada",
]
COLUMNS = resolve_columns(HEADERS)


def make_record(**values):
    record = {
        "ID Voo": "G3 1234",
        "Pouso": "05/03/2025 09:30",
        "Horário de Corte (Anti Colisão)": "10:00",
        "Horário Abertura AHL": "05/03/2025 11:00",
        "Horário Abertura OHD": "11:30",
        "AHL Entregue a Transportadora": "12:00",
        "Data/Hr Lista de Conteúdo Solicitada": "07/03/2025 10:00",
    }
    record.update(values)
    return record


def check(audit, key):
    return next(c for c in audit.checks if c.key == key)


class AuditLostFoundTests(unittest.TestCase):
    def test_all_within_target(self):
        audit = audit_lost_found(make_record(), COLUMNS)
        self.assertTrue(audit.compliant)
        self.assertEqual(check(audit, "ahl_open").target_display, "12:00")
        self.assertTrue(all(c.passed for c in audit.checks))

    def test_late_ohd_fails(self):
        audit = audit_lost_found(make_record(**{"Horário Abertura OHD": "12:30"}), COLUMNS)
        self.assertFalse(check(audit, "ohd_open").passed)
        self.assertFalse(audit.compliant)

    def test_missing_time_is_skipped(self):
        audit = audit_lost_found(make_record(**{"AHL Entregue a Transportadora": ""}), COLUMNS)
        self.assertTrue(check(audit, "ahl_delivered").skipped)
        self.assertTrue(audit.compliant)

    def test_missing_cutoff_skips_timed_checks(self):
        audit = audit_lost_found(make_record(**{"Horário de Corte (Anti Colisão)": ""}), COLUMNS)
        self.assertTrue(check(audit, "ahl_open").skipped)
        self.assertEqual(check(audit, "ahl_open").target_display, "--")

    def test_content_list_window_uses_full_dates(self):
        self.assertTrue(content_list_within_window(make_record(), COLUMNS))
        late = make_record(**{"Data/Hr Lista de Conteúdo Solicitada": "09/03/2025 12:00"})
        self.assertFalse(content_list_within_window(late, COLUMNS))
        exact = make_record(**{"Data/Hr Lista de Conteúdo Solicitada": "08/03/2025 11:00"})
        self.assertTrue(content_list_within_window(exact, COLUMNS))

    def test_content_list_without_dates_is_skipped(self):
        record = make_record(**{"Data/Hr Lista de Conteúdo Solicitada": ""})
        self.assertIsNone(content_list_within_window(record, COLUMNS))


class SummarizeLostFoundTests(unittest.TestCase):
    def test_rates(self):
        table = Table(
            headers=tuple(HEADERS),
            records=(
                make_record(),
                make_record(**{"Horário Abertura OHD": "12:30"}),
                make_record(**{"Horário Abertura OHD": ""}),
                make_record(**{"Pouso": "05/04/2025 09:30"}),
            ),
        )
        summary = summarize_lost_found(table, 3, 2025)
        self.assertEqual(summary.total, 3)
        self.assertEqual(summary.compliant, 2)
        self.assertEqual(summary.non_compliant, 1)

        rates = {r.key: r for r in summary.rates}
        self.assertEqual(rates["ohd_open"].evaluated, 2)
        self.assertEqual(rates["ohd_open"].ok, 1)
        self.assertEqual(rates["ohd_open"].rate, 50)
        self.assertEqual(rates["ahl_open"].rate, 100)
        self.assertEqual(rates["ahl_open"].target, 95)

    def test_nothing_evaluated_reports_full_rate(self):
        summary = summarize_lost_found(Table(headers=tuple(HEADERS), records=()), 3, 2025)
        self.assertEqual(summary.total, 0)
        self.assertTrue(all(r.rate == 100 for r in summary.rates))

    def test_rate_rounds_half_up(self):
        records = [make_record() for _ in range(7)] + [make_record(**{"Horário Abertura OHD": "12:30"})]
        summary = summarize_lost_found(Table(headers=tuple(HEADERS), records=tuple(records)), 3, 2025)
        rates = {r.key: r for r in summary.rates}
        # 7 / 8 = 87.5%
        self.assertEqual(rates["ohd_open"].rate, 88)


if __name__ == "__main__":
    unittest.main()
