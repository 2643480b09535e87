"""Tests for the ledger service."""

from decimal import Decimal

import pytest

from conftest import FUEL, make_row
from ledgerclass.domain.entities import Classification, NewLedgerRow
from ledgerclass.domain.errors import ValidationError


class TestSaveWithUpdatedClassifications:
    """Tests for LedgerService.save_with_updated_classifications."""

    def test_saves_report_and_rows(self, temp_db, ledger_service):
        rows = [
            make_row("5000-1000-001-001", "Gasoline", "400.00", FUEL),
            make_row("5000-1000-001-002", "Diesel", "-150.50"),
        ]

        result = ledger_service.save_with_updated_classifications(
            rows, report_name="March", file_name="march.csv", month=3, year=2024
        )

        assert result.saved_records == 2
        assert result.total_amount == Decimal("550.50")

        report = ledger_service.get_report(result.report_id)
        assert report.name == "March"
        assert report.file_name == "march.csv"
        assert report.total_records == 2

        stored = temp_db.list_report_rows(result.report_id)
        assert [r.code for r in stored] == ["5000-1000-001-001", "5000-1000-001-002"]
        assert stored[0].classification == FUEL
        assert stored[1].classification == Classification()
        assert stored[1].amount == Decimal("-150.50")

    def test_missing_inputs(self, ledger_service):
        with pytest.raises(ValidationError, match="data, report_name, file_name, month, year"):
            ledger_service.save_with_updated_classifications([], "", None, None, None)

    def test_invalid_month(self, ledger_service):
        with pytest.raises(ValidationError, match="Month must be between 1 and 12"):
            ledger_service.save_with_updated_classifications(
                [make_row("5000-1000-001-001", "Gasoline", "1")], "Bad", "bad.csv", 13, 2024
            )


class TestApplyExistingRules:
    """Tests for LedgerService.apply_existing_rules."""

    def test_rules_override_by_exact_code(self, rule_service, ledger_service):
        rule_service.create_rule(account_code="5000-1000-001-001", classification=FUEL, created_by="ana")
        rows = [
            make_row("5000-1000-001-001", "Gasoline", "400.00"),
            make_row("5000-1000-001-002", "Diesel", "-100.00"),
            make_row("5000-1000-001-003", "Lubricants", "50.00", FUEL),
        ]

        processed, summary = ledger_service.apply_existing_rules(rows)

        assert processed[0].classification == FUEL
        assert processed[1].classification == Classification()
        assert processed[2].classification == FUEL
        assert summary.total_accounts == 3
        assert summary.classified_accounts == 2
        assert summary.unclassified_accounts == 1
        assert summary.classified_amount == Decimal("450.00")
        assert summary.unclassified_amount == Decimal("100.00")
        assert summary.total_amount == Decimal("550.00")
        assert [r.code for r in summary.unclassified_rows] == ["5000-1000-001-002"]

    def test_inactive_rules_are_ignored(self, rule_service, ledger_service):
        rule_id = rule_service.create_rule(
            account_code="5000-1000-001-001", classification=FUEL, created_by="ana"
        )
        rule_service.deactivate_rule(rule_id, "ana")

        processed, summary = ledger_service.apply_existing_rules(
            [make_row("5000-1000-001-001", "Gasoline", "400.00")]
        )

        assert processed[0].classification == Classification()
        assert summary.classified_accounts == 0


class TestClassificationHistory:
    """Tests for LedgerService.get_classification_history."""

    def test_history_newest_first(self, ledger_service, save_report):
        january = save_report([make_row("5000-1000-001-001", "Gasoline", "10")], name="January")
        february = save_report(
            [make_row("5000-1000-001-001", "Gasoline", "20", FUEL)], name="February", month=2
        )

        history = ledger_service.get_classification_history("5000-1000-001-001")

        assert [entry.report_id for entry in history] == [february, january]
        assert history[0].report_name == "February"
        assert history[0].amount == Decimal("20")
        assert history[0].classification == FUEL
        assert history[1].classification == Classification()

    def test_unknown_code(self, ledger_service):
        assert ledger_service.get_classification_history("9999-9999-999-999") == []

    def test_missing_code(self, ledger_service):
        with pytest.raises(ValidationError):
            ledger_service.get_classification_history("")


class TestReadRowsCsv:
    """Tests for LedgerService.read_rows_csv."""

    def test_reads_sample_ledger(self, ledger_service, fixtures_dir):
        rows = ledger_service.read_rows_csv(str(fixtures_dir / "sample_ledger.csv"))

        assert len(rows) == 5
        assert rows[0].code == "5000-1000-000-000"
        assert rows[0].amount == Decimal("1000.00")
        assert rows[0].classification == Classification()
        assert rows[2].amount == Decimal("600.00")
        assert rows[2].classification == FUEL
        assert rows[3].amount == Decimal("-50.00")

    def test_semicolon_delimiter(self, ledger_service, tmp_path):
        csv_file = tmp_path / "ledger.csv"
        csv_file.write_text("code;label;amount\n5000-1000-001-001;Gasoline;12.50\n")

        rows = ledger_service.read_rows_csv(str(csv_file))

        assert rows[0].label == "Gasoline"
        assert rows[0].amount == Decimal("12.50")

    def test_missing_columns(self, ledger_service, tmp_path):
        csv_file = tmp_path / "ledger.csv"
        csv_file.write_text("code,label\n5000-1000-001-001,Gasoline\n")

        with pytest.raises(ValidationError, match="missing required columns: amount"):
            ledger_service.read_rows_csv(str(csv_file))

    def test_bad_amount_reports_row(self, ledger_service, tmp_path):
        csv_file = tmp_path / "ledger.csv"
        csv_file.write_text("code,label,amount\n5000-1000-001-001,Gasoline,abc\n")

        with pytest.raises(ValidationError, match="Row 2"):
            ledger_service.read_rows_csv(str(csv_file))

    def test_missing_file(self, ledger_service, tmp_path):
        with pytest.raises(FileNotFoundError):
            ledger_service.read_rows_csv(str(tmp_path / "nope.csv"))


def test_list_reports(ledger_service, save_report):
    first = save_report([make_row("5000-1000-001-001", "Gasoline", "1")], name="One")
    second = save_report([make_row("5000-1000-001-001", "Gasoline", "1")], name="Two")

    assert [r.id for r in ledger_service.list_reports()] == [second, first]


class TestRowsWithoutAmount:
    """Rows whose amount is missing count as zero."""

    def test_save_row_without_amount(self, temp_db, ledger_service):
        rows = [
            NewLedgerRow(code="5000-1000-001-001", label="Gasoline", amount=None),
            make_row("5000-1000-001-002", "Diesel", "-75.00"),
        ]

        result = ledger_service.save_with_updated_classifications(
            rows, report_name="R", file_name="r.csv", month=1, year=2024
        )

        assert result.saved_records == 2
        assert result.total_amount == Decimal("75.00")
        stored = temp_db.list_report_rows(result.report_id)
        assert stored[0].amount is None

    def test_apply_rules_to_row_without_amount(self, rule_service, ledger_service):
        rule_service.create_rule(account_code="5000-1000-001-001", classification=FUEL, created_by="ana")

        _, summary = ledger_service.apply_existing_rules(
            [
                NewLedgerRow(code="5000-1000-001-001", label="Gasoline", amount=None),
                NewLedgerRow(code="5000-1000-001-002", label="Diesel", amount=None),
            ]
        )

        assert summary.classified_accounts == 1
        assert summary.classified_amount == Decimal("0")
        assert summary.unclassified_amount == Decimal("0")
        assert summary.total_amount == Decimal("0")
