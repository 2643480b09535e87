"""Ledger report domain service."""

import csv
from dataclasses import replace
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

import structlog

from ledgerclass.config import Settings
from ledgerclass.database.base import Database
from ledgerclass.domain.entities import (
    CLASSIFICATION_FIELDS,
    Classification,
    ClassificationSummary,
    HistoryEntry,
    NewLedgerRow,
    Report,
    SaveResult,
)
from ledgerclass.domain.errors import (
    ValidationError,
    missing_fields,
)
from ledgerclass.domain.status import is_classified
from ledgerclass.utils.amount_parser import parse_amount

logger = structlog.get_logger(__name__)

REQUIRED_CSV_COLUMNS = ("code", "label", "amount")


class LedgerService:
    """Service for storing reports and reading ledger rows back."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize ledger service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()

    def save_with_updated_classifications(
        self,
        rows: Optional[Sequence[NewLedgerRow]],
        report_name: Optional[str],
        file_name: Optional[str],
        month: Optional[int],
        year: Optional[int],
    ) -> SaveResult:
        """Create a report and store its rows with their current classifications.

        Rows without an amount are stored as such and count as zero in the total.

        Args:
            rows: Rows to store
            report_name: Report name
            file_name: Name of the uploaded file
            month: Report month (1-12)
            year: Report year

        Returns:
            SaveResult with the new report ID, row count and total absolute amount

        Raises:
            ValidationError: If any of the five inputs is missing or month is out of range
            StoreUnavailableError: If the store fails
        """
        required = {
            "data": rows,
            "report_name": report_name,
            "file_name": file_name,
            "month": month,
            "year": year,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValidationError(missing_fields(*missing))
        if not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month}")

        report_id = self.db.create_report(
            name=report_name,
            file_name=file_name,
            month=month,
            year=year,
            total_records=len(rows),
        )
        saved = self.db.add_ledger_rows(report_id, rows)
        total_amount = sum((abs(row.amount or Decimal("0")) for row in rows), Decimal("0"))

        logger.info(
            "report_saved",
            report_id=report_id,
            report_name=report_name,
            saved_records=saved,
            total_amount=str(total_amount),
        )
        return SaveResult(report_id=report_id, saved_records=saved, total_amount=total_amount)

    def apply_existing_rules(
        self, rows: Sequence[NewLedgerRow]
    ) -> tuple[list[NewLedgerRow], ClassificationSummary]:
        """Overlay active rules onto incoming rows by exact account code.

        Rows without a matching rule keep their own classification.

        Returns:
            Tuple of (classified rows, summary of what is still unclassified)
        """
        rules = {rule.account_code: rule for rule in self.db.list_active_rules()}

        processed = []
        for row in rows:
            rule = rules.get(row.code)
            if rule is not None:
                row = replace(row, classification=rule.classification)
            processed.append(row)

        classified = [row for row in processed if is_classified(row, self.settings.sentinels)]
        unclassified = [row for row in processed if not is_classified(row, self.settings.sentinels)]
        classified_amount = sum((abs(row.amount or Decimal("0")) for row in classified), Decimal("0"))
        unclassified_amount = sum((abs(row.amount or Decimal("0")) for row in unclassified), Decimal("0"))

        summary = ClassificationSummary(
            total_accounts=len(processed),
            classified_accounts=len(classified),
            unclassified_accounts=len(unclassified),
            total_amount=classified_amount + unclassified_amount,
            classified_amount=classified_amount,
            unclassified_amount=unclassified_amount,
            unclassified_rows=tuple(unclassified),
        )
        logger.info(
            "existing_rules_applied",
            rules=len(rules),
            total_accounts=summary.total_accounts,
            classified_accounts=summary.classified_accounts,
        )
        return processed, summary

    def get_classification_history(self, account_code: str) -> list[HistoryEntry]:
        """Return how an account code was classified in every report, newest first.

        Raises:
            ValidationError: If account_code is missing
        """
        if not account_code:
            raise ValidationError(missing_fields("account_code"))

        reports: dict[int, Optional[Report]] = {}
        history = []
        for row in self.db.list_rows_by_code(account_code):
            if row.report_id not in reports:
                reports[row.report_id] = self.db.get_report(row.report_id)
            report = reports[row.report_id]
            if report is None:
                continue
            history.append(
                HistoryEntry(
                    report_id=report.id,
                    report_name=report.name,
                    report_date=report.created_at,
                    amount=row.amount if row.amount is not None else Decimal("0"),
                    classification=row.classification,
                    applied_at=row.updated_at or row.created_at,
                )
            )
        return history

    def list_reports(self) -> list[Report]:
        return self.db.list_reports()

    def get_report(self, report_id: int) -> Optional[Report]:
        return self.db.get_report(report_id)

    def read_rows_csv(self, csv_file_path: str) -> list[NewLedgerRow]:
        """Read ledger rows from a CSV export.

        Required columns are code, label and amount; type, category_1,
        sub_category and classification are optional.

        Args:
            csv_file_path: Path to CSV file

        Returns:
            List of rows in file order

        Raises:
            ValidationError: If columns are missing or a row cannot be parsed
            FileNotFoundError: If the CSV file doesn't exist
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        rows = []
        with open(csv_path, "r", encoding="utf-8-sig") as f:
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                raise ValidationError("CSV file has no columns")
            missing_columns = [col for col in REQUIRED_CSV_COLUMNS if col not in reader.fieldnames]
            if missing_columns:
                raise ValidationError(f"CSV file missing required columns: {', '.join(missing_columns)}")

            for row_num, record in enumerate(reader, start=2):  # header is row 1
                code = (record.get("code") or "").strip()
                if not code:
                    raise ValidationError(f"Row {row_num}: Missing code")
                try:
                    amount = parse_amount(record.get("amount") or "")
                except ValueError as e:
                    raise ValidationError(f"Row {row_num}: {e}") from e

                classification = Classification(
                    **{name: (record.get(name) or "").strip() or None for name in CLASSIFICATION_FIELDS}
                )
                rows.append(
                    NewLedgerRow(
                        code=code,
                        label=(record.get("label") or "").strip() or None,
                        amount=amount,
                        classification=classification,
                    )
                )
        return rows
