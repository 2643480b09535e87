"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Sequence

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerclass.domain.entities import (
    Classification,
    ClassificationRule,
    LedgerRow,
    NewLedgerRow,
    Report,
)


class Database(ABC):
    """Abstract store for reports, ledger rows and classification rules.

    Implementations raise StoreUnavailableError when the underlying store
    fails and NotFoundError when an update targets a missing record.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Report operations
    @abstractmethod
    def create_report(
        self, name: str, file_name: str, month: int, year: int, total_records: int
    ) -> int:
        """Create a report. Returns report ID."""
        pass

    @abstractmethod
    def get_report(self, report_id: int) -> Optional[Report]:
        """Get report by ID."""
        pass

    @abstractmethod
    def list_reports(self) -> list[Report]:
        """List all reports, newest first."""
        pass

    # Ledger row operations
    @abstractmethod
    def add_ledger_rows(self, report_id: int, rows: Sequence[NewLedgerRow]) -> int:
        """Store rows under a report. Returns number of rows stored."""
        pass

    @abstractmethod
    def get_ledger_row(self, row_id: int) -> Optional[LedgerRow]:
        """Get ledger row by ID."""
        pass

    @abstractmethod
    def list_report_rows(self, report_id: int) -> list[LedgerRow]:
        """List every row of a report ordered by code."""
        pass

    @abstractmethod
    def list_family_rows(self, report_id: int, family_key: str) -> list[LedgerRow]:
        """List rows of a report whose code starts with family_key, ordered by code."""
        pass

    @abstractmethod
    def list_rows_by_code(self, account_code: str) -> list[LedgerRow]:
        """List rows with exactly this code across all reports, newest report first."""
        pass

    @abstractmethod
    def update_row_classification(self, row_id: int, classification: Classification) -> None:
        """Overwrite the four classification fields of a row."""
        pass

    # Classification rule operations
    @abstractmethod
    def create_rule(
        self,
        account_code: str,
        classification: Classification,
        hierarchy_level: int,
        family_code: str,
        created_by: str,
        account_name: Optional[str] = None,
        effective_from: Optional[datetime] = None,
        effective_to: Optional[datetime] = None,
    ) -> int:
        """Create an active classification rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[ClassificationRule]:
        """Get rule by ID, active or not."""
        pass

    @abstractmethod
    def get_active_rule_by_code(self, account_code: str) -> Optional[ClassificationRule]:
        """Get the active rule for an account code."""
        pass

    @abstractmethod
    def list_active_rules(self) -> list[ClassificationRule]:
        """List active rules ordered by account code."""
        pass

    @abstractmethod
    def update_rule_classification(
        self, rule_id: int, classification: Classification, updated_by: Optional[str] = None
    ) -> None:
        """Overwrite a rule's classification fields and stamp its update time."""
        pass

    @abstractmethod
    def deactivate_rule(self, rule_id: int, updated_by: Optional[str] = None) -> None:
        """Mark a rule inactive. Rules are never hard-deleted."""
        pass
