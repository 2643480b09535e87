"""Retroactive rule application domain service."""

from decimal import Decimal
from typing import Mapping, Optional, Union

import structlog

from ledgerclass.config import Settings
from ledgerclass.database.base import Database
from ledgerclass.domain.entities import (
    CLASSIFICATION_FIELDS,
    Classification,
    RecordChange,
    RecordFailure,
    RetroactiveImpact,
)
from ledgerclass.domain.errors import (
    DomainError,
    NotFoundError,
    ValidationError,
    missing_fields,
    rule_not_found,
)

logger = structlog.get_logger(__name__)

Updates = Union[Classification, Mapping[str, Optional[str]]]


def normalize_updates(updates: Optional[Updates]) -> dict[str, Optional[str]]:
    """Return updates as a dict of classification fields.

    Raises:
        ValidationError: If updates carries a key that is not a classification field
    """
    if updates is None:
        return {}
    if isinstance(updates, Classification):
        return updates.as_dict()
    unknown = sorted(set(updates) - set(CLASSIFICATION_FIELDS))
    if unknown:
        raise ValidationError(
            f"Unknown classification field(s): {', '.join(unknown)}. "
            f"Expected: {', '.join(CLASSIFICATION_FIELDS)}"
        )
    return dict(updates)


class RetroactiveService:
    """Service that rewrites a rule and, optionally, every ledger row it governs."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize retroactive service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()

    def apply_rule(
        self,
        rule_id: Optional[int],
        updates: Optional[Updates],
        acting_user: Optional[str],
        retroactive: bool = False,
    ) -> RetroactiveImpact:
        """Update a rule and optionally propagate it to historical rows.

        Fields omitted from updates (or given as empty) keep the rule's
        current value. With retroactive=True every ledger row whose code
        equals the rule's account code, in any report, is rewritten with the
        merged classification. Rows are written one at a time without an
        enclosing transaction; a failed row is recorded in the impact's
        failures and does not stop the batch.

        Args:
            rule_id: Rule to update
            updates: Partial classification fields
            acting_user: User making the change
            retroactive: Whether to rewrite matching ledger rows

        Returns:
            RetroactiveImpact for this pass

        Raises:
            ValidationError: If rule_id, updates or acting_user is missing
            NotFoundError: If the rule does not exist
            StoreUnavailableError: If the rule update itself fails
        """
        missing = []
        if rule_id is None:
            missing.append("rule_id")
        if not updates:
            missing.append("updates")
        if not acting_user:
            missing.append("acting_user")
        if missing:
            raise ValidationError(missing_fields(*missing))
        changes = normalize_updates(updates)

        rule = self.db.get_rule(rule_id)
        if rule is None:
            raise NotFoundError(rule_not_found(rule_id))

        merged = rule.classification.merged(changes)
        self.db.update_rule_classification(rule.id, merged, updated_by=acting_user)
        logger.info(
            "rule_updated",
            rule_id=rule.id,
            account_code=rule.account_code,
            acting_user=acting_user,
            retroactive=retroactive,
        )

        if not retroactive:
            return self.empty_impact(rule.family_code)
        return self.propagate(rule.account_code, rule.family_code, merged)

    def propagate(
        self, account_code: str, family_code: str, classification: Classification
    ) -> RetroactiveImpact:
        """Write classification onto every row with exactly account_code.

        Args:
            account_code: Code to match
            family_code: Family reported in the impact
            classification: Classification to write

        Returns:
            RetroactiveImpact

        Raises:
            StoreUnavailableError: If the affected rows cannot be listed
        """
        changes: list[RecordChange] = []
        failures: list[RecordFailure] = []
        affected_reports: list[int] = []
        total_impact = Decimal("0")

        for row in self.db.list_rows_by_code(account_code):
            amount = row.amount if row.amount is not None else Decimal("0")
            try:
                self.db.update_row_classification(row.id, classification)
            except DomainError as e:
                logger.warning(
                    "retroactive_row_failed",
                    row_id=row.id,
                    report_id=row.report_id,
                    account_code=account_code,
                    error=str(e),
                )
                failures.append(RecordFailure(row_id=row.id, report_id=row.report_id, reason=str(e)))
                continue

            changes.append(
                RecordChange(
                    row_id=row.id,
                    report_id=row.report_id,
                    account_code=account_code,
                    old_classification=row.classification,
                    new_classification=classification,
                    amount=amount,
                )
            )
            if row.report_id not in affected_reports:
                affected_reports.append(row.report_id)
            total_impact += abs(amount)

        impact = RetroactiveImpact(
            family_code=family_code,
            affected_records=len(changes),
            affected_reports=tuple(affected_reports),
            total_financial_impact=total_impact,
            changes=tuple(changes),
            failures=tuple(failures),
            estimated_processing_time=len(changes) * self.settings.seconds_per_record,
        )
        self._log_impact(account_code, impact)
        return impact

    def empty_impact(self, family_code: str) -> RetroactiveImpact:
        """Impact of a change that touched no ledger rows."""
        return RetroactiveImpact(
            family_code=family_code,
            affected_records=0,
            affected_reports=(),
            total_financial_impact=Decimal("0"),
            changes=(),
            failures=(),
            estimated_processing_time=0.0,
        )

    def _log_impact(self, account_code: str, impact: RetroactiveImpact) -> None:
        significant = (
            impact.affected_records > self.settings.significant_change_records
            or impact.total_financial_impact > self.settings.significant_change_amount
        )
        log = logger.warning if significant else logger.info
        log(
            "retroactive_changes_applied",
            account_code=account_code,
            affected_records=impact.affected_records,
            affected_reports=len(impact.affected_reports),
            total_financial_impact=str(impact.total_financial_impact),
            failed_records=len(impact.failures),
            significant=significant,
        )
