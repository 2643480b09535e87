"""Parent/child amount and double-counting validation for a report."""

from decimal import Decimal
from typing import Optional

import structlog

from ledgerclass.config import Settings
from ledgerclass.database.base import Database
from ledgerclass.domain.account_code import (
    AccountCode,
    is_descendant,
    is_direct_child,
    parent_code,
    parse_account_code,
)
from ledgerclass.domain.entities import (
    ApplyCheck,
    Classification,
    ConflictKind,
    FamilyConflict,
    HierarchyLevel,
    HierarchyVariance,
    LedgerRow,
    VarianceStatus,
)
from ledgerclass.domain.errors import (
    InvalidRequestError,
    MalformedCodeError,
    NotFoundError,
    missing_fields,
    report_not_found,
)
from ledgerclass.domain.family import UNKNOWN_FAMILY
from ledgerclass.domain.status import is_classified

logger = structlog.get_logger(__name__)

# Absolute difference still considered an exact match (rounding)
PERFECT_TOLERANCE = Decimal("1")
MINOR_VARIANCE_PERCENT = Decimal("1")
MAJOR_VARIANCE_PERCENT = Decimal("5")


def variance_status(variance: Decimal, variance_percentage: Decimal) -> VarianceStatus:
    if variance <= PERFECT_TOLERANCE:
        return VarianceStatus.PERFECT
    if variance_percentage <= MINOR_VARIANCE_PERCENT:
        return VarianceStatus.MINOR_VARIANCE
    if variance_percentage <= MAJOR_VARIANCE_PERCENT:
        return VarianceStatus.MAJOR_VARIANCE
    return VarianceStatus.CRITICAL_MISMATCH


def _amount(row: LedgerRow) -> Decimal:
    return row.amount if row.amount is not None else Decimal("0")


class HierarchyValidationService:
    """Service checking amounts and classifications across hierarchy levels."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize hierarchy validation service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()

    def validate_report(self, report_id: int) -> list[HierarchyVariance]:
        """Return every parent in the report whose children do not add up.

        Parents without direct children and parents that match within
        PERFECT_TOLERANCE are left out. Rows with malformed codes are skipped.

        Raises:
            NotFoundError: If the report does not exist
        """
        parsed = self._parsed_rows(report_id)

        results = []
        for parent_row, parent in parsed:
            if parent.level == HierarchyLevel.DETAIL:
                continue
            children = [row for row, code in parsed if is_direct_child(parent, code)]
            if not children:
                continue

            parent_amount = _amount(parent_row)
            children_sum = sum((_amount(row) for row in children), Decimal("0"))
            variance = abs(parent_amount - children_sum)
            percentage = (variance / abs(parent_amount)) * 100 if parent_amount != 0 else Decimal("0")

            status = variance_status(variance, percentage)
            # No percentage exists against a zero parent; any real gap is critical
            if parent_amount == 0 and status != VarianceStatus.PERFECT:
                status = VarianceStatus.CRITICAL_MISMATCH
            if status == VarianceStatus.PERFECT:
                continue
            results.append(
                HierarchyVariance(
                    parent_code=parent_row.code,
                    parent_name=parent_row.label,
                    parent_amount=parent_amount,
                    children_sum=children_sum,
                    variance=variance,
                    variance_percentage=percentage,
                    status=status,
                )
            )

        logger.info("hierarchy_validated", report_id=report_id, issues=len(results))
        return results

    def validate_before_apply(
        self,
        account_code: Optional[str],
        proposed: Optional[Classification],
        report_id: Optional[int],
    ) -> ApplyCheck:
        """Check that classifying an account would not count an amount twice.

        The classification is rejected when the account's parent is already
        classified, or when any account below it is. The parent check wins
        when both apply.

        Args:
            account_code: Account about to be classified
            proposed: Classification about to be applied
            report_id: Report holding the account

        Returns:
            ApplyCheck; valid is False with the conflict, the conflicting codes
            and the absolute amount that would be double counted

        Raises:
            InvalidRequestError: If account_code, proposed or report_id is missing
            MalformedCodeError: If account_code is malformed
            NotFoundError: If the report does not exist
        """
        missing = []
        if not account_code:
            missing.append("account_code")
        if proposed is None:
            missing.append("proposed")
        if report_id is None:
            missing.append("report_id")
        if missing:
            raise InvalidRequestError(missing_fields(*missing))

        target = parse_account_code(account_code)
        parsed = self._parsed_rows(report_id)
        sentinels = self.settings.sentinels

        parent = parent_code(target)
        for row, _ in parsed:
            if row.code == parent and is_classified(row, sentinels):
                logger.info("double_count_blocked", account_code=account_code, parent_code=parent)
                return ApplyCheck(
                    account_code=account_code,
                    valid=False,
                    conflict=ConflictKind.PARENT_ALREADY_CLASSIFIED,
                    conflicting_codes=(parent,),
                    financial_impact=abs(_amount(row)),
                    message=(
                        f"Parent account {parent} is already classified. "
                        "This would cause double-counting."
                    ),
                )

        children = [
            row
            for row, code in parsed
            if is_descendant(target, code) and is_classified(row, sentinels)
        ]
        if children:
            impact = sum((abs(_amount(row)) for row in children), Decimal("0"))
            logger.info(
                "double_count_blocked",
                account_code=account_code,
                classified_children=len(children),
            )
            return ApplyCheck(
                account_code=account_code,
                valid=False,
                conflict=ConflictKind.CHILDREN_ALREADY_CLASSIFIED,
                conflicting_codes=tuple(row.code for row in children),
                financial_impact=impact,
                message=(
                    f"{len(children)} child accounts are already classified. "
                    "This would cause double-counting."
                ),
            )

        return ApplyCheck(account_code=account_code, valid=True)

    def validate_families(self, report_id: int) -> list[FamilyConflict]:
        """Find classified parents whose classified descendants are counted again.

        Returns:
            One FamilyConflict per such parent, largest financial impact first

        Raises:
            NotFoundError: If the report does not exist
        """
        parsed = self._parsed_rows(report_id)
        sentinels = self.settings.sentinels

        family_names = {
            code.family_key: row.label
            for row, code in parsed
            if code.level == HierarchyLevel.FAMILY_ROOT and row.label
        }

        conflicts = []
        for parent_row, parent in parsed:
            if parent.level == HierarchyLevel.DETAIL or not is_classified(parent_row, sentinels):
                continue
            descendants = [
                row
                for row, code in parsed
                if is_descendant(parent, code) and is_classified(row, sentinels)
            ]
            if not descendants:
                continue
            conflicts.append(
                FamilyConflict(
                    family_code=parent.family_key,
                    family_name=family_names.get(parent.family_key) or parent_row.label or UNKNOWN_FAMILY,
                    parent_code=parent_row.code,
                    parent_amount=_amount(parent_row),
                    classified_descendants=tuple(row.code for row in descendants),
                    financial_impact=sum((abs(_amount(row)) for row in descendants), Decimal("0")),
                )
            )

        conflicts.sort(key=lambda c: (-c.financial_impact, c.parent_code))
        logger.info("families_validated", report_id=report_id, conflicts=len(conflicts))
        return conflicts

    def _parsed_rows(self, report_id: int) -> list[tuple[LedgerRow, AccountCode]]:
        if self.db.get_report(report_id) is None:
            raise NotFoundError(report_not_found(report_id))

        parsed = []
        for row in self.db.list_report_rows(report_id):
            try:
                parsed.append((row, parse_account_code(row.code)))
            except MalformedCodeError:
                logger.debug("malformed_code_skipped", code=row.code, row_id=row.id)
        return parsed
