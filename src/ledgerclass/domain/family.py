"""Family grouping domain service."""

import math
from collections import Counter
from decimal import Decimal
from typing import Optional

import structlog

from ledgerclass.config import Settings
from ledgerclass.database.base import Database
from ledgerclass.domain.account_code import AccountCode, parse_account_code
from ledgerclass.domain.entities import (
    ClassificationStatus,
    ClassificationSuggestion,
    FamilyContext,
    FamilySibling,
    HierarchyLevel,
    LedgerRow,
)
from ledgerclass.domain.errors import (
    InvalidRequestError,
    MalformedCodeError,
    NotFoundError,
    missing_fields,
    report_not_found,
)
from ledgerclass.domain.recommendation import count_by_level, recommend
from ledgerclass.domain.status import classification_status, unset_classification

logger = structlog.get_logger(__name__)

UNKNOWN_FAMILY = "Unknown Family"


class FamilyService:
    """Service for inspecting account families within a report."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize family service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()

    def get_family_context(self, account_code: str, report_id: Optional[int]) -> FamilyContext:
        """Build the family context of an account within one report.

        Siblings are the family's rows at the same hierarchy level as
        account_code. Rows whose codes are malformed are left out and
        reported in skipped_codes.

        Args:
            account_code: Code under inspection
            report_id: Report to look in

        Returns:
            FamilyContext

        Raises:
            InvalidRequestError: If account_code or report_id is missing
            MalformedCodeError: If account_code is malformed
            NotFoundError: If the report does not exist
            StoreUnavailableError: If the store fails
        """
        target = self._parse_target(account_code, report_id)
        family_rows, skipped = self._load_family(target, report_id)

        siblings = tuple(
            self._to_sibling(row)
            for row, code in family_rows
            if code.level == target.level
        )
        classified = [s for s in siblings if s.status == ClassificationStatus.CLASSIFIED]
        unclassified = [s for s in siblings if s.status == ClassificationStatus.UNCLASSIFIED]

        total = len(siblings)
        completeness = (len(classified) / total) * 100 if total > 0 else 0.0
        missing_amount = sum((s.amount for s in unclassified), Decimal("0"))

        strategy = recommend(
            count_by_level(code.level for _, code in family_rows),
            target.level,
            detail_threshold=self.settings.detail_threshold,
        )

        context = FamilyContext(
            family_code=target.family_key,
            family_name=self._family_name(family_rows),
            hierarchy_level=target.level,
            siblings=siblings,
            classified_siblings=len(classified),
            unclassified_siblings=len(unclassified),
            total_siblings=total,
            completeness_percentage=completeness,
            recommended_approach=strategy,
            has_mixed_siblings=bool(classified) and bool(unclassified),
            missing_amount=missing_amount,
            skipped_codes=tuple(skipped),
        )
        logger.info(
            "family_context_built",
            family_code=context.family_code,
            level=int(context.hierarchy_level),
            total_siblings=total,
            completeness=round(completeness, 2),
            strategy=strategy.value,
        )
        return context

    def suggest_classification(
        self, account_code: str, label: Optional[str], report_id: Optional[int]
    ) -> ClassificationSuggestion:
        """Suggest a classification from the dominant pattern among classified siblings.

        The most frequent final classification wins when at least
        dominant_pattern_ratio of the classified siblings share it; the
        suggestion copies the full classification of the first sibling
        carrying it. Otherwise the sentinel classification is returned.

        Raises:
            InvalidRequestError: If account_code, label or report_id is missing
        """
        required = {"account_code": account_code, "label": label, "report_id": report_id}
        missing = [name for name, value in required.items() if value is None or value == ""]
        if missing:
            raise InvalidRequestError(missing_fields(*missing))
        context = self.get_family_context(account_code, report_id)
        classified = [
            s for s in context.siblings if s.status == ClassificationStatus.CLASSIFIED
        ]

        if classified:
            patterns = Counter(s.classification.classification for s in classified)
            dominant, count = patterns.most_common(1)[0]
            if count >= math.ceil(len(classified) * self.settings.dominant_pattern_ratio):
                example = next(s for s in classified if s.classification.classification == dominant)
                return ClassificationSuggestion(
                    classification=example.classification,
                    source="sibling_pattern",
                    confidence=self.settings.suggestion_confidence,
                    reasoning=(
                        f"{count} of {context.total_siblings} sibling accounts "
                        f"use the '{dominant}' classification."
                    ),
                    family_context=context,
                )

        return ClassificationSuggestion(
            classification=unset_classification(self.settings.sentinels),
            source="unclassified",
            confidence=0.0,
            reasoning=(
                f"Manual classification required for '{label}'. "
                f"Family is {context.completeness_percentage:.1f}% complete."
            ),
            family_context=context,
        )

    def _parse_target(self, account_code: str, report_id: Optional[int]) -> AccountCode:
        missing = []
        if not account_code:
            missing.append("account_code")
        if report_id is None or report_id == "":
            missing.append("report_id")
        if missing:
            raise InvalidRequestError(missing_fields(*missing))
        return parse_account_code(account_code)

    def _load_family(
        self, target: AccountCode, report_id: int
    ) -> tuple[list[tuple[LedgerRow, AccountCode]], list[str]]:
        if self.db.get_report(report_id) is None:
            raise NotFoundError(report_not_found(report_id))

        family_rows = []
        skipped = []
        for row in self.db.list_family_rows(report_id, target.family_key):
            try:
                code = parse_account_code(row.code)
            except MalformedCodeError:
                logger.debug("malformed_code_skipped", code=row.code, row_id=row.id)
                skipped.append(row.code)
                continue
            family_rows.append((row, code))
        return family_rows, skipped

    def _to_sibling(self, row: LedgerRow) -> FamilySibling:
        return FamilySibling(
            code=row.code,
            label=row.label or "",
            amount=row.amount if row.amount is not None else Decimal("0"),
            status=classification_status(row, self.settings.sentinels),
            classification=row.classification,
        )

    @staticmethod
    def _family_name(family_rows: list[tuple[LedgerRow, AccountCode]]) -> str:
        for row, code in family_rows:
            if code.level == HierarchyLevel.FAMILY_ROOT and row.label:
                return row.label
        if family_rows and family_rows[0][0].label:
            return family_rows[0][0].label
        return UNKNOWN_FAMILY
