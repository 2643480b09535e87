"""Classification rule domain service."""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from ledgerclass.config import Settings
from ledgerclass.database.base import Database
from ledgerclass.domain.account_code import parse_account_code
from ledgerclass.domain.entities import (
    Classification,
    ClassificationRule,
    RecordChange,
    RetroactiveImpact,
    RuleListing,
    RuleUpsertSummary,
)
from ledgerclass.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_active_rule,
    missing_fields,
    rule_not_found,
)
from ledgerclass.domain.retroactive import RetroactiveService, Updates

logger = structlog.get_logger(__name__)


class RuleService:
    """Service for managing classification rules."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize rule service.

        Args:
            db: Database instance
            settings: Engine settings (defaults to Settings())
        """
        self.db = db
        self.settings = settings or Settings()
        self.retroactive = RetroactiveService(db, self.settings)

    def list_active_rules(self) -> list[RuleListing]:
        """List active rules ordered by account code.

        Usage counts are always 0; counting rows per rule is not done here.
        """
        return [
            RuleListing(
                rule=rule,
                usage_count=0,
                last_modified=rule.updated_at or rule.created_at,
            )
            for rule in self.db.list_active_rules()
        ]

    def get_rule(self, rule_id: int) -> Optional[ClassificationRule]:
        """Get rule by ID.

        Args:
            rule_id: Rule ID

        Returns:
            ClassificationRule or None if not found
        """
        return self.db.get_rule(rule_id)

    def get_active_rule_for_code(self, account_code: str) -> Optional[ClassificationRule]:
        return self.db.get_active_rule_by_code(account_code)

    def create_rule(
        self,
        account_code: str,
        classification: Classification,
        created_by: str,
        account_name: Optional[str] = None,
        effective_from: Optional[datetime] = None,
        effective_to: Optional[datetime] = None,
    ) -> int:
        """Create an active rule for an account code.

        Hierarchy level and family code are derived from the code.

        Returns:
            Rule ID

        Raises:
            ValidationError: If the code or creator is missing, or the window is inverted
            MalformedCodeError: If the code is malformed
            ConflictError: If the code already has an active rule
        """
        missing = [name for name, value in (("account_code", account_code), ("created_by", created_by)) if not value]
        if missing:
            raise ValidationError(missing_fields(*missing))
        if effective_from and effective_to and effective_to < effective_from:
            raise ValidationError("effective_to must not be earlier than effective_from")

        code = parse_account_code(account_code)
        existing = self.db.get_active_rule_by_code(account_code)
        if existing is not None:
            raise ConflictError(duplicate_active_rule(account_code, existing.id))

        rule_id = self.db.create_rule(
            account_code=account_code,
            classification=classification,
            hierarchy_level=code.level,
            family_code=code.family_key,
            created_by=created_by,
            account_name=account_name,
            effective_from=effective_from,
            effective_to=effective_to,
        )
        logger.info("rule_created", rule_id=rule_id, account_code=account_code, created_by=created_by)
        return rule_id

    def update_rule(
        self,
        rule_id: Optional[int],
        updates: Optional[Updates],
        user_id: Optional[str],
        apply_retroactively: bool = False,
    ) -> tuple[int, RetroactiveImpact]:
        """Update a rule, optionally rewriting historical rows.

        Returns:
            Tuple of (rule ID, impact)
        """
        impact = self.retroactive.apply_rule(rule_id, updates, user_id, retroactive=apply_retroactively)
        return rule_id, impact

    def deactivate_rule(self, rule_id: int, acting_user: str) -> None:
        """Soft-delete a rule.

        Raises:
            ValidationError: If acting_user is missing
            NotFoundError: If the rule does not exist
        """
        if not acting_user:
            raise ValidationError(missing_fields("acting_user"))
        rule = self.db.get_rule(rule_id)
        if rule is None:
            raise NotFoundError(rule_not_found(rule_id))
        self.db.deactivate_rule(rule_id, updated_by=acting_user)
        logger.info("rule_deactivated", rule_id=rule_id, acting_user=acting_user)

    def upsert_rule_for_account(
        self,
        account_code: Optional[str],
        classification: Optional[Classification],
        user_id: Optional[str],
        effective_from: Optional[datetime] = None,
        apply_to_all_reports: bool = False,
    ) -> tuple[int, RetroactiveImpact]:
        """Set the classification of an account code, creating its rule if needed.

        Unlike update_rule, the given classification replaces all four fields.

        Returns:
            Tuple of (rule ID, impact)

        Raises:
            ValidationError: If account_code, classification or user_id is missing
            MalformedCodeError: If the code is malformed
            StoreUnavailableError: If the rule cannot be stored or affected rows cannot be listed
        """
        missing = []
        if not account_code:
            missing.append("account_code")
        if classification is None:
            missing.append("classification")
        if not user_id:
            missing.append("user_id")
        if missing:
            raise ValidationError(missing_fields(*missing))

        code = parse_account_code(account_code)
        existing = self.db.get_active_rule_by_code(account_code)
        if existing is not None:
            self.db.update_rule_classification(existing.id, classification, updated_by=user_id)
            rule_id = existing.id
            logger.info("rule_updated", rule_id=rule_id, account_code=account_code, acting_user=user_id)
        else:
            rule_id = self.create_rule(
                account_code=account_code,
                classification=classification,
                created_by=user_id,
                effective_from=effective_from,
            )

        if not apply_to_all_reports:
            return rule_id, self.retroactive.empty_impact(code.family_key)
        return rule_id, self.retroactive.propagate(account_code, code.family_key, classification)

    def update_rules_for_future(
        self, changes: Iterable[RecordChange], user_id: Optional[str]
    ) -> RuleUpsertSummary:
        """Upsert one rule per changed account so future reports pick it up.

        Args:
            changes: Classification changes made by a user
            user_id: User making the changes

        Returns:
            RuleUpsertSummary with counts and the summed absolute amounts

        Raises:
            ValidationError: If user_id is missing
        """
        if not user_id:
            raise ValidationError(missing_fields("user_id"))

        created = 0
        updated = 0
        total_impact = Decimal("0")
        for change in changes:
            total_impact += abs(change.amount)
            existing = self.db.get_active_rule_by_code(change.account_code)
            if existing is not None:
                self.db.update_rule_classification(
                    existing.id, change.new_classification, updated_by=user_id
                )
                updated += 1
            else:
                self.create_rule(
                    account_code=change.account_code,
                    classification=change.new_classification,
                    created_by=user_id,
                )
                created += 1

        logger.info("rules_updated_for_future", created=created, updated=updated, user_id=user_id)
        return RuleUpsertSummary(created=created, updated=updated, total_impact=total_impact)
