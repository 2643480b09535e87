"""Tests for classification rule management."""

from datetime import datetime, UTC
from decimal import Decimal

import pytest

from conftest import FUEL, make_row
from ledgerclass.domain.entities import Classification, HierarchyLevel, RecordChange
from ledgerclass.domain.errors import (
    ConflictError,
    MalformedCodeError,
    NotFoundError,
    ValidationError,
)

CODE = "5000-1000-001-002"


class TestCreateRule:
    """Tests for RuleService.create_rule."""

    def test_create_derives_level_and_family(self, rule_service):
        rule_id = rule_service.create_rule(
            account_code=CODE, classification=FUEL, created_by="ana", account_name="Diesel"
        )

        rule = rule_service.get_rule(rule_id)
        assert rule.account_code == CODE
        assert rule.account_name == "Diesel"
        assert rule.hierarchy_level == HierarchyLevel.DETAIL
        assert rule.family_code == "5000-1000"
        assert rule.classification == FUEL
        assert rule.created_by == "ana"
        assert rule.is_active is True
        assert rule.effective_from is not None

    def test_duplicate_active_rule(self, rule_service):
        rule_id = rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")

        with pytest.raises(ConflictError, match=f"ID: {rule_id}"):
            rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="bob")

    def test_recreate_after_deactivation(self, rule_service):
        rule_id = rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")
        rule_service.deactivate_rule(rule_id, "ana")

        new_id = rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")
        assert new_id != rule_id
        assert rule_service.get_active_rule_for_code(CODE).id == new_id

    def test_malformed_code(self, rule_service):
        with pytest.raises(MalformedCodeError):
            rule_service.create_rule(account_code="5000-1000", classification=FUEL, created_by="ana")

    def test_missing_creator(self, rule_service):
        with pytest.raises(ValidationError, match="created_by"):
            rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="")

    def test_inverted_window(self, rule_service):
        with pytest.raises(ValidationError, match="effective_to"):
            rule_service.create_rule(
                account_code=CODE,
                classification=FUEL,
                created_by="ana",
                effective_from=datetime(2024, 6, 1, tzinfo=UTC),
                effective_to=datetime(2024, 1, 1, tzinfo=UTC),
            )


class TestListAndDeactivate:
    """Tests for listing and deactivating rules."""

    def test_list_active_rules(self, rule_service):
        second = rule_service.create_rule(account_code="5000-1000-001-003", classification=FUEL, created_by="ana")
        first = rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")
        rule_service.deactivate_rule(second, "ana")

        listings = rule_service.list_active_rules()

        assert [listing.rule.id for listing in listings] == [first]
        assert listings[0].usage_count == 0
        assert listings[0].last_modified == listings[0].rule.created_at

    def test_last_modified_follows_updates(self, rule_service):
        rule_id = rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")
        rule_service.update_rule(rule_id, {"sub_category": "Diesel"}, "bob")

        listing = rule_service.list_active_rules()[0]
        assert listing.last_modified == listing.rule.updated_at

    def test_deactivate_keeps_rule(self, rule_service):
        rule_id = rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")
        rule_service.deactivate_rule(rule_id, "bob")

        rule = rule_service.get_rule(rule_id)
        assert rule.is_active is False
        assert rule.updated_by == "bob"
        assert rule_service.get_active_rule_for_code(CODE) is None

    def test_deactivate_unknown_rule(self, rule_service):
        with pytest.raises(NotFoundError):
            rule_service.deactivate_rule(99, "ana")


class TestUpdateRule:
    """Tests for RuleService.update_rule."""

    def test_update_returns_rule_id_and_impact(self, rule_service, save_report):
        save_report([make_row(CODE, "Diesel", "120.00", FUEL)])
        rule_id = rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")

        updated_id, impact = rule_service.update_rule(
            rule_id, {"classification": "COGS"}, "ana", apply_retroactively=True
        )

        assert updated_id == rule_id
        assert impact.affected_records == 1
        assert impact.total_financial_impact == Decimal("120.00")


class TestUpsertRuleForAccount:
    """Tests for RuleService.upsert_rule_for_account."""

    def test_creates_rule_when_missing(self, rule_service):
        rule_id, impact = rule_service.upsert_rule_for_account(CODE, FUEL, "ana")

        assert rule_service.get_rule(rule_id).classification == FUEL
        assert impact.affected_records == 0
        assert impact.family_code == "5000-1000"

    def test_replaces_existing_classification(self, rule_service):
        rule_id = rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")
        partial = Classification(type="Income")

        upserted_id, _ = rule_service.upsert_rule_for_account(CODE, partial, "bob")

        rule = rule_service.get_rule(upserted_id)
        assert upserted_id == rule_id
        assert rule.classification == partial
        assert rule.updated_by == "bob"

    def test_applies_to_all_reports(self, temp_db, rule_service, save_report):
        first = save_report([make_row(CODE, "Diesel", "100.00")], name="January")
        second = save_report([make_row(CODE, "Diesel", "-40.00")], name="February", month=2)

        _, impact = rule_service.upsert_rule_for_account(CODE, FUEL, "ana", apply_to_all_reports=True)

        assert impact.affected_records == 2
        assert sorted(impact.affected_reports) == sorted([first, second])
        assert impact.total_financial_impact == Decimal("140.00")
        assert all(row.classification == FUEL for row in temp_db.list_rows_by_code(CODE))

    def test_missing_inputs(self, rule_service):
        with pytest.raises(ValidationError, match="account_code, classification, user_id"):
            rule_service.upsert_rule_for_account("", None, None)


class TestUpdateRulesForFuture:
    """Tests for RuleService.update_rules_for_future."""

    def _change(self, code, amount, new):
        return RecordChange(
            row_id=1,
            report_id=1,
            account_code=code,
            old_classification=Classification(),
            new_classification=new,
            amount=Decimal(amount),
        )

    def test_creates_and_updates(self, rule_service):
        rule_service.create_rule(account_code=CODE, classification=FUEL, created_by="ana")
        changes = [
            self._change(CODE, "-100.00", FUEL.merged({"classification": "COGS"})),
            self._change("5000-1000-001-009", "50.00", FUEL),
        ]

        summary = rule_service.update_rules_for_future(changes, "bob")

        assert summary.created == 1
        assert summary.updated == 1
        assert summary.total_impact == Decimal("150.00")
        assert rule_service.get_active_rule_for_code(CODE).classification.classification == "COGS"
        assert rule_service.get_active_rule_for_code("5000-1000-001-009").created_by == "bob"

    def test_missing_user(self, rule_service):
        with pytest.raises(ValidationError, match="user_id"):
            rule_service.update_rules_for_future([], "")
