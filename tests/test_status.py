"""Tests for classification status evaluation."""

from datetime import datetime, UTC
from decimal import Decimal

import pytest

from ledgerclass.config import Sentinels
from ledgerclass.domain.entities import Classification, ClassificationStatus, LedgerRow
from ledgerclass.domain.status import classification_status, is_classified, unset_classification


def test_complete_classification_is_classified():
    classification = Classification("Expense", "Operations", "Fuel", "Operating Expense")
    assert classification_status(classification) == ClassificationStatus.CLASSIFIED


@pytest.mark.parametrize(
    "field,value",
    [
        ("type", None),
        ("type", ""),
        ("type", "Undefined"),
        ("category_1", "No Category"),
        ("sub_category", None),
        ("classification", "No Classification"),
    ],
)
def test_missing_or_sentinel_field_is_unclassified(field, value):
    values = {
        "type": "Expense",
        "category_1": "Operations",
        "sub_category": "Fuel",
        "classification": "Operating Expense",
    }
    values[field] = value
    assert classification_status(Classification(**values)) == ClassificationStatus.UNCLASSIFIED


def test_status_of_ledger_row():
    row = LedgerRow(
        id=1,
        report_id=1,
        code="4100-1000-001-001",
        label="Sales",
        amount=Decimal("10"),
        classification=Classification("Income", "Sales", "Domestic", "Revenue"),
        created_at=datetime.now(UTC),
    )
    assert is_classified(row)


def test_custom_sentinels():
    sentinels = Sentinels(type="N/A")
    classification = Classification("Undefined", "Operations", "Fuel", "Operating Expense")

    assert is_classified(classification, sentinels)
    assert not is_classified(classification.merged({"type": "N/A"}), sentinels)


def test_unset_classification_uses_sentinels():
    unset = unset_classification()

    assert unset == Classification("Undefined", "No Category", None, "No Classification")
    assert not is_classified(unset)


def test_sub_category_needs_presence_only():
    classification = Classification("Expense", "Operations", "No Subcategory", "Operating Expense")

    assert is_classified(classification)
    assert not is_classified(classification, Sentinels(sub_category="No Subcategory"))
